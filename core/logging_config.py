import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# Third-party loggers that are too chatty at INFO.
_QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "google_genai", "google.auth")


def configure_logging(level: str = "INFO"):
    """Configure root logging once for the CLI and the API server."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
