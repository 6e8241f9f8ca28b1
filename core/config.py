"""
Application configuration, read from the environment (and a local .env file).

The workflow receives an `AppConfig` at construction instead of reading
environment variables itself, so whether the AI feature is available is a
property of the config object rather than of process-wide globals.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_INDUSTRY = "Technology"


class AppConfig(BaseModel):
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_timeout_ms: int = 30000
    default_industry: str = DEFAULT_INDUSTRY
    store_backend: str = "firestore"
    store_path: str = "data/resumes.json"
    firebase_credentials: Optional[str] = None
    log_level: str = "INFO"

    @property
    def ai_available(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key.strip())

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "AppConfig":
        if dotenv:
            load_dotenv()
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_timeout_ms=int(os.getenv("GEMINI_TIMEOUT_MS", "30000")),
            default_industry=os.getenv("DEFAULT_INDUSTRY", DEFAULT_INDUSTRY),
            store_backend=os.getenv("RESUME_STORE", "firestore").lower(),
            store_path=os.getenv("RESUME_STORE_PATH", "data/resumes.json"),
            firebase_credentials=os.getenv("FIREBASE_CREDENTIALS") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
