import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .errors import AIQuotaError, AIServiceError, ConfigError


class GeminiClient:
    """
    A thin client for the Google Gemini API using the Google GenAI SDK.

    Each call to `generate_text` is a single request: there is no retry loop,
    only the request timeout configured here. SDK failures are translated into
    the typed errors from `core.errors` using the HTTP status code of the
    failed call.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", timeout_ms: int = 30000):
        """
        Args:
            api_key: The Google AI API key.
            model_name: The Gemini model to use (e.g., "gemini-2.5-pro").
            timeout_ms: Per-request timeout in milliseconds.
        """
        if not api_key:
            raise ConfigError("API key for Gemini client cannot be None or empty.")

        self.client = genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout_ms))
        self.model_name = model_name
        logging.info(f"GeminiClient initialized with model: {self.model_name}")

    def generate_text(self, prompt: str) -> str:
        """
        Generates text with the configured model.

        Returns:
            The generated text, or an empty string if the response was empty or blocked.

        Raises:
            AIQuotaError: The API rejected the call for usage limits (HTTP 429).
            ConfigError: The API rejected the credential (HTTP 401/403).
            AIServiceError: Any other API failure, a timeout or a connection error.
        """
        try:
            logging.info("Sending prompt to Gemini API...")
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt
            )
        except genai_errors.APIError as e:
            logging.error(f"Gemini API call failed with status {e.code}: {e.message}")
            if e.code == 429:
                raise AIQuotaError(details={"status": e.code}) from e
            if e.code in (401, 403):
                raise ConfigError("AI service configuration error. Please contact support",
                                  details={"status": e.code}) from e
            raise AIServiceError(details={"status": e.code}) from e
        except httpx.TimeoutException as e:
            logging.error(f"Gemini API call timed out: {e}")
            raise AIServiceError("AI service took too long to respond. Please try again",
                                 details={"reason": "timeout"}) from e
        except httpx.TransportError as e:
            logging.error(f"Could not reach Gemini API: {type(e).__name__}: {e}")
            raise AIServiceError(details={"reason": type(e).__name__}) from e

        if response.text:
            return response.text
        logging.warning("Gemini API returned an empty or blocked response.")
        return ""
