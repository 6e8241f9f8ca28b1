"""
Typed exceptions shared by the workflow, the HTTP API and the CLI.

Every error carries a user-facing message, a stable error code and the HTTP
status it maps to, so callers never have to inspect message text to decide
what went wrong.
"""
from typing import Optional


class ResumeBuilderError(Exception):
    """Base exception for all resume builder errors."""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[dict] = None):
        self.message = message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class AuthError(ResumeBuilderError):
    """No session, or the session could not be verified."""
    status_code = 401
    error_code = "AUTH_ERROR"

    def __init__(self, message: str = "Please log in to continue", details: Optional[dict] = None):
        super().__init__(message, self.error_code, details)


class NotFoundError(ResumeBuilderError):
    """The owner's account record is missing."""
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", details: Optional[dict] = None):
        super().__init__(f"{resource} not found", self.error_code, details)


class ValidationError(ResumeBuilderError):
    """Empty or malformed input."""
    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict] = None):
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, self.error_code, details)


class ConfigError(ResumeBuilderError):
    """A required external backend is not configured."""
    status_code = 503
    error_code = "CONFIG_ERROR"

    def __init__(self, message: str = "AI service is currently unavailable. Please check your API configuration",
                 details: Optional[dict] = None):
        super().__init__(message, self.error_code, details)


class EmptyResultError(ResumeBuilderError):
    """The backend answered but returned nothing usable."""
    status_code = 502
    error_code = "EMPTY_RESULT"

    def __init__(self, message: str = "AI service returned an empty response. Please try again",
                 details: Optional[dict] = None):
        super().__init__(message, self.error_code, details)


class AIServiceError(ResumeBuilderError):
    """The text-generation call itself failed."""
    status_code = 502
    error_code = "AI_SERVICE_ERROR"

    def __init__(self, message: str = "Failed to improve content with AI. Please try again",
                 details: Optional[dict] = None):
        super().__init__(message, self.error_code, details)


class AIQuotaError(AIServiceError):
    """The text-generation backend rejected the call for usage limits."""
    status_code = 429
    error_code = "AI_QUOTA_EXCEEDED"

    def __init__(self, message: str = "AI service is temporarily unavailable due to usage limits. Please try again later",
                 details: Optional[dict] = None):
        super().__init__(message, details)


class RenderError(ResumeBuilderError):
    """Generating the downloadable artifact failed."""
    status_code = 500
    error_code = "RENDER_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(f"Failed to generate document: {message}", self.error_code, details)


class StoreError(ResumeBuilderError):
    """The persistence layer failed."""
    status_code = 500
    error_code = "STORE_ERROR"

    def __init__(self, message: str = "Database error. Please try again later", details: Optional[dict] = None):
        super().__init__(message, self.error_code, details)
