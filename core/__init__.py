"""
Core module for the resume builder.

This package contains the non-agent components that form the backbone of the
application: configuration, the data model, typed errors, persistence, the
Gemini API client, document rendering, the resume workflow and the editor
session state machine.

Only leaf modules are re-exported here; import the workflow and the session
from their own modules (`core.resume_workflow`, `core.editor_session`).
"""

from .config import AppConfig
from .errors import (
    AIQuotaError,
    AIServiceError,
    AuthError,
    ConfigError,
    EmptyResultError,
    NotFoundError,
    RenderError,
    ResumeBuilderError,
    StoreError,
    ValidationError,
)
from .models import Account, ContactInfo, ResumeDocument, ResumeEntry, ResumeFormState

__all__ = [
    "AppConfig",
    "Account",
    "ContactInfo",
    "ResumeDocument",
    "ResumeEntry",
    "ResumeFormState",
    "ResumeBuilderError",
    "AuthError",
    "NotFoundError",
    "ValidationError",
    "ConfigError",
    "EmptyResultError",
    "AIServiceError",
    "AIQuotaError",
    "RenderError",
    "StoreError",
]
