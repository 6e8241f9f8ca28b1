import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from agents.content_improvement_agent import ContentImprovementAgent, normalize_section_type
from agents.resume_markdown_agent import assemble

from .config import AppConfig
from .errors import AuthError, ConfigError, NotFoundError, RenderError, ResumeBuilderError, ValidationError
from .gemini_client import GeminiClient
from .models import Account, ResumeDocument
from .pdf_docx_generator import render_resume
from .resume_store import ResumeStore

Renderer = Callable[[Any, Optional[str], str], bytes]


def export_filename(display_name: Optional[str], fmt: str = "pdf", today: Optional[datetime] = None) -> str:
    """`Jane_Doe_2024-05-01.pdf`, or `resume_2024-05-01.pdf` without a name."""
    base = "_".join((display_name or "").split()) or "resume"
    day = (today or datetime.now()).strftime("%Y-%m-%d")
    return f"{base}_{day}.{fmt}"


class ResumeWorkflow:
    """
    Save/load/rewrite/export operations for one owner's resume.

    Collaborators are injected: the store (which also resolves accounts), the
    configuration, and optionally a Gemini client and a renderer. When no
    Gemini client is given one is created from the config if an API key is
    present; otherwise the AI feature reports itself unavailable.
    """

    def __init__(self, store: ResumeStore, config: AppConfig,
                 gemini_client: Optional[GeminiClient] = None,
                 renderer: Optional[Renderer] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.config = config
        self.renderer = renderer or render_resume
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        if gemini_client is None and config.ai_available:
            gemini_client = GeminiClient(
                api_key=config.gemini_api_key,
                model_name=config.gemini_model,
                timeout_ms=config.gemini_timeout_ms,
            )
        self.gemini_client = gemini_client
        self.improvement_agent = ContentImprovementAgent(gemini_client) if gemini_client else None

    @property
    def ai_available(self) -> bool:
        return self.improvement_agent is not None

    def ai_status(self) -> Dict[str, Any]:
        return {
            "available": self.ai_available,
            "model": self.config.gemini_model if self.ai_available else None,
        }

    def _require_account(self, owner_id: Optional[str], action: str) -> Account:
        if not owner_id:
            raise AuthError(f"Please log in to {action}")
        account = self.store.find_account(owner_id)
        if account is None:
            raise NotFoundError("User account", details={"user_id": owner_id})
        return account

    def load(self, owner_id: Optional[str]) -> Optional[ResumeDocument]:
        """Returns the owner's resume, or None on any failure (never raises)."""
        if not owner_id:
            return None
        try:
            if self.store.find_account(owner_id) is None:
                logging.info(f"No account found for {owner_id}; nothing to load.")
                return None
            return self.store.find_by_owner(owner_id)
        except Exception as e:
            logging.error(f"Error fetching resume for {owner_id}: {e}")
            return None

    def save(self, owner_id: Optional[str], content: Any) -> ResumeDocument:
        """
        Persists `content` (trimmed) as the owner's resume, creating it on first save.

        Raises:
            AuthError: No authenticated owner.
            ValidationError: Content missing or blank.
            NotFoundError: The owner's account record does not exist.
            StoreError: The store write failed.
        """
        try:
            if not owner_id:
                raise AuthError("Please log in to save your resume")
            if not isinstance(content, str) or not content.strip():
                raise ValidationError("Resume content cannot be empty", field="content")
            self._require_account(owner_id, "save your resume")

            document = self.store.upsert_by_owner(owner_id, content.strip(), self.clock())
            logging.info(f"Saved resume for {owner_id} ({len(document.content)} chars).")
            return document
        except ResumeBuilderError as e:
            logging.error(f"Error saving resume: {e.error_code} {e.message}")
            raise

    def rewrite_field(self, owner_id: Optional[str], current_text: Any, section_type: Any) -> str:
        """
        Asks the AI backend for an improved version of one field's raw text.

        The combined document is not touched; the caller substitutes the result
        into the originating field and re-assembles.

        Raises:
            AuthError, ConfigError, ValidationError, NotFoundError,
            EmptyResultError, AIServiceError (incl. AIQuotaError).
        """
        try:
            if not owner_id:
                raise AuthError("Please log in to use AI features")
            if not self.ai_available:
                raise ConfigError()
            if not isinstance(current_text, str) or not current_text.strip():
                raise ValidationError("Please provide content to improve", field="current")
            label = normalize_section_type(section_type)

            account = self._require_account(owner_id, "use AI features")
            industry = (account.industry or "").strip() or self.config.default_industry
            return self.improvement_agent.run(current_text, label, industry)
        except ResumeBuilderError as e:
            logging.error(f"Error improving content: {e.error_code} {e.message}")
            raise

    def export(self, form_state: Any, display_name: Optional[str] = None, fmt: str = "pdf") -> bytes:
        """
        Renders the structured resume to PDF (default) or DOCX bytes.

        Raises:
            ValidationError: Malformed form data or unsupported format.
            RenderError: Rendering failed; the underlying message is attached.
        """
        try:
            artifact = self.renderer(form_state, display_name, fmt)
        except ResumeBuilderError as e:
            logging.error(f"Export failed: {e.error_code} {e.message}")
            raise
        except Exception as e:
            logging.error(f"Export failed: {e}")
            raise RenderError(str(e), details={"format": fmt}) from e
        if not artifact:
            raise RenderError("renderer returned no data", details={"format": fmt})
        logging.info(f"Exported resume as {fmt} ({len(artifact)} bytes).")
        return artifact

    def assemble(self, form_state: Any, display_name: Optional[str] = None) -> str:
        return assemble(form_state, display_name)
