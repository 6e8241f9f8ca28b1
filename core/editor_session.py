"""
The resume editor's view state.

The displayed markdown has two possible sources, modelled explicitly:

- `Loaded`: the persisted resume the session was opened on.
- `Derived`: recomputed from the form state on every read.
- `Overridden`: text the user typed in manual-override mode.

A session opened on a saved resume shows it as `Loaded` until the form is
first changed. Any change to the form state switches the source to `Derived` and leaves
manual-override mode, discarding the typed text. That holds for every field,
including ones unrelated to what was edited by hand.
"""
import logging
import re
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from agents.resume_markdown_agent import assemble

from .errors import ValidationError
from .models import ResumeDocument, ResumeFormState
from .resume_workflow import ResumeWorkflow

ENTRY_FIELDS = ("experience", "education", "projects")
TEXT_FIELDS = ("summary", "skills")


class ViewTab(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


class PreviewMode(str, Enum):
    RENDERED = "rendered"
    MANUAL_OVERRIDE = "manual_override"


class Derived(BaseModel):
    model_config = ConfigDict(frozen=True)
    form_state: ResumeFormState


class Overridden(BaseModel):
    model_config = ConfigDict(frozen=True)
    text: str


class Loaded(BaseModel):
    model_config = ConfigDict(frozen=True)
    text: str


ContentSource = Union[Loaded, Derived, Overridden]


def normalize_content(content: str) -> str:
    """Unifies line endings, collapses runs of blank lines and trims."""
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    content = re.sub(r"\n\s*\n\s*\n", "\n\n", content)
    return content.strip()


class ResumeEditorSession:
    """One user's editing session: form state, view mode and displayed markdown."""

    def __init__(self, workflow: ResumeWorkflow, owner_id: Optional[str],
                 display_name: Optional[str] = None, initial_content: str = "",
                 form_state: Optional[ResumeFormState] = None):
        self.workflow = workflow
        self.owner_id = owner_id
        self.display_name = display_name
        self.initial_content = initial_content or ""
        self._form_state = form_state if form_state is not None else ResumeFormState()

        if self.initial_content.strip():
            self.source: ContentSource = Loaded(text=self.initial_content)
            self.tab = ViewTab.PREVIEW
        else:
            self.source = Derived(form_state=self._form_state)
            self.tab = ViewTab.EDIT
        self.preview_mode = PreviewMode.RENDERED

    @classmethod
    def start(cls, workflow: ResumeWorkflow, owner_id: Optional[str],
              display_name: Optional[str] = None) -> "ResumeEditorSession":
        """Opens a session on the owner's persisted resume, if there is one."""
        document: Optional[ResumeDocument] = workflow.load(owner_id)
        content = document.content if document else ""
        session = cls(workflow, owner_id, display_name=display_name, initial_content=content)
        logging.info(f"Editor session started in {session.tab.value} view for {owner_id}.")
        return session

    @property
    def form_state(self) -> ResumeFormState:
        return self._form_state

    @property
    def content(self) -> str:
        """The markdown currently shown to the user."""
        if isinstance(self.source, (Loaded, Overridden)):
            return self.source.text
        return assemble(self.source.form_state, self.display_name) or self.initial_content

    def switch_tab(self, tab: Union[ViewTab, str]):
        self.tab = ViewTab(tab)
        # Manual editing lives inside the preview; the typed text stays shown.
        if self.tab == ViewTab.EDIT:
            self.preview_mode = PreviewMode.RENDERED

    def toggle_preview_mode(self) -> PreviewMode:
        """Switches between the rendered preview and manual markdown editing."""
        if self.tab != ViewTab.PREVIEW:
            raise ValidationError("Manual editing is only available from the preview")
        if self.preview_mode == PreviewMode.RENDERED:
            self.source = Overridden(text=self.content)
            self.preview_mode = PreviewMode.MANUAL_OVERRIDE
        else:
            self.preview_mode = PreviewMode.RENDERED
        return self.preview_mode

    def edit_markdown(self, text: str):
        if self.tab != ViewTab.PREVIEW or self.preview_mode != PreviewMode.MANUAL_OVERRIDE:
            raise ValidationError("Switch to manual editing before changing the markdown")
        if not isinstance(text, str):
            raise ValidationError("Markdown must be text", field="content")
        self.source = Overridden(text=text)

    def set_form_state(self, form_state: Union[ResumeFormState, dict]):
        """Replaces the form state. Discards any manual override."""
        if not isinstance(form_state, ResumeFormState):
            try:
                form_state = ResumeFormState.model_validate(form_state)
            except PydanticValidationError as e:
                raise ValidationError(f"Malformed resume data: {e}", field="formState") from e
        if isinstance(self.source, Overridden):
            logging.info("Form changed while in manual override; discarding manual edits.")
        self._form_state = form_state
        self.source = Derived(form_state=form_state)
        if self.preview_mode == PreviewMode.MANUAL_OVERRIDE:
            self.preview_mode = PreviewMode.RENDERED

    def update_form(self, **changes: Any):
        """Changes individual form fields, e.g. `update_form(summary="...")`."""
        data = self._form_state.model_dump()
        for key, value in changes.items():
            if key not in ResumeFormState.model_fields:
                raise ValidationError(f"Unknown form field '{key}'", field=key)
            if key == "contact_info" and isinstance(value, dict):
                value = {**(data.get("contact_info") or {}), **value}
            data[key] = value
        self.set_form_state(data)

    def _field_text(self, field: str, index: Optional[int]) -> str:
        if field in TEXT_FIELDS:
            return getattr(self._form_state, field) or ""
        if field in ENTRY_FIELDS:
            entries = getattr(self._form_state, field) or []
            if index is None or not 0 <= index < len(entries):
                raise ValidationError(f"No {field} entry at position {index}", field=field)
            return entries[index].description or ""
        raise ValidationError(f"Field '{field}' cannot be improved", field=field)

    def improve_field(self, field: str, section_type: str, index: Optional[int] = None) -> str:
        """
        Rewrites one field with the AI backend and puts the result back into the form.

        `field` is "summary", "skills", or one of the entry lists together with
        the entry `index` (its description is rewritten).
        """
        current = self._field_text(field, index)
        improved = self.workflow.rewrite_field(self.owner_id, current, section_type)

        if field in TEXT_FIELDS:
            self.update_form(**{field: improved})
        else:
            entries = [entry.model_dump() for entry in getattr(self._form_state, field)]
            entries[index]["description"] = improved
            self.update_form(**{field: entries})
        return improved

    def save(self) -> ResumeDocument:
        """Saves the displayed markdown; blank content is rejected by the workflow."""
        return self.workflow.save(self.owner_id, normalize_content(self.content or ""))

    def export(self, fmt: str = "pdf") -> bytes:
        return self.workflow.export(self._form_state, self.display_name, fmt)
