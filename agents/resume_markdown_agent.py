from typing import Any, List, Mapping, Optional

from pydantic import BaseModel

CONTACT_ICONS = {
    "email": "📧",
    "mobile": "📱",
    "linkedin": "💼",
    "twitter": "🐦",
}
LINK_LABELS = {"linkedin": "LinkedIn", "twitter": "Twitter"}

SECTION_SEPARATOR = "\n\n"


def _text(value: Any) -> str:
    """Stripped string for anything that looks like text, else ''."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_mapping(value: Any) -> Mapping:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return value
    return {}


def _pick(data: Mapping, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _first_text(data: Mapping, *keys: str) -> str:
    for key in keys:
        value = _text(data.get(key))
        if value:
            return value
    return ""


class ResumeMarkdownAgent:
    """
    Assembles the structured resume form into a single markdown document.

    The agent is deterministic (no LLM): the same form state and display name
    always produce the same text. It accepts `ResumeFormState` models as well
    as raw dicts in either snake_case or camelCase, and treats anything
    missing, null or of the wrong type as absent instead of raising.
    """

    def _format_header(self, display_name: Any, contact_info: Mapping) -> str:
        name = _text(display_name)
        if not name:
            return ""

        parts = []
        for field, icon in CONTACT_ICONS.items():
            value = _text(contact_info.get(field))
            if not value:
                continue
            if field in LINK_LABELS:
                parts.append(f"{icon} [{LINK_LABELS[field]}]({value})")
            else:
                parts.append(f"{icon} {value}")

        header = f'## <div align="center">{name}</div>'
        if parts:
            header += f'\n\n<div align="center">\n\n{" | ".join(parts)}\n\n</div>'
        return header

    def _format_text_section(self, title: str, value: Any) -> str:
        text = _text(value)
        return f"## {title}\n\n{text}" if text else ""

    def _format_entry(self, entry: Any) -> str:
        data = _as_mapping(entry)
        title = _first_text(data, "title", "degree")
        organization = _first_text(data, "company", "institution", "organization")
        duration = _text(data.get("duration"))
        description = _text(data.get("description"))

        lines = []
        if title and organization:
            lines.append(f"### {title} @ {organization}")
        elif title or organization:
            lines.append(f"### {title or organization}")
        if duration:
            lines.append(duration)
        if description:
            # Blank line so the description renders as its own paragraph.
            if lines:
                lines.append("")
            lines.append(description)
        return "\n".join(lines)

    def _format_entries(self, title: str, entries: Any) -> str:
        if not isinstance(entries, (list, tuple)):
            return ""
        blocks = [block for block in (self._format_entry(e) for e in entries) if block]
        if not blocks:
            return ""
        return f"## {title}\n\n" + SECTION_SEPARATOR.join(blocks)

    def run(self, form_state: Any, display_name: Optional[str] = None) -> str:
        """Builds the combined markdown document. Returns '' when nothing is filled in."""
        data = _as_mapping(form_state)
        contact_info = _as_mapping(_pick(data, "contact_info", "contactInfo"))

        sections: List[str] = [
            self._format_header(display_name, contact_info),
            self._format_text_section("Professional Summary", data.get("summary")),
            self._format_text_section("Skills", data.get("skills")),
            self._format_entries("Work Experience", data.get("experience")),
            self._format_entries("Education", data.get("education")),
            self._format_entries("Projects", data.get("projects")),
        ]
        return SECTION_SEPARATOR.join(section for section in sections if section)


_default_agent = ResumeMarkdownAgent()


def assemble(form_state: Any, display_name: Optional[str] = None) -> str:
    """Shorthand for `ResumeMarkdownAgent().run(form_state, display_name)`."""
    return _default_agent.run(form_state, display_name)
