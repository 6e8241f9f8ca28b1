import logging

from core.errors import EmptyResultError, ValidationError

SECTION_TYPES = ("summary", "skills", "experience", "education", "project")
_SECTION_ALIASES = {"projects": "project"}


def normalize_section_type(section_type) -> str:
    """Returns the canonical section label, or raises ValidationError."""
    if not isinstance(section_type, str) or not section_type.strip():
        raise ValidationError("Invalid content type specified", field="type")
    label = section_type.strip().lower()
    label = _SECTION_ALIASES.get(label, label)
    if label not in SECTION_TYPES:
        raise ValidationError(
            f"Unknown content type '{section_type}'. Expected one of: {', '.join(SECTION_TYPES)}",
            field="type",
        )
    return label


class ContentImprovementAgent:
    """
    Rewrites a single resume field with the Gemini LLM.

    The prompt is fixed apart from the section label and the owner's industry.
    The agent makes exactly one model call per `run` and keeps the last prompt
    and raw response for inspection.
    """

    def __init__(self, gemini_client):
        """
        Args:
            gemini_client: An instance of a client configured to handle Gemini API calls.
        """
        self.llm = gemini_client
        self.last_response = ""
        self.last_prompt = ""

    def _create_prompt(self, current: str, section_type: str, industry: str) -> str:
        return f"""
        You are an expert resume writer. Improve the following {section_type} description
        for a {industry} professional so that it is more impactful, quantifiable and in line
        with industry standards.

        **Current content:**
        ---
        {current}
        ---

        **Rules:**
        1.  Start statements with strong action verbs.
        2.  Add metrics and quantifiable results wherever the content allows.
        3.  Highlight the technical skills that matter in {industry}.
        4.  Stay concise but specific (2-4 bullet points).
        5.  Put achievements and impact ahead of routine responsibilities.
        6.  Use {industry} keywords so the text is ATS-friendly.

        Return only the improved description as plain text, without markdown formatting,
        explanations or introductions such as "Here's an improved version".
        """

    def _clean_response(self, response_text: str) -> str:
        # Models sometimes wrap the answer in code fences or quotes.
        cleaned = (response_text or "").strip().replace("```text", "").replace("```", "").strip()
        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] == '"':
            cleaned = cleaned[1:-1].strip()
        return cleaned

    def run(self, current: str, section_type: str, industry: str) -> str:
        """
        Args:
            current: The raw field text to improve. Must not be blank.
            section_type: One of SECTION_TYPES (case-insensitive).
            industry: The owner's industry, used to tailor the wording.

        Returns:
            The improved text.

        Raises:
            ValidationError: Blank input or unknown section type.
            EmptyResultError: The model returned no usable text.
        """
        if not isinstance(current, str) or not current.strip():
            raise ValidationError("Please provide content to improve", field="current")
        label = normalize_section_type(section_type)

        prompt = self._create_prompt(current.strip(), label, industry)
        self.last_prompt = prompt

        response_text = self.llm.generate_text(prompt)
        self.last_response = response_text

        improved = self._clean_response(response_text)
        if not improved:
            logging.error(f"Gemini returned no usable text for a '{label}' rewrite.")
            raise EmptyResultError()

        logging.info(f"Successfully improved '{label}' content ({len(improved)} chars).")
        return improved
