# This file makes the 'agents' directory a Python package,
# allowing for clean imports of the agent classes.

from .resume_markdown_agent import ResumeMarkdownAgent, assemble
from .content_improvement_agent import ContentImprovementAgent, SECTION_TYPES, normalize_section_type

__all__ = [
    "ResumeMarkdownAgent",
    "ContentImprovementAgent",
    "SECTION_TYPES",
    "assemble",
    "normalize_section_type",
]
