from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts both snake_case and the camelCase keys the web form sends."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactInfo(_CamelModel):
    email: Optional[str] = None
    mobile: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None


class ResumeEntry(_CamelModel):
    """
    One experience, education or project entry.

    Education entries usually fill `degree`/`institution`; the other lists use
    `title`/`company`. Every field is optional.
    """
    title: Optional[str] = None
    company: Optional[str] = None
    degree: Optional[str] = None
    institution: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None


class ResumeFormState(_CamelModel):
    """The structured form the user edits. Never persisted directly."""
    contact_info: Optional[ContactInfo] = Field(default_factory=ContactInfo)
    summary: Optional[str] = ""
    skills: Optional[str] = ""
    experience: Optional[List[ResumeEntry]] = Field(default_factory=list)
    education: Optional[List[ResumeEntry]] = Field(default_factory=list)
    projects: Optional[List[ResumeEntry]] = Field(default_factory=list)


class ResumeDocument(_CamelModel):
    """The persisted resume, one per owner."""
    owner_id: str
    content: str
    created_at: Optional[datetime] = None
    updated_at: datetime


class Account(_CamelModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    industry: Optional[str] = None
