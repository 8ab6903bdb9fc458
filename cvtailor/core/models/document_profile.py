"""Document record extracted from the LaTeX CV template (Pydantic only)."""

from typing import Any

from pydantic import Field, field_validator

from .base import CVTBaseModel, StrList, Text


class DocumentHeader(CVTBaseModel):
    """Name and contact line."""

    name: Text = Field("", description="Full name")
    contact: Text = Field("", description="Contact information")

    @field_validator("contact", mode="before")
    @classmethod
    def _flatten_contact(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return " | ".join(str(v) for v in value.values() if v)
        return value


class EducationEntry(CVTBaseModel):
    institution: Text = ""
    degree: Text = ""
    dates: Text = ""
    achievements: StrList = Field(default_factory=list)


class ExperienceEntry(CVTBaseModel):
    role: Text = ""
    company: Text = ""
    dates: Text = ""
    bullets: StrList = Field(default_factory=list)


class ProjectEntry(CVTBaseModel):
    name: Text = ""
    description: Text = ""
    technologies: StrList = Field(default_factory=list)


class DocumentSections(CVTBaseModel):
    """Sectioned content of the CV."""

    education: list[EducationEntry] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    skills: dict[str, StrList] = Field(default_factory=dict, description="Skills by category")
    projects: list[ProjectEntry] = Field(default_factory=list)
    achievements: StrList = Field(default_factory=list)

    @field_validator("education", "experience", "projects", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, (dict, CVTBaseModel))]
        return value

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_by_category(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, list):
            return {"general": value} if value else {}
        return value


class DocumentRecord(CVTBaseModel):
    """Structured view of the CV template."""

    header: DocumentHeader = Field(default_factory=DocumentHeader)
    sections: DocumentSections = Field(default_factory=DocumentSections)

    def all_skills(self) -> list[str]:
        """Every skill across categories, de-duplicated in order."""
        seen: set[str] = set()
        skills: list[str] = []
        for category_skills in self.sections.skills.values():
            for skill in category_skills:
                key = skill.strip().lower()
                if key and key not in seen:
                    seen.add(key)
                    skills.append(skill.strip())
        return skills
