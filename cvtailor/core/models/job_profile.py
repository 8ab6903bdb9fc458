"""Job record extracted from a job description (Pydantic only)."""

from pydantic import Field

from .base import CVTBaseModel, StrList, Text


class JobRecord(CVTBaseModel):
    """Structured view of one job description."""

    role_title: Text = Field("", description="Extracted job title")
    core_responsibilities: StrList = Field(default_factory=list, description="Main responsibilities")
    required_skills: StrList = Field(default_factory=list, description="Required technical skills")
    preferred_skills: StrList = Field(default_factory=list, description="Preferred skills")
    keywords: StrList = Field(default_factory=list, description="Important keywords and phrases")
    seniority: Text = Field("", description="junior/mid/senior/lead")
    location: Text = Field("", description="Job location if mentioned")
    company_type: Text = Field("", description="startup/corporate/tech/consulting/etc")

    def all_terms(self) -> list[str]:
        """Required skills, keywords and preferred skills, de-duplicated in order."""
        seen: set[str] = set()
        terms: list[str] = []
        for term in [*self.required_skills, *self.keywords, *self.preferred_skills]:
            key = term.strip().lower()
            if key and key not in seen:
                seen.add(key)
                terms.append(term.strip())
        return terms
