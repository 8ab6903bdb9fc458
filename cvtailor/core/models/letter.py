"""Cover letter models (Pydantic only)."""

from typing import Any

from pydantic import Field, field_validator

from .base import CVTBaseModel, IdentifiedSchema, StrList, Text
from .document_profile import DocumentRecord
from .enums import ConfidenceTier
from .job_profile import JobRecord
from .tailoring import Confidence, GapAnalysis, StageOutcome


class LetterBody(CVTBaseModel):
    greeting: Text = "Dear Hiring Manager,"
    opening_paragraph: Text = ""
    body_paragraphs: StrList = Field(default_factory=list)
    closing_paragraph: Text = ""
    signature: Text = "Sincerely,"

    @field_validator("signature", mode="after")
    @classmethod
    def _literal_newlines(cls, value: str) -> str:
        # Models often return an escaped "\n" inside the JSON string
        return value.replace("\\n", "\n")


class LetterAnalysis(CVTBaseModel):
    matched_requirements: StrList = Field(default_factory=list)
    highlighted_skills: StrList = Field(default_factory=list)
    relevant_experiences: StrList = Field(default_factory=list)
    confidence_score: Confidence = ConfidenceTier.MEDIUM


class CoverLetter(CVTBaseModel):
    letter: LetterBody = Field(default_factory=LetterBody)
    analysis: LetterAnalysis = Field(default_factory=LetterAnalysis)

    def to_text(self) -> str:
        """Plain-text rendering, blank line between blocks."""
        lines: list[str] = [self.letter.greeting, "", self.letter.opening_paragraph, ""]
        for paragraph in self.letter.body_paragraphs:
            lines.extend([paragraph, ""])
        lines.extend([self.letter.closing_paragraph, "", self.letter.signature])
        return "\n".join(lines)


class LetterResult(IdentifiedSchema):
    """Aggregate output of one cover letter run."""

    run_id: str
    job_parsed: JobRecord
    document_parsed: DocumentRecord
    gap_analysis: GapAnalysis
    cover_letter: CoverLetter
    stage_outcomes: list[StageOutcome] = Field(default_factory=list)

    @property
    def summary(self) -> dict[str, Any]:
        analysis = self.cover_letter.analysis
        return {
            "matched_requirements": analysis.matched_requirements,
            "highlighted_skills": analysis.highlighted_skills,
            "relevant_experiences": analysis.relevant_experiences,
            "confidence_score": analysis.confidence_score,
        }
