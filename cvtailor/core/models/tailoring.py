"""Models for gap analysis, proposed edits, change logs and pipeline results."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, field_validator

from .base import CVTBaseModel, IdentifiedSchema, StrList, Text, utc_now
from .document_profile import DocumentRecord
from .enums import ConfidenceTier, EditingMode, EditType, PipelineStage, StageStatus
from .job_profile import JobRecord


def _coerce_confidence(value: Any) -> ConfidenceTier:
    """Normalise a confidence tier; anything unrecognised counts as LOW."""
    text = str(value or "").strip().upper()
    try:
        return ConfidenceTier(text)
    except ValueError:
        return ConfidenceTier.LOW


def _coerce_edit_type(value: Any) -> EditType:
    text = str(value or "").strip().lower()
    try:
        return EditType(text)
    except ValueError:
        return EditType.REPLACE


Confidence = Annotated[ConfidenceTier, BeforeValidator(_coerce_confidence)]


# =============================================================================
# Gap analysis
# =============================================================================


class SuggestedRewrite(CVTBaseModel):
    original_bullet: Text = ""
    proposed_rewrite: Text = ""
    job_trigger: Text = ""
    confidence: Confidence = ConfidenceTier.LOW


class GapAnalysis(CVTBaseModel):
    """Comparison of a job record against the document record."""

    matched_keywords: StrList = Field(default_factory=list)
    missing_keywords: StrList = Field(default_factory=list)
    suggested_rewrites: list[SuggestedRewrite] = Field(default_factory=list)
    clarification_questions: StrList = Field(default_factory=list)
    relevance_score: Text = Field("", description="Share of job requirements covered, e.g. '75%'")

    @field_validator("suggested_rewrites", mode="before")
    @classmethod
    def _drop_non_records(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, (dict, CVTBaseModel))]
        return value


# =============================================================================
# Edit proposal
# =============================================================================


class SectionEdit(CVTBaseModel):
    """One literal replacement proposed for the template."""

    section: Text = Field("", description="experience|projects|skills|education")
    subsection: Text = Field("", description="Specific subsection name")
    original_text: Text = Field("", description="Exact text to replace")
    new_text: Text = Field("", description="Replacement text")
    edit_type: Annotated[EditType, BeforeValidator(_coerce_edit_type)] = EditType.REPLACE
    confidence: Confidence = ConfidenceTier.LOW
    justification: Text = ""


class SkillEmphasis(CVTBaseModel):
    category: Text = ""
    skills_to_emphasize: StrList = Field(default_factory=list)
    skills_to_add: StrList = Field(default_factory=list)


class ProjectPriority(CVTBaseModel):
    project_name: Text = ""
    new_priority: int = 0
    reason: Text = ""

    @field_validator("new_priority", mode="before")
    @classmethod
    def _priority_int(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0


class EditSet(CVTBaseModel):
    """Edits proposed for one tailoring run."""

    section_edits: list[SectionEdit] = Field(default_factory=list)
    skill_additions: list[SkillEmphasis] = Field(default_factory=list)
    project_reordering: list[ProjectPriority] = Field(default_factory=list)

    @field_validator("section_edits", "skill_additions", "project_reordering", mode="before")
    @classmethod
    def _drop_non_records(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict) or isinstance(item, CVTBaseModel)]
        return value

    @property
    def is_empty(self) -> bool:
        """True when applying this set cannot change a document."""
        return not self.section_edits and not any(
            skill.skills_to_emphasize for skill in self.skill_additions
        )


class SkippedEdit(CVTBaseModel):
    index: int
    reason: str


class EditReport(CVTBaseModel):
    """What the edit engine actually did."""

    applied: list[int] = Field(default_factory=list, description="Indexes of applied section edits")
    emphasized_skills: list[str] = Field(default_factory=list)
    skipped: list[SkippedEdit] = Field(default_factory=list)


# =============================================================================
# Change log
# =============================================================================


class ChangeEntry(CVTBaseModel):
    original_text: Text = ""
    new_text: Text = ""
    job_reference: Text = ""
    confidence: Confidence = ConfidenceTier.LOW
    justification: Text = ""


class ChangeSummary(CVTBaseModel):
    keywords_added: StrList = Field(default_factory=list)
    keywords_missing: StrList = Field(default_factory=list)
    questions_for_user: StrList = Field(default_factory=list)
    relevance_improvement: Text = ""


class ChangeLog(CVTBaseModel):
    changes: list[ChangeEntry] = Field(default_factory=list)
    summary: ChangeSummary = Field(default_factory=ChangeSummary)

    @field_validator("changes", mode="before")
    @classmethod
    def _drop_non_records(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict) or isinstance(item, CVTBaseModel)]
        return value


# =============================================================================
# Pipeline result
# =============================================================================


class StageOutcome(CVTBaseModel):
    stage: PipelineStage
    status: StageStatus
    error: str | None = None
    duration_ms: int = 0


class TailoringSummary(CVTBaseModel):
    keywords_added: list[str] = Field(default_factory=list)
    keywords_missing: list[str] = Field(default_factory=list)
    questions_for_user: list[str] = Field(default_factory=list)
    relevance_improvement: str = ""
    edits_applied: int = Field(0, ge=0)


class TailoringResult(IdentifiedSchema):
    """Aggregate output of one tailoring pipeline run."""

    run_id: str = Field(..., description="Pipeline run identifier")
    editing_mode: EditingMode = EditingMode.CONSERVATIVE
    job_parsed: JobRecord
    document_parsed: DocumentRecord
    gap_analysis: GapAnalysis
    targeted_edits: EditSet
    edit_report: EditReport = Field(default_factory=EditReport)
    tailored_document: str
    change_log: ChangeLog
    summary: TailoringSummary
    stage_outcomes: list[StageOutcome] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def fallback_stages(self) -> list[str]:
        return [o.stage for o in self.stage_outcomes if o.status == StageStatus.FALLBACK]
