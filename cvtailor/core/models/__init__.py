"""cvtailor data models for jobs, documents, edits, letters and interviews."""

from .base import (
    AgentContext,
    AgentResult,
    CVTBaseModel,
    IdentifiedSchema,
    generate_id,
    utc_now,
)
from .document_profile import (
    DocumentHeader,
    DocumentRecord,
    DocumentSections,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
)
from .enums import (
    DIFFICULTY_ORDER,
    AgentType,
    ConfidenceTier,
    Difficulty,
    EditingMode,
    EditType,
    InterviewMode,
    PipelineStage,
    QuestionType,
    SessionStatus,
    StageStatus,
)
from .interview import (
    AnswerRecord,
    AssessmentResults,
    AssessmentSession,
    DetailedAnalysis,
    Evaluation,
    Feedback,
    Question,
    QuestionBatch,
    QuestionView,
    SessionProgress,
    SessionStart,
    SkillDemonstration,
    SubmitResult,
    TierStats,
)
from .job_profile import JobRecord
from .letter import CoverLetter, LetterAnalysis, LetterBody, LetterResult
from .tailoring import (
    ChangeEntry,
    ChangeLog,
    ChangeSummary,
    EditReport,
    EditSet,
    GapAnalysis,
    ProjectPriority,
    SectionEdit,
    SkillEmphasis,
    SkippedEdit,
    StageOutcome,
    SuggestedRewrite,
    TailoringResult,
    TailoringSummary,
)

__all__ = [
    # Base
    "CVTBaseModel",
    "IdentifiedSchema",
    "AgentContext",
    "AgentResult",
    "generate_id",
    "utc_now",
    # Enums
    "AgentType",
    "PipelineStage",
    "StageStatus",
    "ConfidenceTier",
    "EditType",
    "EditingMode",
    "Difficulty",
    "DIFFICULTY_ORDER",
    "QuestionType",
    "InterviewMode",
    "SessionStatus",
    # Job / document
    "JobRecord",
    "DocumentRecord",
    "DocumentHeader",
    "DocumentSections",
    "EducationEntry",
    "ExperienceEntry",
    "ProjectEntry",
    # Tailoring
    "GapAnalysis",
    "SuggestedRewrite",
    "EditSet",
    "SectionEdit",
    "SkillEmphasis",
    "ProjectPriority",
    "EditReport",
    "SkippedEdit",
    "ChangeLog",
    "ChangeEntry",
    "ChangeSummary",
    "StageOutcome",
    "TailoringSummary",
    "TailoringResult",
    # Letter
    "CoverLetter",
    "LetterBody",
    "LetterAnalysis",
    "LetterResult",
    # Interview
    "Question",
    "QuestionView",
    "QuestionBatch",
    "Evaluation",
    "Feedback",
    "DetailedAnalysis",
    "SkillDemonstration",
    "AnswerRecord",
    "AssessmentSession",
    "SessionProgress",
    "SessionStart",
    "SubmitResult",
    "TierStats",
    "AssessmentResults",
]
