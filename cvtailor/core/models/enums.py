"""Enumeration types for cvtailor models."""

from enum import Enum


class AgentType(str, Enum):
    """Agent type identifiers."""

    JOB_UNDERSTANDING = "job_understanding"
    DOCUMENT_PARSER = "document_parser"
    GAP_ANALYSIS = "gap_analysis"
    EDIT_PROPOSAL = "edit_proposal"
    CHANGE_LOG = "change_log"
    COVER_LETTER = "cover_letter"
    QUESTION_GENERATION = "question_generation"
    ANSWER_EVALUATION = "answer_evaluation"
    VARIANT_QUESTIONS = "variant_questions"
    VARIANT_ANSWER = "variant_answer"


class PipelineStage(str, Enum):
    """Tailoring pipeline stages, in execution order."""

    JOB_PARSE = "job_parse"
    DOCUMENT_PARSE = "document_parse"
    GAP_ANALYSIS = "gap_analysis"
    EDIT_PROPOSAL = "edit_proposal"
    EDIT_APPLICATION = "edit_application"
    CHANGE_SUMMARY = "change_summary"
    LETTER = "letter"


class StageStatus(str, Enum):
    """How a pipeline stage produced its output."""

    SUCCEEDED = "succeeded"
    FALLBACK = "fallback"
    SKIPPED = "skipped"


class ConfidenceTier(str, Enum):
    """Confidence attached to a proposed change."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class EditType(str, Enum):
    """Kinds of section edit."""

    REPLACE = "replace"
    REORDER = "reorder"
    EMPHASIZE = "emphasize"


class EditingMode(str, Enum):
    """Caller preference for how aggressively to edit."""

    NONE = "none"
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class Difficulty(str, Enum):
    """Assessment difficulty tiers, in session order."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXTREME = "extreme"


class QuestionType(str, Enum):
    """Interview question types."""

    CODING = "coding"
    MCQ = "mcq"
    CONCEPTUAL = "conceptual"
    SYSTEM_DESIGN = "system_design"
    BEHAVIORAL = "behavioral"
    PRACTICAL = "practical"


class InterviewMode(str, Enum):
    """Answer-scoring strategy of a session."""

    AI = "ai"
    HEURISTIC = "heuristic"


class SessionStatus(str, Enum):
    """Assessment session lifecycle."""

    ACTIVE = "active"
    COMPLETED = "completed"


DIFFICULTY_ORDER: tuple[Difficulty, ...] = (
    Difficulty.EASY,
    Difficulty.MEDIUM,
    Difficulty.HARD,
    Difficulty.EXTREME,
)
