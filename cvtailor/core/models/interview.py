"""Mock interview models: questions, evaluations, sessions and results."""

import math
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from .base import CVTBaseModel, Score, Seconds, StrList, Text, generate_id, utc_now
from .document_profile import DocumentRecord
from .enums import Difficulty, InterviewMode, QuestionType, SessionStatus
from .job_profile import JobRecord


def rounded_mean(values: list[int]) -> int:
    """Mean rounded half up, so 72.5 becomes 73."""
    if not values:
        return 0
    return int(math.floor(sum(values) / len(values) + 0.5))


def _normalise_question_type(value: Any) -> QuestionType:
    """Map free-form type labels ("basic_coding", "architecture_design") to a type."""
    text = str(value or "").strip().lower()
    try:
        return QuestionType(text)
    except ValueError:
        pass
    if "mcq" in text or "choice" in text:
        return QuestionType.MCQ
    if "design" in text or "architecture" in text:
        return QuestionType.SYSTEM_DESIGN
    if "cod" in text or "algorithm" in text:
        return QuestionType.CODING
    if "behav" in text:
        return QuestionType.BEHAVIORAL
    if "practical" in text or "troubleshoot" in text or "optimi" in text or "edge" in text:
        return QuestionType.PRACTICAL
    return QuestionType.CONCEPTUAL


# =============================================================================
# Questions
# =============================================================================


class Question(CVTBaseModel):
    """A single interview question, including its canonical answer."""

    id: Text = Field("", description="Question identifier")
    type: QuestionType = QuestionType.CONCEPTUAL
    difficulty: Difficulty = Difficulty.EASY
    category: Text = "general"
    question: Text = Field(..., description="Question text")
    options: StrList | None = Field(None, description="Options for multiple-choice questions")
    correct_answer: Text | None = Field(None, description="Canonical answer or explanation")
    expected_skills: StrList = Field(default_factory=list)
    time_limit: Seconds = Field(300, description="Time budget in seconds")
    hints: StrList = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _question_type(cls, value: Any) -> QuestionType:
        return _normalise_question_type(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value: Any) -> Any:
        text = str(value or "").strip().lower()
        try:
            return Difficulty(text)
        except ValueError:
            return Difficulty.EASY

    @field_validator("options", mode="before")
    @classmethod
    def _empty_options(cls, value: Any) -> Any:
        return value or None


class QuestionView(CVTBaseModel):
    """What the candidate sees: the question without its canonical answer."""

    id: str
    type: QuestionType
    difficulty: Difficulty
    category: str
    question: str
    options: list[str] | None = None
    time_limit: int
    hints: list[str] = Field(default_factory=list)
    question_number: int
    total_questions: int

    @classmethod
    def from_question(cls, question: Question, number: int, total: int) -> "QuestionView":
        return cls(
            id=question.id,
            type=question.type,
            difficulty=question.difficulty,
            category=question.category,
            question=question.question,
            options=question.options,
            time_limit=question.time_limit,
            hints=question.hints,
            question_number=number,
            total_questions=total,
        )


class QuestionBatch(CVTBaseModel):
    """Generated questions for one tier (or one variant request)."""

    questions: list[Question] = Field(default_factory=list)
    total_questions: int | None = None
    estimated_duration: int | None = None

    @field_validator("questions", mode="before")
    @classmethod
    def _keep_valid_records(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            item for item in value
            if isinstance(item, Question) or (isinstance(item, dict) and item.get("question"))
        ]

    @field_validator("total_questions", "estimated_duration", mode="before")
    @classmethod
    def _optional_int(cls, value: Any) -> int | None:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


# =============================================================================
# Evaluation
# =============================================================================


class Feedback(CVTBaseModel):
    strengths: StrList = Field(default_factory=list)
    improvements: StrList = Field(default_factory=list)
    technical_accuracy: Text = "fair"
    completeness: Text = "partial"
    communication: Text = "mostly_clear"


class DetailedAnalysis(CVTBaseModel):
    correct_concepts: StrList = Field(default_factory=list)
    missing_concepts: StrList = Field(default_factory=list)
    suggested_improvements: StrList = Field(default_factory=list)
    follow_up_questions: StrList = Field(default_factory=list)


class SkillDemonstration(CVTBaseModel):
    demonstrated_skills: StrList = Field(default_factory=list)
    missing_skills: StrList = Field(default_factory=list)
    skill_level: Text = "beginner"


class Evaluation(CVTBaseModel):
    """Score and feedback for one answer."""

    score: Score = Field(0, description="0-100")
    feedback: Feedback = Field(default_factory=Feedback)
    detailed_analysis: DetailedAnalysis = Field(default_factory=DetailedAnalysis)
    skill_demonstration: SkillDemonstration = Field(default_factory=SkillDemonstration)
    overall_assessment: Text = "needs_improvement"


# =============================================================================
# Session
# =============================================================================


class AnswerRecord(CVTBaseModel):
    question_id: str
    question: str
    difficulty: Difficulty
    user_answer: str
    evaluation: Evaluation
    timestamp: datetime = Field(default_factory=utc_now)


class AssessmentSession(CVTBaseModel):
    """One mock interview, mutated only by answer submission."""

    id: str = Field(default_factory=lambda: generate_id("session_"))
    job: JobRecord
    document: DocumentRecord
    questions: list[Question] = Field(default_factory=list)
    current_index: int = Field(0, ge=0)
    answers: list[AnswerRecord] = Field(default_factory=list)
    scores: list[int] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    mode: InterviewMode = InterviewMode.AI
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: datetime | None = None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def is_finished(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def running_average(self) -> int:
        return rounded_mean(self.scores)


class SessionProgress(CVTBaseModel):
    completed: int
    total: int
    current_score: int


class SubmitResult(CVTBaseModel):
    evaluation: Evaluation
    is_complete: bool
    progress: SessionProgress


class SessionStart(CVTBaseModel):
    """Summary returned when a session starts."""

    id: str
    total_questions: int
    estimated_duration: int = Field(..., description="Minutes, five per question")
    job_title: str
    difficulty_levels: list[Difficulty]
    current_question: QuestionView | None
    mode: InterviewMode


# =============================================================================
# Results
# =============================================================================


class TierStats(CVTBaseModel):
    count: int
    average_score: int
    scores: list[int] = Field(default_factory=list)


class AssessmentResults(CVTBaseModel):
    session_id: str
    job_title: str
    started_at: datetime
    ended_at: datetime | None
    total_questions: int
    completed_questions: int
    overall_score: int
    difficulty_stats: dict[str, TierStats] = Field(default_factory=dict)
    answers: list[AnswerRecord] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
