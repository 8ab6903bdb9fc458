"""Mock interview sessions: start, question delivery, answer submission and results."""

import asyncio

from ..core.agents.answer_evaluation import AnswerEvaluationAgent, AnswerEvaluationInput
from ..core.agents.document_parser import DocumentInput, DocumentParserAgent
from ..core.agents.fallbacks import document_fallback, job_fallback
from ..core.agents.job_understanding import JobDescriptionInput, JobUnderstandingAgent
from ..core.agents.question_generation import (
    QUESTIONS_PER_TIER,
    QuestionGenerationAgent,
    QuestionGenerationInput,
    normalise_tier,
)
from ..core.errors import NoActiveSession, QuestionMismatch, SessionNotFinished
from ..core.models.base import AgentContext, utc_now
from ..core.models.document_profile import DocumentRecord
from ..core.models.enums import DIFFICULTY_ORDER, InterviewMode, SessionStatus
from ..core.models.interview import (
    AnswerRecord,
    AssessmentResults,
    AssessmentSession,
    Evaluation,
    Question,
    QuestionView,
    SessionProgress,
    SessionStart,
    SubmitResult,
    TierStats,
    rounded_mean,
)
from ..core.models.job_profile import JobRecord
from ..integrations.llm_client import GenerationClient
from ..observability.logger import get_logger, log_context
from .heuristics import HeuristicEngine

logger = get_logger(__name__)

MINUTES_PER_QUESTION = 5


def build_recommendations(answers: list[AnswerRecord], overall_score: int) -> list[str]:
    if overall_score < 60:
        recommendations = ["Focus on fundamental concepts and practice basic problem-solving"]
    elif overall_score < 80:
        recommendations = ["Continue practicing intermediate-level problems and system design"]
    else:
        recommendations = ["Excellent performance! Consider advanced topics and leadership scenarios"]

    for difficulty in DIFFICULTY_ORDER:
        scores = [a.evaluation.score for a in answers if a.difficulty == difficulty]
        if scores and sum(scores) / len(scores) < 60:
            recommendations.append(f"Focus more on {difficulty.value} level questions and concepts")
    return recommendations


class SessionStore:
    """In-process store of assessment sessions keyed by id."""

    def __init__(self, single_session: bool = True):
        self.single_session = single_session
        self._sessions: dict[str, AssessmentSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def put(self, session: AssessmentSession) -> None:
        if self.single_session:
            # Starting a new session replaces whatever was running
            self._sessions.clear()
            self._locks.clear()
        self._sessions[session.id] = session
        self._locks[session.id] = asyncio.Lock()

    def get(self, session_id: str) -> AssessmentSession | None:
        return self._sessions.get(session_id)

    def lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            raise NoActiveSession("No active interview session")
        return lock

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


class InterviewService:
    """Drives the assessment session state machine.

    In ``ai`` mode extraction, question generation and evaluation go through
    the generation client with heuristic fallbacks; in ``heuristic`` mode the
    service is never called.
    """

    def __init__(
        self,
        client: GenerationClient | None = None,
        context: AgentContext | None = None,
        store: SessionStore | None = None,
        heuristics: HeuristicEngine | None = None,
        personal_notes: str = "",
        questions_per_tier: int = QUESTIONS_PER_TIER,
    ):
        self.client = client
        self.context = context or AgentContext()
        self.store = store or SessionStore()
        self.heuristics = heuristics or HeuristicEngine()
        self.questions_per_tier = questions_per_tier

        self.job_understanding = JobUnderstandingAgent(client)
        self.document_parser = DocumentParserAgent(client)
        self.question_generation = QuestionGenerationAgent(client, self.heuristics, personal_notes)
        self.answer_evaluation = AnswerEvaluationAgent(client, self.heuristics, personal_notes)

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------
    async def start(
        self,
        job_description: str,
        document_text: str,
        mode: InterviewMode | str = InterviewMode.AI,
    ) -> SessionStart:
        if not job_description or not job_description.strip():
            raise ValueError("Job description is required")

        mode = InterviewMode(mode)
        logger.info("session_starting", mode=mode.value)

        if mode == InterviewMode.HEURISTIC:
            job = job_fallback(job_description)
            document = document_fallback(document_text)
            questions = self._heuristic_questions(job, document)
        else:
            job_result, document_result = await asyncio.gather(
                self.job_understanding.execute(JobDescriptionInput(description=job_description), self.context),
                self.document_parser.execute(DocumentInput(document_text=document_text), self.context),
            )
            job, document = job_result.data, document_result.data
            questions = await self._generated_questions(job, document)

        session = AssessmentSession(job=job, document=document, questions=questions, mode=mode)
        self.store.put(session)

        logger.info(
            "session_started",
            session_id=session.id,
            mode=mode.value,
            total_questions=session.total_questions,
        )
        return SessionStart(
            id=session.id,
            total_questions=session.total_questions,
            estimated_duration=session.total_questions * MINUTES_PER_QUESTION,
            job_title=job.role_title,
            difficulty_levels=list(DIFFICULTY_ORDER),
            current_question=self._view(session),
            mode=mode,
        )

    def _heuristic_questions(self, job: JobRecord, document: DocumentRecord) -> list[Question]:
        tiers = self.heuristics.generate_questions(job, document, self.questions_per_tier)
        questions: list[Question] = []
        for difficulty in DIFFICULTY_ORDER:
            questions.extend(normalise_tier(tiers[difficulty], [], difficulty, self.questions_per_tier))
        return questions

    async def _generated_questions(self, job: JobRecord, document: DocumentRecord) -> list[Question]:
        results = await asyncio.gather(
            *(
                self.question_generation.execute(
                    QuestionGenerationInput(
                        job=job, document=document, difficulty=difficulty, count=self.questions_per_tier
                    ),
                    self.context,
                )
                for difficulty in DIFFICULTY_ORDER
            )
        )
        questions: list[Question] = []
        for difficulty, result in zip(DIFFICULTY_ORDER, results):
            if result.used_fallback:
                logger.warning("question_tier_fallback", difficulty=difficulty.value, error=result.error)
            # Fallback tiers carry their own ids; normalising keeps every tier uniform
            questions.extend(
                normalise_tier(result.data.questions, [], difficulty, self.questions_per_tier)
            )
        return questions

    # ------------------------------------------------------------------
    # Questions and answers
    # ------------------------------------------------------------------
    def _view(self, session: AssessmentSession) -> QuestionView | None:
        if session.is_finished:
            return None
        return QuestionView.from_question(
            session.questions[session.current_index],
            number=session.current_index + 1,
            total=session.total_questions,
        )

    def _active_session(self, session_id: str) -> AssessmentSession:
        session = self.store.get(session_id)
        if session is None or session.status != SessionStatus.ACTIVE:
            raise NoActiveSession("No active interview session")
        return session

    def next_question(self, session_id: str) -> QuestionView | None:
        """The current question, or None when the session has no more."""
        session = self.store.get(session_id)
        if session is None:
            raise NoActiveSession("No active interview session")
        return self._view(session)

    async def submit_answer(self, session_id: str, question_id: str, answer: str) -> SubmitResult:
        """Evaluate an answer to the current question and advance the session.

        Raises:
            NoActiveSession: Unknown or already completed session
            ValueError: Empty answer
            QuestionMismatch: ``question_id`` is not the current question
        """
        async with self.store.lock_for(session_id):
            session = self._active_session(session_id)
            if not answer or not answer.strip():
                raise ValueError("Answer is required")

            question = session.questions[session.current_index]
            if question.id != question_id:
                raise QuestionMismatch(expected_id=question.id, received_id=question_id)

            with log_context(session_id=session.id, question_id=question.id):
                evaluation = await self._evaluate(session, question, answer)

            session.answers = [
                *session.answers,
                AnswerRecord(
                    question_id=question.id,
                    question=question.question,
                    difficulty=question.difficulty,
                    user_answer=answer,
                    evaluation=evaluation,
                ),
            ]
            session.scores = [*session.scores, evaluation.score]
            session.current_index += 1

            is_complete = session.is_finished
            if is_complete:
                session.status = SessionStatus.COMPLETED
                session.ended_at = utc_now()
                logger.info("session_completed", session_id=session.id, overall_score=session.running_average)

            logger.info(
                "answer_submitted",
                session_id=session.id,
                question_id=question.id,
                score=evaluation.score,
            )
            return SubmitResult(
                evaluation=evaluation,
                is_complete=is_complete,
                progress=SessionProgress(
                    completed=session.current_index,
                    total=session.total_questions,
                    current_score=rounded_mean(session.scores),
                ),
            )

    async def _evaluate(self, session: AssessmentSession, question: Question, answer: str) -> Evaluation:
        if session.mode == InterviewMode.HEURISTIC:
            return self.heuristics.evaluate_answer(question, answer, session.document)
        result = await self.answer_evaluation.execute(
            AnswerEvaluationInput(question=question, answer=answer, job=session.job, document=session.document),
            self.context,
        )
        return result.data

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def results(self, session_id: str) -> AssessmentResults:
        session = self.store.get(session_id)
        if session is None:
            raise NoActiveSession("No interview session found")
        if session.status != SessionStatus.COMPLETED:
            raise SessionNotFinished("Interview not completed yet")

        overall = rounded_mean(session.scores)
        stats: dict[str, TierStats] = {}
        for difficulty in DIFFICULTY_ORDER:
            scores = [a.evaluation.score for a in session.answers if a.difficulty == difficulty]
            if scores:
                stats[difficulty.value] = TierStats(
                    count=len(scores), average_score=rounded_mean(scores), scores=scores
                )

        return AssessmentResults(
            session_id=session.id,
            job_title=session.job.role_title,
            started_at=session.started_at,
            ended_at=session.ended_at,
            total_questions=session.total_questions,
            completed_questions=len(session.answers),
            overall_score=overall,
            difficulty_stats=stats,
            answers=session.answers,
            recommendations=build_recommendations(session.answers, overall),
        )
