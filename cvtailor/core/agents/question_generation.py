"""Question Generation Agent - one difficulty tier of interview questions."""

from typing import Type

from pydantic import Field

from .base import BaseAgent, to_prompt_json
from ..config.personal_notes import augment_prompt
from ..models.base import AgentContext, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType, Difficulty
from ..models.interview import Question, QuestionBatch
from ..models.job_profile import JobRecord
from ...interview.heuristics import TIER_PROFILES, HeuristicEngine

QUESTIONS_PER_TIER = 5
PERSONAL_NOTES_HEADING = (
    "ADDITIONAL PERSONAL INFORMATION (use to contextualize questions, do not fabricate)"
)


class QuestionGenerationInput(CVTBaseModel):
    job: JobRecord
    document: DocumentRecord
    difficulty: Difficulty
    count: int = Field(QUESTIONS_PER_TIER, ge=1)


def normalise_tier(
    questions: list[Question], padding: list[Question], difficulty: Difficulty, count: int
) -> list[Question]:
    """Exactly ``count`` questions of one tier with ids ``{tier}_{n}``.

    Generated questions are truncated, or padded from ``padding`` (the
    heuristic tier) when the service returned too few.
    """
    tier = Difficulty(difficulty)
    chosen = list(questions[:count])
    for extra in padding:
        if len(chosen) >= count:
            break
        chosen.append(extra)

    return [
        question.model_copy(update={"id": f"{tier.value}_{n}", "difficulty": tier.value})
        for n, question in enumerate(chosen, start=1)
    ]


class QuestionGenerationAgent(BaseAgent[QuestionGenerationInput, QuestionBatch]):
    """Agent that generates one tier of questions, padded from the heuristic engine."""

    expected_shape = {"questions": "list"}

    def __init__(self, client=None, heuristics: HeuristicEngine | None = None, personal_notes: str = ""):
        super().__init__(client)
        self.heuristics = heuristics or HeuristicEngine()
        self.personal_notes = personal_notes

    @property
    def agent_type(self) -> AgentType:
        return AgentType.QUESTION_GENERATION

    @property
    def output_schema(self) -> Type[QuestionBatch]:
        return QuestionBatch

    def _heuristic_tier(self, input_data: QuestionGenerationInput) -> list[Question]:
        return self.heuristics.generate_tier(
            input_data.job, input_data.document, input_data.difficulty, input_data.count
        )

    def fallback(self, input_data: QuestionGenerationInput, context: AgentContext) -> QuestionBatch:
        questions = self._heuristic_tier(input_data)
        return QuestionBatch(
            questions=questions,
            total_questions=len(questions),
            estimated_duration=len(questions) * 5,
        )

    def postprocess(
        self, output: QuestionBatch, input_data: QuestionGenerationInput, context: AgentContext
    ) -> QuestionBatch:
        generated = len(output.questions)
        questions = normalise_tier(
            output.questions, self._heuristic_tier(input_data), input_data.difficulty, input_data.count
        )
        if generated != input_data.count:
            self.logger.info(
                "question_tier_normalised",
                difficulty=input_data.difficulty,
                generated=generated,
                kept=input_data.count,
            )
        return QuestionBatch(
            questions=questions,
            total_questions=len(questions),
            estimated_duration=len(questions) * 5,
        )

    def _build_prompt(self, input_data: QuestionGenerationInput, context: AgentContext) -> str:
        difficulty = Difficulty(input_data.difficulty)
        profile = TIER_PROFILES[difficulty]
        count = input_data.count
        prompt = f"""Generate {count} {difficulty.value} level interview questions based on this job description and CV data.

JOB DATA:
{to_prompt_json(input_data.job)}

CV DATA:
{to_prompt_json(input_data.document)}

DIFFICULTY LEVEL: {difficulty.value.upper()}
DESCRIPTION: {profile.description}
QUESTION TYPES: {', '.join(profile.prompt_types)}

Generate questions that test:
1. Technical skills relevant to the job
2. Problem-solving abilities
3. Practical experience
4. Industry knowledge
5. Soft skills where appropriate

Return ONLY a JSON object with this structure:
{{
  "questions": [
    {{
      "id": "q1",
      "type": "coding|mcq|conceptual|system_design|behavioral",
      "difficulty": "{difficulty.value}",
      "category": "programming|databases|frameworks|algorithms|system_design|behavioral",
      "question": "The actual question text",
      "options": ["option1", "option2", "option3", "option4"],
      "correct_answer": "correct answer or explanation",
      "expected_skills": ["skill1", "skill2"],
      "time_limit": {profile.time_limit},
      "hints": ["hint1", "hint2"]
    }}
  ],
  "total_questions": {count},
  "estimated_duration": {count * 5}
}}

Include "options" only for MCQ questions; "time_limit" is in seconds and "estimated_duration" in minutes.
Make questions challenging but fair for {difficulty.value} level."""
        return augment_prompt(prompt, self.personal_notes, PERSONAL_NOTES_HEADING)
