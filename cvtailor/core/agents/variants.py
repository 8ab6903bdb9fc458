"""Standalone variant questions and personal answer crafting."""

import re
from typing import Type

from pydantic import Field, field_validator

from .base import BaseAgent, to_prompt_json
from ..config.personal_notes import augment_prompt
from ..errors import GenerationError
from ..models.base import AgentContext, AgentResult, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType, Difficulty
from ..models.interview import QuestionBatch
from ...interview.heuristics import MAX_VARIANT_QUESTIONS, VARIANT_TIME_LIMIT, HeuristicEngine

PERSONAL_NOTES_HEADING = "PERSONAL INFORMATION (optional)"
DIFFICULTY_CHOICES = ("mixed", *(d.value for d in Difficulty))


class VariantQuestionsInput(CVTBaseModel):
    topic: str = ""
    count: int = 5
    difficulty: str = "mixed"
    document: DocumentRecord | None = None

    @field_validator("count", mode="before")
    @classmethod
    def _clamp_count(cls, value) -> int:
        try:
            count = int(value)
        except (TypeError, ValueError):
            count = 5
        return max(1, min(MAX_VARIANT_QUESTIONS, count))

    @field_validator("difficulty")
    @classmethod
    def _known_difficulty(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in DIFFICULTY_CHOICES:
            raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTY_CHOICES)}")
        return value


class VariantQuestionsAgent(BaseAgent[VariantQuestionsInput, QuestionBatch]):
    """Topic-based questions from the service, heuristic questions otherwise."""

    expected_shape = {"questions": "list"}

    def __init__(self, client=None, heuristics: HeuristicEngine | None = None, personal_notes: str = ""):
        super().__init__(client)
        self.heuristics = heuristics or HeuristicEngine()
        self.personal_notes = personal_notes

    @property
    def agent_type(self) -> AgentType:
        return AgentType.VARIANT_QUESTIONS

    @property
    def output_schema(self) -> Type[QuestionBatch]:
        return QuestionBatch

    def fallback(self, input_data: VariantQuestionsInput, context: AgentContext) -> QuestionBatch:
        questions = self.heuristics.variant_questions(input_data.topic, input_data.count, input_data.difficulty)
        return QuestionBatch(questions=questions, total_questions=len(questions))

    def postprocess(
        self, output: QuestionBatch, input_data: VariantQuestionsInput, context: AgentContext
    ) -> QuestionBatch:
        questions = output.questions[: input_data.count]
        if not questions:
            raise GenerationError("No variant questions in generated record")
        for n, question in enumerate(questions, start=1):
            if not question.id:
                question.id = f"v{n}"
        return QuestionBatch(questions=questions, total_questions=len(questions))

    def _build_prompt(self, input_data: VariantQuestionsInput, context: AgentContext) -> str:
        difficulty = input_data.difficulty
        profile = ""
        personalise = ""
        if input_data.document is not None:
            profile = f"\nCANDIDATE PROFILE (structured):\n{to_prompt_json(input_data.document)}\n"
            personalise = "\n- Use the candidate profile to personalize where relevant; do not fabricate facts."
        prompt = f"""Generate {input_data.count} {difficulty.upper()} variant interview questions about the TOPIC below.

TOPIC: {input_data.topic}
{profile}
QUESTION FORMAT (JSON only):
{{
  "questions": [
    {{
      "id": "v1",
      "type": "coding|mcq|conceptual|system_design|behavioral|practical",
      "difficulty": "easy|medium|hard|extreme",
      "category": "variant",
      "question": "text",
      "options": ["opt1","opt2","opt3","opt4"],
      "correct_answer": "correct option or short model answer",
      "expected_skills": ["skill1","skill2"],
      "time_limit": {VARIANT_TIME_LIMIT},
      "hints": ["hint1","hint2"]
    }}
  ]
}}

CONSTRAINTS:
- Difficulty should be {difficulty} (or a reasonable mix if 'mixed').
- Prefer concise, fair questions; include MCQs occasionally.{personalise}"""
        return augment_prompt(prompt, self.personal_notes, PERSONAL_NOTES_HEADING)


# =============================================================================
# Answer crafting
# =============================================================================


class VariantAnswerInput(CVTBaseModel):
    question: str = Field(..., min_length=1)
    document: DocumentRecord = Field(default_factory=DocumentRecord)
    tone: str = "sincere"
    concise: bool = True

    @field_validator("question")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Question is required")
        return value.strip()


class CraftedAnswer(CVTBaseModel):
    answer: str


class VariantAnswerAgent(BaseAgent[VariantAnswerInput, CraftedAnswer]):
    """Agent that writes a first-person answer; plain text, not JSON."""

    def __init__(self, client=None, heuristics: HeuristicEngine | None = None, personal_notes: str = ""):
        super().__init__(client)
        self.heuristics = heuristics or HeuristicEngine()
        self.personal_notes = personal_notes

    @property
    def agent_type(self) -> AgentType:
        return AgentType.VARIANT_ANSWER

    @property
    def output_schema(self) -> Type[CraftedAnswer]:
        return CraftedAnswer

    def fallback(self, input_data: VariantAnswerInput, context: AgentContext) -> CraftedAnswer:
        return CraftedAnswer(answer=self.heuristics.craft_answer(input_data.document, input_data.question))

    async def process(self, input_data: VariantAnswerInput, context: AgentContext) -> AgentResult[CraftedAnswer]:
        text = await self.client.invoke(
            self._build_prompt(input_data, context),
            preferred_provider=context.metadata.get("provider"),
        )
        # Strip wrapping quotes some models add
        answer = re.sub(r'^"|"$', "", text.strip()).strip()
        if not answer:
            raise GenerationError("Empty answer")
        return AgentResult(success=True, data=CraftedAnswer(answer=answer))

    def _build_prompt(self, input_data: VariantAnswerInput, context: AgentContext) -> str:
        length = "concise (5-8 sentences max)" if input_data.concise else "detailed (8-12 sentences)"
        return f"""Craft a personal interview answer to the QUESTION below using the candidate's CV and personal information. Stay factual to CV/personal info. Do not fabricate or invent companies, titles, or dates.

QUESTION:
{input_data.question}

CANDIDATE CV (structured):
{to_prompt_json(input_data.document)}

PERSONAL INFORMATION (free text):
{self.personal_notes}

STYLE GUIDELINES:
- Sound human: vary sentence lengths, avoid overuse of commas and semicolons.
- Be empathetic and authentic. Use first person but avoid cliches.
- Tie motivations to concrete experiences (use CV data) and values (from personal info).
- Avoid AI telltales: no "As an AI", no robotic phrasing, no numbered lists unless natural.
- Keep {length}.
- Tone: {input_data.tone.upper()}.

Return ONLY the answer text (no JSON, no preface)."""
