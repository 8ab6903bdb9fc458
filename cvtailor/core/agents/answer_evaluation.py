"""Answer Evaluation Agent - scores one interview answer."""

from typing import Type

from .base import BaseAgent, to_prompt_json
from ..config.personal_notes import augment_prompt
from ..models.base import AgentContext, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType
from ..models.interview import Evaluation, Question
from ..models.job_profile import JobRecord
from ...interview.heuristics import HeuristicEngine

PERSONAL_NOTES_HEADING = (
    "ADDITIONAL PERSONAL INFORMATION ABOUT THE CANDIDATE "
    "(use to personalize evaluation, must remain factual)"
)


class AnswerEvaluationInput(CVTBaseModel):
    question: Question
    answer: str
    job: JobRecord
    document: DocumentRecord


class AnswerEvaluationAgent(BaseAgent[AnswerEvaluationInput, Evaluation]):
    """Agent that evaluates an answer; falls back to the heuristic evaluator."""

    expected_shape = {"score": "any", "feedback": "object"}

    def __init__(self, client=None, heuristics: HeuristicEngine | None = None, personal_notes: str = ""):
        super().__init__(client)
        self.heuristics = heuristics or HeuristicEngine()
        self.personal_notes = personal_notes

    @property
    def agent_type(self) -> AgentType:
        return AgentType.ANSWER_EVALUATION

    @property
    def output_schema(self) -> Type[Evaluation]:
        return Evaluation

    def fallback(self, input_data: AnswerEvaluationInput, context: AgentContext) -> Evaluation:
        return self.heuristics.evaluate_answer(input_data.question, input_data.answer, input_data.document)

    def _build_prompt(self, input_data: AnswerEvaluationInput, context: AgentContext) -> str:
        prompt = f"""Evaluate this mock interview answer based on the question and job requirements.

QUESTION:
{to_prompt_json(input_data.question)}

USER ANSWER:
{input_data.answer}

JOB DATA:
{to_prompt_json(input_data.job)}

CV DATA:
{to_prompt_json(input_data.document)}

Evaluate the answer considering:
1. Technical accuracy
2. Completeness
3. Problem-solving approach
4. Communication clarity
5. Relevance to job requirements
6. Demonstration of required skills

Return ONLY a JSON object with this structure:
{{
  "score": 85,
  "feedback": {{
    "strengths": ["what the candidate did well"],
    "improvements": ["areas for improvement"],
    "technical_accuracy": "excellent|good|fair|poor",
    "completeness": "complete|mostly_complete|partial|incomplete",
    "communication": "clear|mostly_clear|unclear|very_unclear"
  }},
  "detailed_analysis": {{
    "correct_concepts": ["concepts answered correctly"],
    "missing_concepts": ["important concepts not addressed"],
    "suggested_improvements": ["specific suggestions for better answers"],
    "follow_up_questions": ["questions to probe deeper understanding"]
  }},
  "skill_demonstration": {{
    "demonstrated_skills": ["skills shown in the answer"],
    "missing_skills": ["skills that should have been demonstrated"],
    "skill_level": "beginner|intermediate|advanced|expert"
  }},
  "overall_assessment": "excellent|good|satisfactory|needs_improvement|poor"
}}

"score" is an integer from 0 to 100. Be constructive and specific in feedback."""
        return augment_prompt(prompt, self.personal_notes, PERSONAL_NOTES_HEADING)
