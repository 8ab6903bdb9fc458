"""Change Log Agent - explains what changed between the template and the tailored CV."""

from typing import Type

from .base import BaseAgent, to_prompt_json
from .fallbacks import change_log_fallback
from ..models.base import AgentContext, CVTBaseModel
from ..models.enums import AgentType
from ..models.job_profile import JobRecord
from ..models.tailoring import ChangeLog, EditReport, EditSet, GapAnalysis

# Characters of each document version quoted in the prompt
EXCERPT_LENGTH = 1000


class ChangeLogInput(CVTBaseModel):
    job: JobRecord
    gap_analysis: GapAnalysis
    original_document: str
    tailored_document: str
    edits: EditSet
    edit_report: EditReport


class ChangeLogAgent(BaseAgent[ChangeLogInput, ChangeLog]):
    expected_shape = {"changes": "list", "summary": "object"}

    @property
    def agent_type(self) -> AgentType:
        return AgentType.CHANGE_LOG

    @property
    def output_schema(self) -> Type[ChangeLog]:
        return ChangeLog

    def fallback(self, input_data: ChangeLogInput, context: AgentContext) -> ChangeLog:
        return change_log_fallback(input_data.edits, input_data.edit_report, input_data.gap_analysis)

    def _build_prompt(self, input_data: ChangeLogInput, context: AgentContext) -> str:
        return f"""Generate a change log for the CV optimization:

JOB DATA:
{to_prompt_json(input_data.job)}

GAP ANALYSIS:
{to_prompt_json(input_data.gap_analysis)}

ORIGINAL CV:
{input_data.original_document[:EXCERPT_LENGTH]}...

TAILORED CV:
{input_data.tailored_document[:EXCERPT_LENGTH]}...

Return ONLY a JSON object with these fields:
{{
  "changes": [
    {{
      "original_text": "original text snippet",
      "new_text": "new text snippet",
      "job_reference": "phrase from job description that triggered change",
      "confidence": "HIGH|MEDIUM|LOW",
      "justification": "reason for the change"
    }}
  ],
  "summary": {{
    "keywords_added": ["job keywords incorporated"],
    "keywords_missing": ["job keywords that couldn't be incorporated"],
    "questions_for_user": ["clarification questions"],
    "relevance_improvement": "description of how CV was optimized for this job"
  }}
}}"""
