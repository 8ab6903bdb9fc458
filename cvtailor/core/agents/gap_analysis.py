"""Gap Analysis Agent - compares the job record against the document record."""

from typing import Type

from .base import BaseAgent, to_prompt_json
from .fallbacks import gap_fallback
from ..models.base import AgentContext, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType
from ..models.job_profile import JobRecord
from ..models.tailoring import GapAnalysis


class GapAnalysisInput(CVTBaseModel):
    job: JobRecord
    document: DocumentRecord


class GapAnalysisAgent(BaseAgent[GapAnalysisInput, GapAnalysis]):
    """Agent that finds matched and missing job keywords."""

    expected_shape = {"matched_keywords": "list", "missing_keywords": "list"}

    @property
    def agent_type(self) -> AgentType:
        return AgentType.GAP_ANALYSIS

    @property
    def output_schema(self) -> Type[GapAnalysis]:
        return GapAnalysis

    def fallback(self, input_data: GapAnalysisInput, context: AgentContext) -> GapAnalysis:
        return gap_fallback(input_data.job, input_data.document)

    def _build_prompt(self, input_data: GapAnalysisInput, context: AgentContext) -> str:
        return f"""Perform a gap analysis between this job description and CV data:

JOB DATA:
{to_prompt_json(input_data.job)}

CV DATA:
{to_prompt_json(input_data.document)}

Return ONLY a JSON object with these fields:
{{
  "matched_keywords": ["keywords from job that match CV"],
  "missing_keywords": ["important job keywords not found in CV"],
  "suggested_rewrites": [
    {{
      "original_bullet": "original CV bullet point",
      "proposed_rewrite": "rewritten version with job keywords",
      "job_trigger": "job keyword or phrase that triggered this rewrite",
      "confidence": "HIGH|MEDIUM|LOW"
    }}
  ],
  "clarification_questions": ["questions about missing information"],
  "relevance_score": "percentage of job requirements covered by CV"
}}"""
