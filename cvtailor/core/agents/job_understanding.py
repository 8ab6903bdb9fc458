"""Job Understanding Agent - extracts a structured record from a job description."""

from typing import Type

from pydantic import Field

from .base import BaseAgent
from .fallbacks import job_fallback
from ..models.base import AgentContext, CVTBaseModel
from ..models.enums import AgentType
from ..models.job_profile import JobRecord


class JobDescriptionInput(CVTBaseModel):
    """Input for Job Understanding Agent."""

    description: str = Field(..., description="Raw job description text")


class JobUnderstandingAgent(BaseAgent[JobDescriptionInput, JobRecord]):
    """Agent that analyzes job descriptions and extracts structured requirements."""

    expected_shape = {"required_skills": "list", "keywords": "list"}

    @property
    def agent_type(self) -> AgentType:
        return AgentType.JOB_UNDERSTANDING

    @property
    def output_schema(self) -> Type[JobRecord]:
        return JobRecord

    def fallback(self, input_data: JobDescriptionInput, context: AgentContext) -> JobRecord:
        return job_fallback(input_data.description)

    def _build_prompt(self, input_data: JobDescriptionInput, context: AgentContext) -> str:
        return f"""Parse this job description and extract structured data in JSON format:

JOB DESCRIPTION:
{input_data.description}

Extract and return ONLY a JSON object with these fields:
{{
  "role_title": "extracted job title",
  "core_responsibilities": ["list of main responsibilities"],
  "required_skills": ["list of required technical skills"],
  "preferred_skills": ["list of preferred skills"],
  "keywords": ["important keywords and phrases"],
  "seniority": "junior/mid/senior/lead",
  "location": "job location if mentioned",
  "company_type": "startup/corporate/tech/consulting/etc"
}}"""
