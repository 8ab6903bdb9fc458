"""Document Parser Agent - extracts a structured record from the LaTeX CV."""

from typing import Type

from pydantic import Field

from .base import BaseAgent
from .fallbacks import document_fallback
from ..models.base import AgentContext, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType


class DocumentInput(CVTBaseModel):
    """Input for Document Parser Agent."""

    document_text: str = Field(..., description="LaTeX source of the CV template")


class DocumentParserAgent(BaseAgent[DocumentInput, DocumentRecord]):
    """Agent that turns the LaTeX template into header and sections."""

    expected_shape = {"header": "object", "sections": "object"}

    @property
    def agent_type(self) -> AgentType:
        return AgentType.DOCUMENT_PARSER

    @property
    def output_schema(self) -> Type[DocumentRecord]:
        return DocumentRecord

    def fallback(self, input_data: DocumentInput, context: AgentContext) -> DocumentRecord:
        # Local scan of the template instead of a canned record
        return document_fallback(input_data.document_text)

    def _build_prompt(self, input_data: DocumentInput, context: AgentContext) -> str:
        return f"""Parse this LaTeX CV and extract structured data in JSON format:

CV CONTENT:
{input_data.document_text}

Extract and return ONLY a JSON object with these fields:
{{
  "header": {{
    "name": "full name",
    "contact": "contact information"
  }},
  "sections": {{
    "education": [
      {{
        "institution": "school/university name",
        "degree": "degree type and field",
        "dates": "date range",
        "achievements": ["list of achievements"]
      }}
    ],
    "experience": [
      {{
        "role": "job title",
        "company": "company name",
        "dates": "date range",
        "bullets": ["list of responsibilities and achievements"]
      }}
    ],
    "skills": {{
      "programming": ["programming languages"],
      "databases": ["database technologies"],
      "frameworks": ["frameworks and libraries"],
      "tools": ["tools and technologies"]
    }},
    "projects": [
      {{
        "name": "project name",
        "description": "project description",
        "technologies": ["technologies used"]
      }}
    ],
    "achievements": ["list of achievements and awards"]
  }}
}}"""
