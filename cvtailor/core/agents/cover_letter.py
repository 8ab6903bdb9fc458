"""Cover Letter Agent - writes a factual letter from the parsed records."""

from typing import Type

from .base import BaseAgent, to_prompt_json
from .fallbacks import letter_fallback
from ..models.base import AgentContext, CVTBaseModel
from ..models.document_profile import DocumentRecord
from ..models.enums import AgentType
from ..models.job_profile import JobRecord
from ..models.letter import CoverLetter
from ..models.tailoring import GapAnalysis


class CoverLetterInput(CVTBaseModel):
    job: JobRecord
    document: DocumentRecord
    gap_analysis: GapAnalysis


class CoverLetterAgent(BaseAgent[CoverLetterInput, CoverLetter]):
    """Agent that drafts a motivational letter using only facts from the CV."""

    expected_shape = {"letter": "object"}

    @property
    def agent_type(self) -> AgentType:
        return AgentType.COVER_LETTER

    @property
    def output_schema(self) -> Type[CoverLetter]:
        return CoverLetter

    def fallback(self, input_data: CoverLetterInput, context: AgentContext) -> CoverLetter:
        return letter_fallback(input_data.job, input_data.document, input_data.gap_analysis)

    def _build_prompt(self, input_data: CoverLetterInput, context: AgentContext) -> str:
        return f"""Generate a professional motivational letter based on the job analysis and CV data:

JOB DATA:
{to_prompt_json(input_data.job)}

CV DATA:
{to_prompt_json(input_data.document)}

GAP ANALYSIS:
{to_prompt_json(input_data.gap_analysis)}

CRITICAL REQUIREMENTS:
1. Use ONLY factual information from the CV - do not fabricate or add any details not present
2. Match the job requirements with relevant CV experiences
3. Professional, formal tone
4. 3-4 paragraphs maximum
5. Include specific examples from CV that align with job requirements
6. Show enthusiasm for the role and company
7. Highlight relevant skills and achievements from the CV

Return ONLY a JSON object with this structure:
{{
  "letter": {{
    "greeting": "Dear Hiring Manager,",
    "opening_paragraph": "Opening paragraph highlighting relevant background",
    "body_paragraphs": [
      "Body paragraph 1 with specific CV examples",
      "Body paragraph 2 with more relevant experiences"
    ],
    "closing_paragraph": "Closing paragraph expressing interest and next steps",
    "signature": "Sincerely,\\n{input_data.document.header.name or '[Your Name]'}"
  }},
  "analysis": {{
    "matched_requirements": ["requirement1", "requirement2"],
    "highlighted_skills": ["skill1", "skill2"],
    "relevant_experiences": ["experience1", "experience2"],
    "confidence_score": "HIGH|MEDIUM|LOW"
  }}
}}"""
