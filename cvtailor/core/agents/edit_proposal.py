"""Edit Proposal Agent - suggests targeted, literal edits to the LaTeX CV."""

from typing import Type

from pydantic import Field

from .base import BaseAgent, to_prompt_json
from ..models.base import AgentContext, CVTBaseModel
from ..models.enums import AgentType, ConfidenceTier, EditingMode
from ..models.job_profile import JobRecord
from ..models.tailoring import EditSet, GapAnalysis

MIN_JUSTIFICATION_LENGTH = 10

_MODE_GUIDANCE = {
    EditingMode.CONSERVATIVE: (
        "Be very conservative - only suggest edits that are clearly beneficial and necessary."
    ),
    EditingMode.MODERATE: (
        "Be measured - suggest edits where they clearly improve alignment with the job, "
        "without rewriting content that already fits."
    ),
    EditingMode.AGGRESSIVE: (
        "Be thorough - suggest every edit that improves alignment with the job, "
        "while staying factual to the existing CV content."
    ),
}


class EditProposalInput(CVTBaseModel):
    job: JobRecord
    gap_analysis: GapAnalysis
    editing_mode: EditingMode = EditingMode.CONSERVATIVE
    min_justification_length: int = Field(MIN_JUSTIFICATION_LENGTH, ge=0)


class EditProposalAgent(BaseAgent[EditProposalInput, EditSet]):
    """Agent that proposes section edits, skill emphasis and project order."""

    expected_shape = {
        "section_edits": "list",
        "skill_additions": "list",
        "project_reordering": "list",
    }

    @property
    def agent_type(self) -> AgentType:
        return AgentType.EDIT_PROPOSAL

    @property
    def output_schema(self) -> Type[EditSet]:
        return EditSet

    def fallback(self, input_data: EditProposalInput, context: AgentContext) -> EditSet:
        return EditSet()

    def postprocess(self, output: EditSet, input_data: EditProposalInput, context: AgentContext) -> EditSet:
        """Keep only HIGH-confidence section edits with a real justification."""
        kept = [
            edit
            for edit in output.section_edits
            if edit.confidence == ConfidenceTier.HIGH
            and len(edit.justification.strip()) > input_data.min_justification_length
        ]
        dropped = len(output.section_edits) - len(kept)
        if dropped:
            self.logger.info("low_confidence_edits_dropped", dropped=dropped, kept=len(kept))
        output.section_edits = kept
        self.logger.info(
            "edits_proposed",
            section_edits=len(output.section_edits),
            skill_additions=len(output.skill_additions),
        )
        return output

    def _build_prompt(self, input_data: EditProposalInput, context: AgentContext) -> str:
        guidance = _MODE_GUIDANCE.get(
            EditingMode(input_data.editing_mode), _MODE_GUIDANCE[EditingMode.CONSERVATIVE]
        )
        return f"""Based on this job analysis, suggest ONLY ESSENTIAL targeted edits to the CV. {guidance}

JOB DATA:
{to_prompt_json(input_data.job)}

GAP ANALYSIS:
{to_prompt_json(input_data.gap_analysis)}

IMPORTANT RULES:
1. Only suggest edits if there's a clear mismatch between job requirements and CV content
2. Do NOT add keywords just for the sake of adding them
3. Do NOT modify text that already matches job requirements well
4. Only suggest HIGH confidence edits that are truly necessary
5. "original_text" must be copied verbatim from the CV
6. If the CV already covers the job requirements well, return empty arrays

Return ONLY a JSON object with these fields:
{{
  "section_edits": [
    {{
      "section": "experience|projects|skills|education",
      "subsection": "specific subsection name",
      "original_text": "exact text to replace",
      "new_text": "replacement text with job keywords",
      "edit_type": "replace|reorder|emphasize",
      "confidence": "HIGH|MEDIUM|LOW",
      "justification": "why this edit is necessary"
    }}
  ],
  "skill_additions": [
    {{
      "category": "programming|databases|frameworks|tools",
      "skills_to_emphasize": ["skill1", "skill2"],
      "skills_to_add": ["new_skill1", "new_skill2"]
    }}
  ],
  "project_reordering": [
    {{
      "project_name": "project name",
      "new_priority": 1,
      "reason": "why this project is relevant"
    }}
  ]
}}

If no edits are needed, return empty arrays."""
