"""CoverLetterPipeline - job parse, document parse, gap analysis, letter."""

from ..agents.cover_letter import CoverLetterAgent, CoverLetterInput
from ..agents.document_parser import DocumentInput, DocumentParserAgent
from ..agents.gap_analysis import GapAnalysisAgent, GapAnalysisInput
from ..agents.job_understanding import JobDescriptionInput, JobUnderstandingAgent
from ..models.base import AgentContext
from ..models.enums import PipelineStage
from ..models.letter import LetterResult
from ..models.tailoring import StageOutcome
from ..storage.object_store import ArtifactStore
from .pipeline import StageRunner
from ...integrations.llm_client import GenerationClient
from ...observability.logger import get_logger

logger = get_logger(__name__)


class CoverLetterPipeline(StageRunner):
    """Writes a letter grounded in the same records the tailoring run uses."""

    def __init__(
        self,
        context: AgentContext,
        client: GenerationClient | None = None,
        store: ArtifactStore | None = None,
    ):
        super().__init__(context)
        self.store = store
        self.job_understanding = JobUnderstandingAgent(client)
        self.document_parser = DocumentParserAgent(client)
        self.gap_analysis = GapAnalysisAgent(client)
        self.cover_letter = CoverLetterAgent(client)

    async def run(self, job_description: str, document_text: str) -> LetterResult:
        if not job_description or not job_description.strip():
            raise ValueError("Job description is required")

        context = self._new_run_context()
        outcomes: list[StageOutcome] = []
        logger.info("letter_pipeline_started", run_id=context.run_id)

        job = await self._run_stage(
            PipelineStage.JOB_PARSE,
            self.job_understanding,
            JobDescriptionInput(description=job_description),
            context,
            outcomes,
        )
        document = await self._run_stage(
            PipelineStage.DOCUMENT_PARSE,
            self.document_parser,
            DocumentInput(document_text=document_text),
            context,
            outcomes,
        )
        gap = await self._run_stage(
            PipelineStage.GAP_ANALYSIS,
            self.gap_analysis,
            GapAnalysisInput(job=job, document=document),
            context,
            outcomes,
        )
        letter = await self._run_stage(
            PipelineStage.LETTER,
            self.cover_letter,
            CoverLetterInput(job=job, document=document, gap_analysis=gap),
            context,
            outcomes,
        )

        result = LetterResult(
            run_id=context.run_id,
            job_parsed=job,
            document_parsed=document,
            gap_analysis=gap,
            cover_letter=letter,
            stage_outcomes=outcomes,
        )
        if self.store:
            self.store.save_letter_result(result)

        logger.info("letter_pipeline_completed", run_id=context.run_id)
        return result
