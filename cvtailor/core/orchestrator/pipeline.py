"""TailoringPipeline - chains the stages that tailor a LaTeX CV to a job."""

import time
from typing import Any

from ..agents.base import BaseAgent
from ..agents.change_log import ChangeLogAgent, ChangeLogInput
from ..agents.document_parser import DocumentInput, DocumentParserAgent
from ..agents.edit_proposal import EditProposalAgent, EditProposalInput
from ..agents.gap_analysis import GapAnalysisAgent, GapAnalysisInput
from ..agents.job_understanding import JobDescriptionInput, JobUnderstandingAgent
from ..errors import InvalidOutputDocument
from ..models.base import AgentContext, generate_id
from ..models.enums import EditingMode, PipelineStage, StageStatus
from ..models.tailoring import EditReport, EditSet, StageOutcome, TailoringResult, TailoringSummary
from ..storage.object_store import ArtifactStore
from ..tailoring.editor import apply_edits_with_report, ensure_valid_document
from ...integrations.llm_client import GenerationClient
from ...observability.logger import get_logger, log_context

logger = get_logger(__name__)


class StageRunner:
    """Runs agent stages and records how each one produced its output."""

    def __init__(self, context: AgentContext):
        self.context = context

    def _new_run_context(self) -> AgentContext:
        return self.context.model_copy(update={"run_id": generate_id("run_")})

    async def _run_stage(
        self,
        stage: PipelineStage,
        agent: BaseAgent,
        input_data: Any,
        context: AgentContext,
        outcomes: list[StageOutcome],
    ) -> Any:
        logger.info("stage_started", stage=stage.value, run_id=context.run_id)
        with log_context(run_id=context.run_id, stage=stage.value):
            result = await agent.execute(input_data, context)
        outcomes.append(
            StageOutcome(
                stage=stage,
                status=StageStatus.FALLBACK if result.used_fallback else StageStatus.SUCCEEDED,
                error=result.error,
                duration_ms=result.duration_ms,
            )
        )
        logger.info(
            "stage_completed",
            stage=stage.value,
            run_id=context.run_id,
            used_fallback=result.used_fallback,
        )
        return result.data


class TailoringPipeline(StageRunner):
    """Orchestrates job parse, document parse, gap analysis, edits and change log."""

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
        self.edit_proposal = EditProposalAgent(client)
        self.change_log = ChangeLogAgent(client)

        pipeline_cfg = context.config.get("pipeline", {})
        self.default_mode = EditingMode(pipeline_cfg.get("editing_mode", EditingMode.CONSERVATIVE.value))
        self.min_justification_length = pipeline_cfg.get("min_justification_length", 10)

    async def run(
        self,
        job_description: str,
        document_text: str,
        editing_mode: EditingMode | str | None = None,
    ) -> TailoringResult:
        """Run the complete tailoring pipeline.

        Args:
            job_description: Raw job description text
            document_text: LaTeX source of the CV template
            editing_mode: none, conservative, moderate or aggressive

        Returns:
            TailoringResult with every stage output

        Raises:
            ValueError: If the job description is empty
            InvalidOutputDocument: If the tailored document lost its envelope
        """
        if not job_description or not job_description.strip():
            raise ValueError("Job description is required")

        mode = EditingMode(editing_mode or self.default_mode)
        context = self._new_run_context()
        outcomes: list[StageOutcome] = []
        start_time = time.time()

        logger.info("pipeline_started", run_id=context.run_id, editing_mode=mode.value)

        # Step 1-3: understand the job, the document and the gap between them
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

        # Step 4: propose edits (skipped entirely when the caller wants none)
        if mode == EditingMode.NONE:
            logger.info("edit_proposal_skipped", run_id=context.run_id)
            edits = EditSet()
            outcomes.append(StageOutcome(stage=PipelineStage.EDIT_PROPOSAL, status=StageStatus.SKIPPED))
        else:
            edits = await self._run_stage(
                PipelineStage.EDIT_PROPOSAL,
                self.edit_proposal,
                EditProposalInput(
                    job=job,
                    gap_analysis=gap,
                    editing_mode=mode,
                    min_justification_length=self.min_justification_length,
                ),
                context,
                outcomes,
            )

        # Step 5: apply edits, then check the envelope
        tailored, report = self._apply_edits(document_text, edits, context, outcomes)
        try:
            ensure_valid_document(tailored)
        except InvalidOutputDocument as e:
            logger.error("pipeline_failed", run_id=context.run_id, missing=e.missing_markers)
            raise

        # Step 6: explain the changes
        change_log = await self._run_stage(
            PipelineStage.CHANGE_SUMMARY,
            self.change_log,
            ChangeLogInput(
                job=job,
                gap_analysis=gap,
                original_document=document_text,
                tailored_document=tailored,
                edits=edits,
                edit_report=report,
            ),
            context,
            outcomes,
        )

        result = TailoringResult(
            run_id=context.run_id,
            editing_mode=mode,
            job_parsed=job,
            document_parsed=document,
            gap_analysis=gap,
            targeted_edits=edits,
            edit_report=report,
            tailored_document=tailored,
            change_log=change_log,
            summary=TailoringSummary(
                keywords_added=change_log.summary.keywords_added,
                keywords_missing=change_log.summary.keywords_missing,
                questions_for_user=change_log.summary.questions_for_user,
                relevance_improvement=change_log.summary.relevance_improvement,
                edits_applied=len(report.applied),
            ),
            stage_outcomes=outcomes,
        )

        if self.store:
            self.store.save_tailoring_result(result)

        logger.info(
            "pipeline_completed",
            run_id=context.run_id,
            duration_seconds=round(time.time() - start_time, 3),
            edits_applied=result.summary.edits_applied,
            fallback_stages=result.fallback_stages,
        )
        return result

    def _apply_edits(
        self,
        document_text: str,
        edits: EditSet,
        context: AgentContext,
        outcomes: list[StageOutcome],
    ) -> tuple[str, EditReport]:
        start = time.time()
        try:
            tailored, report = apply_edits_with_report(document_text, edits)
        except Exception as e:
            # The edit engine is total; this keeps a bug in it from losing the run
            logger.exception("edit_application_failed", run_id=context.run_id, error=str(e))
            outcomes.append(
                StageOutcome(
                    stage=PipelineStage.EDIT_APPLICATION,
                    status=StageStatus.FALLBACK,
                    error=str(e),
                    duration_ms=int((time.time() - start) * 1000),
                )
            )
            return document_text, EditReport()

        outcomes.append(
            StageOutcome(
                stage=PipelineStage.EDIT_APPLICATION,
                status=StageStatus.SUCCEEDED,
                duration_ms=int((time.time() - start) * 1000),
            )
        )
        return tailored, report
