"""Base agent class for all cvtailor generation stages."""

import json
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .extraction import StructuredExtractor
from ..errors import GenerationError, MalformedGenerationOutput
from ..models.base import AgentContext, AgentResult
from ..models.enums import AgentType
from ...integrations.llm_client import GenerationClient
from ...observability.logger import get_logger

logger = get_logger(__name__)

TInput = TypeVar("TInput", bound=BaseModel)
TOutput = TypeVar("TOutput", bound=BaseModel)


def to_prompt_json(record: BaseModel | dict[str, Any] | list[Any]) -> str:
    """Pretty JSON for embedding a record in a prompt."""
    if isinstance(record, BaseModel):
        return record.model_dump_json(indent=2)
    return json.dumps(record, indent=2, default=str)


class BaseAgent(ABC, Generic[TInput, TOutput]):
    """Abstract base class for all agents.

    Implements the template method pattern:
    - Task prompt built by the subclass
    - Structured extraction through the generation client
    - Shape check and Pydantic validation of the record
    - Deterministic fallback whenever the service path fails
    """

    # Required top-level keys of the generated record and their container kind
    expected_shape: dict[str, str] = {}

    def __init__(self, client: GenerationClient | None = None):
        """Initialize base agent.

        Args:
            client: Generation client; None means every call uses the fallback
        """
        self.client = client
        self.extractor = StructuredExtractor(client) if client else None
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def agent_type(self) -> AgentType:
        """Return the agent type enum."""

    @property
    @abstractmethod
    def output_schema(self) -> Type[TOutput]:
        """Return the Pydantic schema for output."""

    async def execute(self, input_data: TInput, context: AgentContext) -> AgentResult[TOutput]:
        """Run the stage and fall back on any generation-side failure.

        Args:
            input_data: Input data (Pydantic model)
            context: Execution context

        Returns:
            AgentResult; ``used_fallback`` is True when ``data`` is the fallback

        Raises:
            Exception: Anything that is not a generation failure (bugs, session errors)
        """
        start_time = time.time()

        self.logger.info(
            "agent_execution_start",
            agent=self.agent_type.value,
            run_id=context.run_id,
            trace_id=context.trace_id,
        )

        try:
            if self.extractor is None:
                raise GenerationError("Generation disabled for this run")
            result = await self.process(input_data, context)
        except GenerationError as e:
            return self._fallback_result(input_data, context, e, start_time)
        except ValidationError as e:
            malformed = MalformedGenerationOutput(f"Generated record failed validation: {e.error_count()} errors")
            return self._fallback_result(input_data, context, malformed, start_time)

        result.duration_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            "agent_execution_complete",
            agent=self.agent_type.value,
            run_id=context.run_id,
            success=result.success,
            duration_ms=result.duration_ms,
        )
        return result

    async def process(self, input_data: TInput, context: AgentContext) -> AgentResult[TOutput]:
        """Call the service and validate its record.

        Subclasses override ``postprocess`` rather than this method unless the
        stage does not produce a JSON record.
        """
        prompt = self._build_prompt(input_data, context)
        record = await self.extractor.extract(
            prompt,
            expected=self.expected_shape,
            preferred_provider=context.metadata.get("provider"),
        )
        output = self.output_schema.model_validate(record)
        output = self.postprocess(output, input_data, context)
        return AgentResult(success=True, data=output)

    def postprocess(self, output: TOutput, input_data: TInput, context: AgentContext) -> TOutput:
        """Adjust a validated record. Defaults to returning it unchanged."""
        return output

    @abstractmethod
    def _build_prompt(self, input_data: TInput, context: AgentContext) -> str:
        """Build the task prompt."""

    @abstractmethod
    def fallback(self, input_data: TInput, context: AgentContext) -> TOutput:
        """Deterministic record used when the service path fails."""

    def _fallback_result(
        self,
        input_data: TInput,
        context: AgentContext,
        error: Exception,
        start_time: float,
    ) -> AgentResult[TOutput]:
        self.logger.warning(
            "agent_using_fallback",
            agent=self.agent_type.value,
            run_id=context.run_id,
            error_type=type(error).__name__,
            error=str(error),
        )
        return AgentResult(
            success=False,
            data=self.fallback(input_data, context),
            error=str(error),
            used_fallback=True,
            duration_ms=int((time.time() - start_time) * 1000),
        )
