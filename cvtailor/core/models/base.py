"""Base Pydantic schemas and helpers for cvtailor models."""

import re
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# Type variable for generic result types
T = TypeVar('T')


# =============================================================================
# Lenient field types for generated payloads
# =============================================================================


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v is not None)
    return str(value)


def _coerce_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return [text] if text else []
    if isinstance(value, dict):
        return [str(v) for v in value.values() if v is not None]
    return [str(v) for v in value if v is not None and str(v).strip()]


def _coerce_score(value: Any) -> int:
    """Turn 85, 85.4, "85", "85/100" or "85%" into an int clamped to 0..100."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = re.search(r"-?\d+(?:\.\d+)?", str(value))
        number = float(match.group()) if match else 0.0
    return int(round(max(0.0, min(100.0, number))))


def _coerce_seconds(value: Any) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(int(value), 0)
    match = re.search(r"\d+", str(value or ""))
    return int(match.group()) if match else 300


Text = Annotated[str, BeforeValidator(_coerce_text)]
StrList = Annotated[list[str], BeforeValidator(_coerce_str_list)]
Score = Annotated[int, BeforeValidator(_coerce_score)]
Seconds = Annotated[int, BeforeValidator(_coerce_seconds)]


# =============================================================================
# Pydantic Base Classes
# =============================================================================


class CVTBaseModel(BaseModel):
    """Base Pydantic model for all schemas with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        use_enum_values=True,
        # Document text must round-trip byte for byte, so no stripping
        str_strip_whitespace=False,
    )


class IdentifiedSchema(CVTBaseModel):
    """Schema with UUID identifier."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique identifier")


# =============================================================================
# Common Response Models
# =============================================================================


class AgentContext(CVTBaseModel):
    """Context passed to all agent executions."""

    run_id: str = Field(default_factory=lambda: generate_id("run_"), description="Run identifier")
    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Trace ID")
    config: dict[str, Any] = Field(default_factory=dict, description="Configuration")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class AgentResult(CVTBaseModel, Generic[T]):
    """Standardized result wrapper for agent executions."""

    success: bool = Field(..., description="Whether the service produced the data")
    data: T | None = Field(None, description="Result data (fallback data when success is False)")
    error: str | None = Field(None, description="Error message if the service path failed")
    used_fallback: bool = Field(False, description="True when data is a static fallback")
    duration_ms: int = Field(0, ge=0, description="Execution duration in milliseconds")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


# =============================================================================
# Utility Functions
# =============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a prefixed UUID.

    Args:
        prefix: Optional prefix for the ID (e.g., "run_", "session_")

    Returns:
        Prefixed UUID string
    """
    uid = str(uuid.uuid4())
    return f"{prefix}{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)
