"""Locate, parse and shape-check structured payloads in generated text."""

import json
from typing import Any

from ..errors import MalformedGenerationOutput
from ...integrations.llm_client import GenerationClient
from ...observability.logger import get_logger

logger = get_logger(__name__)

JSON_ONLY_INSTRUCTION = (
    "CRITICAL: Return ONLY the JSON object. Do not include any explanatory text, "
    "comments, or additional content. Start your response with { and end with }."
)

_KIND_CHECKS = {
    "list": lambda value: isinstance(value, list),
    "object": lambda value: isinstance(value, dict),
    "any": lambda value: True,
}


def ensure_json_instruction(prompt: str) -> str:
    """Append the JSON-only instruction unless the prompt already ends with it."""
    if prompt.rstrip().endswith(JSON_ONLY_INSTRUCTION):
        return prompt
    return f"{prompt.rstrip()}\n\n{JSON_ONLY_INSTRUCTION}"


def extract_json_payload(raw_text: str) -> dict[str, Any]:
    """Parse the span from the first '{' to the last '}' of generated text.

    Args:
        raw_text: Free-form generated text

    Returns:
        Parsed JSON object

    Raises:
        MalformedGenerationOutput: If no braces are found, they are out of
            order, the span is not valid JSON, or it is not an object
    """
    text = (raw_text or "").strip()
    start = text.find("{")
    end = text.rfind("}")

    if start == -1 or end == -1 or end < start:
        logger.warning("structured_payload_missing", raw_preview=text[:200])
        raise MalformedGenerationOutput("No valid JSON found in response", raw_text=raw_text)

    try:
        payload = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        logger.warning("structured_payload_invalid", error=str(e), raw_preview=text[:200])
        raise MalformedGenerationOutput(f"Invalid JSON payload: {e}", raw_text=raw_text) from e

    if not isinstance(payload, dict):
        raise MalformedGenerationOutput("JSON payload is not an object", raw_text=raw_text)
    return payload


def validate_shape(record: dict[str, Any], expected: dict[str, str]) -> dict[str, Any]:
    """Check required keys and container kinds of a parsed record.

    Args:
        record: Parsed payload
        expected: Key -> "list" | "object" | "any"

    Returns:
        The record, unchanged

    Raises:
        MalformedGenerationOutput: On a missing key or wrong container kind
    """
    for key, kind in expected.items():
        if key not in record:
            logger.warning("structured_payload_missing_key", key=key)
            raise MalformedGenerationOutput(f"Missing key in generated record: {key}")
        check = _KIND_CHECKS.get(kind, _KIND_CHECKS["any"])
        if not check(record[key]):
            logger.warning(
                "structured_payload_wrong_kind",
                key=key,
                expected=kind,
                actual=type(record[key]).__name__,
            )
            raise MalformedGenerationOutput(
                f"Expected {kind} for key {key}, got {type(record[key]).__name__}"
            )
    return record


class StructuredExtractor:
    """Send a task prompt and return the structured record it produced."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def extract(
        self,
        task_prompt: str,
        expected: dict[str, str] | None = None,
        preferred_provider: str | None = None,
    ) -> dict[str, Any]:
        raw = await self.client.invoke(
            ensure_json_instruction(task_prompt),
            preferred_provider=preferred_provider,
        )
        record = extract_json_payload(raw)
        if expected:
            validate_shape(record, expected)
        return record
