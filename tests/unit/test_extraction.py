"""Structured payload extraction from free-form generated text."""

import asyncio

import pytest

from cvtailor.core.agents.extraction import (
    JSON_ONLY_INSTRUCTION,
    StructuredExtractor,
    ensure_json_instruction,
    extract_json_payload,
    validate_shape,
)
from cvtailor.core.errors import MalformedGenerationOutput


def test_payload_surrounded_by_prose():
    raw = 'Sure! Here is the result:\n{"keywords": ["python"], "nested": {"a": 1}}\nHope that helps.'
    assert extract_json_payload(raw) == {"keywords": ["python"], "nested": {"a": 1}}


def test_payload_inside_code_fence():
    raw = '```json\n{"required_skills": []}\n```'
    assert extract_json_payload(raw) == {"required_skills": []}


@pytest.mark.parametrize(
    "raw",
    [
        "no braces at all",
        "} backwards {",
        '{"unterminated": [1, 2}',
        "",
    ],
)
def test_bad_payloads_raise(raw):
    with pytest.raises(MalformedGenerationOutput) as exc:
        extract_json_payload(raw)
    assert exc.value.raw_text == raw


def test_shape_check_reports_missing_key():
    with pytest.raises(MalformedGenerationOutput, match="keywords"):
        validate_shape({"required_skills": []}, {"required_skills": "list", "keywords": "list"})


def test_shape_check_reports_wrong_kind():
    with pytest.raises(MalformedGenerationOutput, match="Expected list"):
        validate_shape({"keywords": "python"}, {"keywords": "list"})


def test_json_instruction_added_once():
    prompt = ensure_json_instruction("Parse this.")
    assert prompt.endswith(JSON_ONLY_INSTRUCTION)
    assert ensure_json_instruction(prompt) == prompt


def test_extractor_sends_instruction_and_parses(backend_factory, client_factory):
    backend = backend_factory(['Result: {"header": {}, "sections": {}}'])
    extractor = StructuredExtractor(client_factory(backend))

    record = asyncio.run(extractor.extract("Parse this CV", expected={"header": "object", "sections": "object"}))

    assert record == {"header": {}, "sections": {}}
    assert backend.calls[0][1].endswith(JSON_ONLY_INSTRUCTION)
