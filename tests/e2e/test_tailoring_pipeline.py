"""End-to-end tailoring runs with a scripted generation service and file-backed storage."""

import asyncio
import json

import pytest
import structlog

from cvtailor.core.config.loader import load_config
from cvtailor.core.errors import InvalidOutputDocument
from cvtailor.core.models.base import AgentContext
from cvtailor.core.models.enums import EditingMode, StageStatus
from cvtailor.core.orchestrator.pipeline import TailoringPipeline
from cvtailor.core.storage.object_store import ArtifactStore

JOB_REPLY = {
    "role_title": "Senior Backend Engineer",
    "core_responsibilities": ["Own backend services"],
    "required_skills": ["Python", "Kubernetes"],
    "preferred_skills": ["Kafka"],
    "keywords": ["FastAPI", "PostgreSQL"],
    "seniority": "senior",
    "location": "Berlin",
    "company_type": "startup",
}
DOCUMENT_REPLY = {
    "header": {"name": "Jordan Example", "contact": "Berlin, Germany"},
    "sections": {"skills": {"programming_languages": ["Python", "Go"]}},
}
GAP_REPLY = {
    "matched_keywords": ["Python", "FastAPI", "PostgreSQL"],
    "missing_keywords": ["Kubernetes", "Kafka"],
    "suggested_rewrites": [],
    "clarification_questions": ["Have you run services on Kubernetes?"],
    "relevance_score": "60%",
}
EDITS_REPLY = {
    "section_edits": [
        {
            "section": "experience",
            "subsection": "Backend Engineer",
            "original_text": "Built REST APIs in Python and FastAPI",
            "new_text": "Built high-throughput REST APIs in Python and FastAPI",
            "edit_type": "replace",
            "confidence": "HIGH",
            "justification": "The job asks for scalable backend APIs",
        },
        {
            "section": "experience",
            "original_text": "Migrated batch jobs",
            "new_text": "Migrated event-driven batch jobs",
            "confidence": "LOW",
            "justification": "Loosely related to Kafka",
        },
        {
            "section": "projects",
            "original_text": "Text that is not in the CV",
            "new_text": "Anything",
            "confidence": "HIGH",
            "justification": "Would highlight container experience",
        },
    ],
    "skill_additions": [{"category": "frameworks", "skills_to_emphasize": ["FastAPI"], "skills_to_add": []}],
    "project_reordering": [],
}
CHANGE_LOG_REPLY = {
    "changes": [
        {
            "original_text": "Built REST APIs in Python and FastAPI",
            "new_text": "Built high-throughput REST APIs in Python and FastAPI",
            "job_reference": "scalable backend APIs",
            "confidence": "HIGH",
            "justification": "Matches the API focus of the role",
        }
    ],
    "summary": {
        "keywords_added": ["FastAPI"],
        "keywords_missing": ["Kubernetes", "Kafka"],
        "questions_for_user": ["Have you run services on Kubernetes?"],
        "relevance_improvement": "Stronger emphasis on API work",
    },
}

REPLIES = {
    "Parse this job description": JOB_REPLY,
    "Parse this LaTeX CV": DOCUMENT_REPLY,
    "Perform a gap analysis": GAP_REPLY,
    "Based on this job analysis": EDITS_REPLY,
    "Generate a change log": CHANGE_LOG_REPLY,
}


def scripted_service(prompt: str) -> str:
    for prefix, reply in REPLIES.items():
        if prompt.startswith(prefix):
            return "Here is the analysis:\n" + json.dumps(reply)
    raise RuntimeError(f"unexpected prompt: {prompt[:40]}")


def _context() -> AgentContext:
    return AgentContext(config=load_config())


def test_service_path(tmp_path, backend_factory, client_factory, job_description, template_text):
    backend = backend_factory(scripted_service)
    store = ArtifactStore(tmp_path / "artifacts")
    pipeline = TailoringPipeline(_context(), client=client_factory(backend), store=store)

    result = asyncio.run(pipeline.run(job_description, template_text))

    assert result.fallback_stages == []
    assert [o.status for o in result.stage_outcomes] == [StageStatus.SUCCEEDED] * 6
    assert result.job_parsed.role_title == "Senior Backend Engineer"

    # The LOW confidence edit never reaches the engine; the unmatched one is skipped
    assert len(result.targeted_edits.section_edits) == 2
    assert result.edit_report.applied == [0]
    assert result.edit_report.skipped[0].reason == "original_not_found"
    assert result.summary.edits_applied == 1

    tailored = result.tailored_document
    assert "Built high-throughput REST APIs" in tailored
    assert "% source: experience_0" in tailored
    assert "\\textbf{FastAPI}" in tailored
    assert "Migrated batch jobs" in tailored
    assert result.summary.keywords_added == ["FastAPI"]
    assert result.summary.relevance_improvement == "Stronger emphasis on API work"

    assert store.load_tailored_document(result.run_id) == tailored
    assert store.load_tailoring_result(result.run_id).summary.edits_applied == 1


def test_stage_and_run_are_bound_for_service_calls(backend_factory, client_factory, job_description, template_text):
    seen = []

    def recording_service(prompt):
        bound = structlog.contextvars.get_contextvars()
        seen.append((bound.get("stage"), bound.get("run_id")))
        return scripted_service(prompt)

    pipeline = TailoringPipeline(_context(), client=client_factory(backend_factory(recording_service)))
    result = asyncio.run(pipeline.run(job_description, template_text))

    assert [stage for stage, _ in seen] == [
        "job_parse",
        "document_parse",
        "gap_analysis",
        "edit_proposal",
        "change_summary",
    ]
    assert {run_id for _, run_id in seen} == {result.run_id}


def test_offline_run_uses_fallbacks(job_description, template_text):
    pipeline = TailoringPipeline(_context())

    result = asyncio.run(pipeline.run(job_description, template_text))

    assert result.fallback_stages == [
        "job_parse",
        "document_parse",
        "gap_analysis",
        "edit_proposal",
        "change_summary",
    ]
    assert result.tailored_document == template_text
    assert result.summary.edits_applied == 0
    assert result.job_parsed.role_title == "Software Engineer"
    assert result.document_parsed.header.name == "Jordan Example"
    assert "python" in result.gap_analysis.matched_keywords
    assert result.summary.relevance_improvement == (
        "CV was optimized using targeted edits to preserve LaTeX structure"
    )


def test_unavailable_service_falls_back(backend_factory, client_factory, job_description, template_text):
    backend = backend_factory([RuntimeError("timeout")] * 50)
    pipeline = TailoringPipeline(_context(), client=client_factory(backend, max_attempts=2))

    result = asyncio.run(pipeline.run(job_description, template_text))

    assert result.tailored_document == template_text
    assert "job_parse" in result.fallback_stages
    assert len(backend.calls) == 10


def test_none_mode_skips_edit_proposal(backend_factory, client_factory, job_description, template_text):
    backend = backend_factory(scripted_service)
    pipeline = TailoringPipeline(_context(), client=client_factory(backend))

    result = asyncio.run(pipeline.run(job_description, template_text, editing_mode=EditingMode.NONE))

    outcomes = {o.stage: o.status for o in result.stage_outcomes}
    assert outcomes["edit_proposal"] == StageStatus.SKIPPED
    assert result.tailored_document == template_text
    assert not any(prompt.startswith("Based on this job analysis") for _, prompt in backend.calls)


def test_each_run_gets_a_fresh_id(job_description, template_text):
    pipeline = TailoringPipeline(_context())
    first = asyncio.run(pipeline.run(job_description, template_text))
    second = asyncio.run(pipeline.run(job_description, template_text))
    assert first.run_id != second.run_id


def test_broken_template_aborts_run(job_description, template_text):
    pipeline = TailoringPipeline(_context())
    broken = template_text.replace("\\end{document}", "")

    with pytest.raises(InvalidOutputDocument):
        asyncio.run(pipeline.run(job_description, broken))


def test_empty_job_description_is_rejected(template_text):
    with pytest.raises(ValueError):
        asyncio.run(TailoringPipeline(_context()).run("  ", template_text))
