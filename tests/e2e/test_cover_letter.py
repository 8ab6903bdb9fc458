"""Cover letter runs, offline and with a scripted generation service."""

import asyncio
import json

from cvtailor.core.config.loader import load_config
from cvtailor.core.models.base import AgentContext
from cvtailor.core.orchestrator.letter import CoverLetterPipeline
from cvtailor.core.storage.object_store import ArtifactStore

LETTER_REPLY = {
    "letter": {
        "greeting": "Dear Hiring Team,",
        "opening_paragraph": "I am applying for the Senior Backend Engineer role.",
        "body_paragraphs": ["At Example Logistics GmbH I built REST APIs in Python and FastAPI."],
        "closing_paragraph": "I would welcome a conversation.",
        "signature": "Kind regards,\\nJordan Example",
    },
    "analysis": {
        "matched_requirements": ["Python"],
        "highlighted_skills": ["FastAPI"],
        "relevant_experiences": ["Backend Engineer, Example Logistics GmbH"],
        "confidence_score": "high",
    },
}


def test_offline_letter_uses_document_facts(tmp_path, job_description, template_text):
    store = ArtifactStore(tmp_path)
    pipeline = CoverLetterPipeline(AgentContext(config=load_config()), store=store)

    result = asyncio.run(pipeline.run(job_description, template_text))

    text = result.cover_letter.to_text()
    assert "Backend Engineer at Example Logistics GmbH" in text
    assert text.endswith("Sincerely,\nJordan Example")
    assert (tmp_path / result.run_id / "cover_letter.txt").read_text(encoding="utf-8") == text
    assert result.summary["confidence_score"] == "MEDIUM"


def test_generated_letter(backend_factory, client_factory, job_description, template_text):
    def reply(prompt):
        if prompt.startswith("Generate a professional motivational letter"):
            return json.dumps(LETTER_REPLY)
        raise RuntimeError("only the letter is scripted")

    pipeline = CoverLetterPipeline(
        AgentContext(config=load_config()),
        client=client_factory(backend_factory(reply), max_attempts=1),
    )

    result = asyncio.run(pipeline.run(job_description, template_text))

    letter = result.cover_letter
    assert letter.letter.signature == "Kind regards,\nJordan Example"
    assert letter.analysis.confidence_score == "HIGH"
    assert [o.stage for o in result.stage_outcomes] == ["job_parse", "document_parse", "gap_analysis", "letter"]
    assert [o.status for o in result.stage_outcomes] == ["fallback", "fallback", "fallback", "succeeded"]
