"""Agent template method: service path, fallbacks and record post-processing."""

import asyncio
import json

import pytest
from pydantic import ValidationError

from cvtailor.core.agents.edit_proposal import EditProposalAgent, EditProposalInput
from cvtailor.core.agents.job_understanding import JobDescriptionInput, JobUnderstandingAgent
from cvtailor.core.agents.question_generation import normalise_tier
from cvtailor.core.agents.variants import (
    VariantAnswerAgent,
    VariantAnswerInput,
    VariantQuestionsAgent,
    VariantQuestionsInput,
)
from cvtailor.core.models.base import AgentContext
from cvtailor.core.models.document_profile import DocumentHeader, DocumentRecord
from cvtailor.core.models.enums import Difficulty
from cvtailor.core.models.interview import Question
from cvtailor.core.models.job_profile import JobRecord
from cvtailor.core.models.tailoring import GapAnalysis

CONTEXT = AgentContext()


def test_agent_without_client_falls_back():
    result = asyncio.run(JobUnderstandingAgent().execute(JobDescriptionInput(description="Go Developer"), CONTEXT))

    assert not result.success
    assert result.used_fallback
    assert result.data.keywords == ["go", "developer"]


def test_agent_uses_service_record(backend_factory, client_factory):
    reply = json.dumps({"role_title": "Go Developer", "required_skills": ["Go", None], "keywords": ["grpc"]})
    agent = JobUnderstandingAgent(client_factory(backend_factory([reply])))

    result = asyncio.run(agent.execute(JobDescriptionInput(description="Go Developer"), CONTEXT))

    assert result.success
    assert result.data.role_title == "Go Developer"
    assert result.data.required_skills == ["Go"]


def test_record_with_wrong_shape_falls_back(backend_factory, client_factory):
    agent = JobUnderstandingAgent(client_factory(backend_factory(['{"role_title": "x"}'])))

    result = asyncio.run(agent.execute(JobDescriptionInput(description="Rust Engineer"), CONTEXT))

    assert result.used_fallback
    assert "required_skills" in result.error
    assert result.data.role_title == "Software Engineer"


def test_provider_preference_comes_from_context(backend_factory, client_factory):
    backend = backend_factory(['{"required_skills": [], "keywords": []}'])
    agent = JobUnderstandingAgent(client_factory(backend))

    asyncio.run(agent.execute(JobDescriptionInput(description="x"), AgentContext(metadata={"provider": "gamma"})))

    assert backend.providers_called == ["gamma"]


def test_edit_proposal_keeps_only_justified_high_confidence(backend_factory, client_factory):
    reply = {
        "section_edits": [
            {"original_text": "a", "new_text": "b", "confidence": "high", "justification": "Directly requested by the job"},
            {"original_text": "c", "new_text": "d", "confidence": "HIGH", "justification": "short"},
            {"original_text": "e", "new_text": "f", "confidence": "MEDIUM", "justification": "Medium confidence change"},
            "not a record",
        ],
        "skill_additions": [],
        "project_reordering": [],
    }
    agent = EditProposalAgent(client_factory(backend_factory([json.dumps(reply)])))
    request = EditProposalInput(job=JobRecord(), gap_analysis=GapAnalysis())

    result = asyncio.run(agent.execute(request, CONTEXT))

    assert [e.original_text for e in result.data.section_edits] == ["a"]


def test_normalise_tier_pads_and_renames():
    generated = [Question(id="q9", difficulty="easy", question="Generated?")]
    padding = [Question(id=f"p{n}", question=f"Pad {n}?") for n in range(5)]

    questions = normalise_tier(generated, padding, Difficulty.HARD, 3)

    assert [q.id for q in questions] == ["hard_1", "hard_2", "hard_3"]
    assert [q.question for q in questions] == ["Generated?", "Pad 0?", "Pad 1?"]
    assert {q.difficulty for q in questions} == {"hard"}


def test_variant_input_validation():
    assert VariantQuestionsInput(topic="Redis", count=99).count == 20
    assert VariantQuestionsInput(topic="Redis", count="abc").count == 5
    assert VariantQuestionsInput(topic="Redis", count=0).count == 1
    with pytest.raises(ValidationError):
        VariantQuestionsInput(topic="Redis", difficulty="impossible")
    with pytest.raises(ValidationError):
        VariantAnswerInput(question="   ")


def test_variant_questions_from_service(backend_factory, client_factory):
    questions = [{"question": f"Q{n}?", "type": "conceptual"} for n in range(4)]
    agent = VariantQuestionsAgent(client_factory(backend_factory([json.dumps({"questions": questions})])))

    result = asyncio.run(agent.execute(VariantQuestionsInput(topic="Redis", count=2), CONTEXT))

    assert result.success
    assert [q.id for q in result.data.questions] == ["v1", "v2"]


def test_variant_questions_empty_reply_falls_back(backend_factory, client_factory):
    agent = VariantQuestionsAgent(client_factory(backend_factory(['{"questions": []}'])))

    result = asyncio.run(agent.execute(VariantQuestionsInput(topic="Redis", count=3), CONTEXT))

    assert result.used_fallback
    assert [q.id for q in result.data.questions] == ["var_easy_1", "var_medium_2", "var_hard_3"]


def test_variant_answer_strips_quotes(backend_factory, client_factory):
    backend = backend_factory(['"I enjoy building reliable systems."'])
    agent = VariantAnswerAgent(client_factory(backend), personal_notes="I volunteer as a mentor.")

    result = asyncio.run(agent.execute(VariantAnswerInput(question="Why this company?"), CONTEXT))

    assert result.data.answer == "I enjoy building reliable systems."
    assert "I volunteer as a mentor." in backend.calls[0][1]


def test_variant_answer_fallback_without_client():
    result = asyncio.run(VariantAnswerAgent().execute(VariantAnswerInput(question="Why us?"), CONTEXT))
    assert result.used_fallback
    assert result.data.answer.startswith("I value thoughtful work")


def test_variant_questions_prompt_includes_profile_only_when_given(backend_factory, client_factory):
    reply = json.dumps({"questions": [{"question": "Q?", "type": "conceptual"}]})
    backend = backend_factory([reply, reply])
    agent = VariantQuestionsAgent(client_factory(backend))
    document = DocumentRecord(header=DocumentHeader(name="Jordan Example"))

    asyncio.run(agent.execute(VariantQuestionsInput(topic="Redis", count=1), CONTEXT))
    asyncio.run(agent.execute(VariantQuestionsInput(topic="Redis", count=1, document=document), CONTEXT))

    bare, personal = (prompt for _, prompt in backend.calls)
    assert "candidate profile" not in bare.lower()
    assert "CANDIDATE PROFILE" in personal
    assert "Jordan Example" in personal
    assert "Use the candidate profile" in personal
