"""A full mock interview, start to results."""

import asyncio

import pytest

from cvtailor.core.errors import NoActiveSession
from cvtailor.core.storage.object_store import ArtifactStore
from cvtailor.interview.session import InterviewService

ANSWER = (
    "First I would clarify the requirements, then sketch the data flow. For example, with Python "
    "services I add caching because it cuts latency, and I measure the result before and after."
)


def _run_session(service, job_description, template_text):
    async def run():
        start = await service.start(job_description, template_text, "heuristic")
        outcomes = []
        view = start.current_question
        while view is not None:
            outcomes.append(await service.submit_answer(start.id, view.id, ANSWER))
            view = service.next_question(start.id)
        return start, outcomes

    return asyncio.run(run())


def test_twenty_answers_complete_the_session(tmp_path, job_description, template_text):
    service = InterviewService()
    start, outcomes = _run_session(service, job_description, template_text)

    assert len(outcomes) == 20
    assert [o.is_complete for o in outcomes] == [False] * 19 + [True]
    assert outcomes[-1].progress.completed == 20

    results = service.results(start.id)
    assert results.completed_questions == 20
    assert list(results.difficulty_stats) == ["easy", "medium", "hard", "extreme"]
    assert all(stats.count == 5 for stats in results.difficulty_stats.values())
    scores = [a.evaluation.score for a in results.answers]
    assert results.overall_score == int(sum(scores) / 20 + 0.5)
    assert results.recommendations

    store = ArtifactStore(tmp_path)
    store.save_assessment_results(results)
    assert store.load_assessment_results(start.id).overall_score == results.overall_score


def test_twenty_first_answer_is_rejected(job_description, template_text):
    service = InterviewService()
    start, _ = _run_session(service, job_description, template_text)
    session = service.store.get(start.id)

    with pytest.raises(NoActiveSession):
        asyncio.run(service.submit_answer(start.id, "extreme_5", ANSWER))

    assert len(session.scores) == 20
    assert len(session.answers) == 20
    assert service.next_question(start.id) is None


def test_job_without_keywords_still_runs(template_text):
    service = InterviewService()
    start, outcomes = _run_session(service, "!!! ???", template_text)

    assert start.total_questions == 20
    assert len(outcomes) == 20
    assert service.results(start.id).completed_questions == 20
