"""Heuristic question generation and answer scoring."""

from cvtailor.core.agents.fallbacks import job_fallback
from cvtailor.core.models.document_profile import DocumentRecord
from cvtailor.core.models.enums import Difficulty, QuestionType
from cvtailor.core.models.job_profile import JobRecord
from cvtailor.core.tailoring.latex import scan_document
from cvtailor.interview.heuristics import MAX_VARIANT_QUESTIONS, TIER_PROFILES, HeuristicEngine

engine = HeuristicEngine()

JOB = JobRecord(
    role_title="Backend Engineer",
    required_skills=["Python", "Kubernetes", "PostgreSQL"],
    keywords=["APIs", "event-driven"],
)


def test_every_tier_has_five_questions_with_tier_ids():
    tiers = engine.generate_questions(JOB, DocumentRecord())

    assert list(tiers) == [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXTREME]
    for difficulty, questions in tiers.items():
        assert [q.id for q in questions] == [f"{difficulty.value}_{n}" for n in range(1, 6)]
        assert {q.difficulty for q in questions} == {difficulty.value}
        assert all(q.time_limit == TIER_PROFILES[difficulty].time_limit for q in questions)


def test_mcq_questions_carry_four_options_and_answer():
    easy = engine.generate_tier(JOB, DocumentRecord(), Difficulty.EASY)
    mcqs = [q for q in easy if q.type == QuestionType.MCQ]

    assert mcqs
    for question in mcqs:
        assert len(question.options) == 4
        assert question.correct_answer in question.options


def test_questions_reference_job_keywords():
    easy = engine.generate_tier(JOB, DocumentRecord(), Difficulty.EASY)
    assert "Python" in easy[0].question


def test_topics_fall_back_when_job_has_no_keywords():
    job = job_fallback("")
    questions = engine.generate_tier(job, DocumentRecord(), Difficulty.HARD)
    assert len(questions) == 5
    assert all(q.question for q in questions)


def test_topics_drop_filler_tokens():
    job = job_fallback("We are looking for a Python developer, who knows SQL.")
    topics = engine.topics(job, DocumentRecord())
    assert "python" in topics
    assert "sql" in topics
    assert "we" not in topics
    assert "sql." not in topics


def test_mcq_accepts_letter_number_or_text():
    question = engine.generate_tier(JOB, DocumentRecord(), Difficulty.EASY)[2]
    assert question.type == QuestionType.MCQ
    position = question.options.index(question.correct_answer)

    assert engine.evaluate_answer(question, "ABCD"[position], DocumentRecord()).score == 90
    assert engine.evaluate_answer(question, str(position + 1), DocumentRecord()).score == 90
    assert engine.evaluate_answer(question, question.correct_answer, DocumentRecord()).score == 90
    wrong = "ABCD"[(position + 1) % 4]
    assert engine.evaluate_answer(question, wrong, DocumentRecord()).score == 25


def test_short_answer_is_capped():
    question = engine.generate_tier(JOB, DocumentRecord(), Difficulty.EASY)[0]
    evaluation = engine.evaluate_answer(question, "Python is good", DocumentRecord())
    assert evaluation.score <= 25
    assert evaluation.overall_assessment == "poor"


def test_detailed_answer_scores_higher(template_text):
    document = scan_document(template_text)
    question = engine.generate_tier(JOB, document, Difficulty.EASY)[0]
    short = engine.evaluate_answer(question, "I know some Python.", document)
    detailed = engine.evaluate_answer(
        question,
        "Python is a dynamic language I use daily. For example, I built REST APIs with FastAPI "
        "because async handlers kept latency low, then I profiled hot paths and moved heavy "
        "queries to PostgreSQL indexes. However, there is a trade-off between readability and speed, "
        "so I first measure and then optimise the slowest part. The result was a 40 percent cut in "
        "response time, and the team could reuse the same patterns in Docker based services.",
        document,
    )

    assert detailed.score > short.score
    assert "Python" in detailed.detailed_analysis.correct_concepts
    assert "FastAPI" in detailed.skill_demonstration.demonstrated_skills
    assert 0 <= detailed.score <= 100


def test_variant_questions_cycle_tiers_and_clamp_count():
    questions = engine.variant_questions("Redis", count=50)
    assert len(questions) == MAX_VARIANT_QUESTIONS
    assert [q.difficulty for q in questions[:4]] == ["easy", "medium", "hard", "extreme"]
    assert questions[0].id == "var_easy_1"
    assert all(q.category == "variant" and q.time_limit == 180 for q in questions)


def test_variant_questions_single_tier():
    questions = engine.variant_questions("Redis", count=3, difficulty="hard")
    assert {q.difficulty for q in questions} == {"hard"}


def test_crafted_answer_uses_document(template_text):
    answer = engine.craft_answer(scan_document(template_text), "Why do you want this job?")
    assert "Backend Engineer" in answer
    assert "Task Queue Service" in answer
