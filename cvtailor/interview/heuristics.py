"""Deterministic question generation and answer scoring without a generation service."""

import re
from dataclasses import dataclass

from ..core.models.document_profile import DocumentRecord
from ..core.models.enums import DIFFICULTY_ORDER, Difficulty, QuestionType
from ..core.models.interview import (
    DetailedAnalysis,
    Evaluation,
    Feedback,
    Question,
    SkillDemonstration,
)
from ..core.models.job_profile import JobRecord
from ..observability.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TierProfile:
    """How questions of one difficulty tier are shaped."""

    description: str
    types: tuple[QuestionType, ...]
    prompt_types: tuple[str, ...]
    time_limit: int


TIER_PROFILES: dict[Difficulty, TierProfile] = {
    Difficulty.EASY: TierProfile(
        description="Basic concepts, fundamental knowledge, and simple problem-solving",
        types=(QuestionType.CONCEPTUAL, QuestionType.CODING, QuestionType.MCQ),
        prompt_types=("conceptual", "basic_coding", "mcq"),
        time_limit=180,
    ),
    Difficulty.MEDIUM: TierProfile(
        description="Intermediate concepts, practical applications, and moderate problem-solving",
        types=(QuestionType.PRACTICAL, QuestionType.CODING, QuestionType.SYSTEM_DESIGN, QuestionType.MCQ),
        prompt_types=("practical", "coding", "system_design_basic", "mcq"),
        time_limit=300,
    ),
    Difficulty.HARD: TierProfile(
        description="Advanced concepts, complex problem-solving, and in-depth technical knowledge",
        types=(QuestionType.CODING, QuestionType.SYSTEM_DESIGN, QuestionType.PRACTICAL, QuestionType.CONCEPTUAL),
        prompt_types=("advanced_coding", "system_design", "algorithm_optimization", "troubleshooting"),
        time_limit=600,
    ),
    Difficulty.EXTREME: TierProfile(
        description="Expert-level challenges, complex system design, and cutting-edge technology",
        types=(QuestionType.CODING, QuestionType.SYSTEM_DESIGN, QuestionType.PRACTICAL, QuestionType.BEHAVIORAL),
        prompt_types=("expert_coding", "architecture_design", "performance_optimization", "edge_cases"),
        time_limit=900,
    ),
}

VARIANT_TYPES = (QuestionType.CONCEPTUAL, QuestionType.MCQ, QuestionType.SYSTEM_DESIGN, QuestionType.PRACTICAL)
VARIANT_TIME_LIMIT = 180
MAX_VARIANT_QUESTIONS = 20

_TIER_DEPTH = {
    Difficulty.EASY: "",
    Difficulty.MEDIUM: " Mention one trade-off you would consider.",
    Difficulty.HARD: " Discuss trade-offs, failure modes and how you would test it.",
    Difficulty.EXTREME: " Cover scale, failure modes, observability and the edge cases you would guard against.",
}

_STRUCTURE_CUES = (
    "for example", "e.g", "such as", "because", "therefore", "first", "then",
    "finally", "trade-off", "tradeoff", "however", "instead", "result",
)

_HINTS = {
    QuestionType.CODING: ["State your assumptions first", "Walk through a small example"],
    QuestionType.MCQ: ["Eliminate clearly wrong options"],
    QuestionType.CONCEPTUAL: ["Define the concept before applying it", "Give a concrete example"],
    QuestionType.SYSTEM_DESIGN: ["Start from the requirements", "Name the main components"],
    QuestionType.BEHAVIORAL: ["Use situation, task, action, result"],
    QuestionType.PRACTICAL: ["Describe how you would measure the problem", "Relate to outcomes"],
}


_STOPWORDS = frozenset(
    "a an and are as at be by for from has have in is it of on or our that the this to "
    "we will with you your who what about looking join team role work".split()
)


def _words(text: str) -> list[str]:
    return re.findall(r"[a-z0-9+#]+", text.lower())


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(value.strip())
    return result


def _mcq_options(topic: str, number: int) -> tuple[list[str], str]:
    correct = f"{topic} should be chosen by weighing the problem's requirements and trade-offs"
    distractors = [
        f"{topic} is always the fastest option regardless of context",
        f"{topic} cannot be combined with other tools or languages",
        f"{topic} is only relevant for academic projects",
    ]
    position = (number - 1) % 4
    options = distractors[:position] + [correct] + distractors[position:]
    return options, correct


class HeuristicEngine:
    """Local question generator and answer evaluator.

    Every output is a pure function of its inputs, so sessions driven by this
    engine are reproducible and never touch the network.
    """

    def topics(self, job: JobRecord, document: DocumentRecord) -> list[str]:
        """Job skills and keywords first, then document skills."""
        candidates = [*job.required_skills, *job.keywords, *job.preferred_skills, *document.all_skills()]
        # Bare tokens from a fallback job record carry punctuation and filler words
        topics = _dedupe([
            t for t in (c.strip(".,;:!?()\"'") for c in candidates)
            if len(t) > 1 and not t.isdigit() and t.lower() not in _STOPWORDS
        ])
        return topics or ["software engineering", "problem solving", "system design"]

    def build_question(
        self,
        topic: str,
        difficulty: Difficulty,
        qtype: QuestionType,
        number: int,
        role: str = "",
        time_limit: int | None = None,
        id_prefix: str | None = None,
        category: str | None = None,
    ) -> Question:
        role = role or "software engineering"
        depth = _TIER_DEPTH[Difficulty(difficulty)]
        options = None
        if qtype == QuestionType.MCQ:
            text = f"Which statement about {topic} is most accurate?"
            options, answer = _mcq_options(topic, number)
        elif qtype == QuestionType.CODING:
            text = (
                f"Write a short function or snippet that demonstrates {topic}. "
                f"Explain its inputs, outputs and complexity.{depth}"
            )
            answer = f"A working example using {topic}, with clear complexity analysis."
        elif qtype == QuestionType.SYSTEM_DESIGN:
            text = (
                f"Design a component for a {role} team that relies on {topic}. "
                f"Describe the main parts and the data flow.{depth}"
            )
            answer = f"Requirements, components, data flow and scaling concerns around {topic}."
        elif qtype == QuestionType.PRACTICAL:
            text = (
                f"A production issue involving {topic} is slowing your team down. "
                f"How would you investigate and fix it?{depth}"
            )
            answer = f"Measure first, isolate the {topic} bottleneck, fix, then verify with metrics."
        elif qtype == QuestionType.BEHAVIORAL:
            text = f"Tell me about a time you used {topic} to deliver a result under pressure.{depth}"
            answer = "Situation, task, concrete actions and a measurable result."
        else:
            text = f"Explain the core ideas behind {topic} and when you would use it as part of {role}.{depth}"
            answer = f"Definition of {topic}, a concrete use case and its limitations."

        profile = TIER_PROFILES[Difficulty(difficulty)]
        return Question(
            id=f"{id_prefix or Difficulty(difficulty).value}_{number}",
            type=qtype,
            difficulty=difficulty,
            category=category or topic,
            question=text,
            options=options,
            correct_answer=answer,
            expected_skills=[topic],
            time_limit=time_limit or profile.time_limit,
            hints=list(_HINTS[QuestionType(qtype)]),
        )

    def generate_tier(
        self, job: JobRecord, document: DocumentRecord, difficulty: Difficulty, count: int = 5
    ) -> list[Question]:
        difficulty = Difficulty(difficulty)
        profile = TIER_PROFILES[difficulty]
        topics = self.topics(job, document)
        # Each tier starts at a different topic so the tiers do not repeat each other
        offset = DIFFICULTY_ORDER.index(difficulty) * count
        return [
            self.build_question(
                topic=topics[(offset + i) % len(topics)],
                difficulty=difficulty,
                qtype=profile.types[i % len(profile.types)],
                number=i + 1,
                role=job.role_title,
            )
            for i in range(count)
        ]

    def generate_questions(
        self, job: JobRecord, document: DocumentRecord, count: int = 5
    ) -> dict[Difficulty, list[Question]]:
        """Five questions (by default) for every tier, in tier order."""
        return {d: self.generate_tier(job, document, d, count) for d in DIFFICULTY_ORDER}

    def variant_questions(self, topic: str, count: int = 5, difficulty: str = "mixed") -> list[Question]:
        """Standalone questions about one topic, cycling tiers when difficulty is "mixed"."""
        count = max(1, min(MAX_VARIANT_QUESTIONS, int(count or 5)))
        topic = topic.strip() or "problem solving"
        tiers = list(DIFFICULTY_ORDER) if difficulty == "mixed" else [Difficulty(difficulty)]
        questions = []
        for i in range(count):
            tier = tiers[i % len(tiers)]
            question = self.build_question(
                topic=topic,
                difficulty=tier,
                qtype=VARIANT_TYPES[i % len(VARIANT_TYPES)],
                number=i + 1,
                time_limit=VARIANT_TIME_LIMIT,
                id_prefix=f"var_{tier.value}",
                category="variant",
            )
            questions.append(question)
        return questions

    def is_correct_choice(self, question: Question, answer: str) -> bool:
        """Accept the option text, its letter (A-D) or its 1-based number."""
        if not question.options or not question.correct_answer:
            return False
        given = answer.strip().lower().rstrip(").")
        correct = question.correct_answer.strip().lower()
        if given == correct:
            return True
        try:
            index = [o.strip().lower() for o in question.options].index(correct)
        except ValueError:
            return False
        return given in (chr(ord("a") + index), str(index + 1))

    def evaluate_answer(self, question: Question, answer: str, document: DocumentRecord) -> Evaluation:
        """Score an answer from local signals only."""
        text = answer.strip()
        lowered = text.lower()
        words = _words(text)
        vocabulary = set(words)

        expected = [s for s in question.expected_skills if s.strip()]
        demonstrated = [s for s in expected if any(tok in vocabulary for tok in _words(s))]
        missing = [s for s in expected if s not in demonstrated]
        cues = [cue for cue in _STRUCTURE_CUES if cue in lowered]
        cv_mentions = [
            s for s in document.all_skills()
            if _words(s) and all(tok in vocabulary for tok in _words(s))
        ]

        if question.type == QuestionType.MCQ and question.options:
            correct = self.is_correct_choice(question, text)
            score = 90 if correct else 25
            strengths = ["Selected the correct option"] if correct else []
            improvements = [] if correct else [f"Review {', '.join(expected) or 'the topic'}; the correct option was: {question.correct_answer}"]
        else:
            length_points = min(len(words), 120) / 120 * 35
            skill_points = 30 * len(demonstrated) / len(expected) if expected else 15
            structure_points = min(len(cues), 3) * 5
            cv_points = min(len(cv_mentions), 2) * 5
            score = round(10 + length_points + skill_points + structure_points + cv_points)
            if len(words) < 5:
                score = min(score, 25)

            strengths = []
            improvements = []
            if len(words) >= 60:
                strengths.append("Detailed answer")
            else:
                improvements.append("Could provide more detailed explanation")
            if demonstrated:
                strengths.append(f"Addressed {', '.join(demonstrated)}")
            if cues:
                strengths.append("Structured reasoning with examples")
            else:
                improvements.append("Provide more specific examples and reasoning")
            if cv_mentions:
                strengths.append("Connected the answer to own experience")
            if not strengths:
                strengths.append("Attempted to answer the question")

        score = max(0, min(100, score))
        evaluation = Evaluation(
            score=score,
            feedback=Feedback(
                strengths=strengths,
                improvements=improvements,
                technical_accuracy=_band(score, ("excellent", "good", "fair", "poor")),
                completeness=_band(score, ("complete", "mostly_complete", "partial", "incomplete")),
                communication="clear" if cues else ("mostly_clear" if len(words) >= 20 else "unclear"),
            ),
            detailed_analysis=DetailedAnalysis(
                correct_concepts=demonstrated,
                missing_concepts=missing,
                suggested_improvements=improvements,
                follow_up_questions=["Can you elaborate on this approach?"],
            ),
            skill_demonstration=SkillDemonstration(
                demonstrated_skills=_dedupe(demonstrated + cv_mentions),
                missing_skills=missing,
                skill_level=_band(score, ("expert", "advanced", "intermediate", "beginner")),
            ),
            overall_assessment=_assessment(score),
        )
        logger.debug("heuristic_answer_scored", question_id=question.id, score=score)
        return evaluation

    def craft_answer(self, document: DocumentRecord, question: str) -> str:
        """A short first-person answer built from the document record."""
        experience = document.sections.experience
        projects = document.sections.projects
        role = experience[0].role if experience and experience[0].role else "engineering"
        project = projects[0].name if projects and projects[0].name else "building useful tools"
        return (
            "I value thoughtful work and steady growth. "
            f"This question connects with my experience in {role} and my interest in {project}. "
            "I am drawn to teams that care about people and impact. "
            "My background taught me to balance discipline with empathy, staying curious while delivering results. "
            "I would like to bring that mindset here, contribute quickly and keep learning with the team."
        )


def _band(score: int, labels: tuple[str, str, str, str]) -> str:
    if score >= 85:
        return labels[0]
    if score >= 70:
        return labels[1]
    if score >= 50:
        return labels[2]
    return labels[3]


def _assessment(score: int) -> str:
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 55:
        return "satisfactory"
    if score >= 40:
        return "needs_improvement"
    return "poor"
