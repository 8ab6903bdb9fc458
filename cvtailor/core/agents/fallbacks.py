"""Deterministic records used when a generation stage fails."""

import re

from ..models.document_profile import DocumentRecord
from ..models.enums import ConfidenceTier
from ..models.job_profile import JobRecord
from ..models.letter import CoverLetter, LetterAnalysis, LetterBody
from ..models.tailoring import (
    ChangeEntry,
    ChangeLog,
    ChangeSummary,
    EditReport,
    EditSet,
    GapAnalysis,
)
from ..tailoring.latex import scan_document

FALLBACK_KEYWORD_LIMIT = 20


def job_fallback(job_description: str) -> JobRecord:
    """Generic job record; keywords are the first lowercased tokens of the text."""
    return JobRecord(
        role_title="Software Engineer",
        core_responsibilities=["Develop software applications", "Collaborate with team"],
        required_skills=["Programming", "Problem solving"],
        preferred_skills=[],
        keywords=job_description.lower().split()[:FALLBACK_KEYWORD_LIMIT],
        seniority="mid",
        location="Remote",
        company_type="tech",
    )


def document_fallback(document_text: str) -> DocumentRecord:
    return scan_document(document_text)


def _mentions(text: str, term: str) -> bool:
    pattern = rf"(?<!\w){re.escape(term.lower())}(?!\w)"
    return re.search(pattern, text) is not None


def gap_fallback(job: JobRecord, document: DocumentRecord) -> GapAnalysis:
    """Compare job terms with everything the document record mentions."""
    haystack = document.model_dump_json().lower()
    terms = [t.strip(".,;:!?()\"'") for t in job.all_terms()]
    terms = [t for t in terms if len(t) > 1]

    matched = [t for t in terms if _mentions(haystack, t)]
    missing = [t for t in terms if t not in matched]
    coverage = round(100 * len(matched) / len(terms)) if terms else 0

    return GapAnalysis(
        matched_keywords=matched,
        missing_keywords=missing,
        suggested_rewrites=[],
        clarification_questions=[f"Do you have experience with {t}?" for t in missing[:3]],
        relevance_score=f"{coverage}%",
    )


def change_log_fallback(edits: EditSet, report: EditReport, gap: GapAnalysis) -> ChangeLog:
    """Change log built from the edits that were actually applied."""
    applied = set(report.applied)
    changes = [
        ChangeEntry(
            original_text=edit.original_text,
            new_text=edit.new_text,
            job_reference=edit.subsection,
            confidence=edit.confidence,
            justification=f"Targeted edit to {edit.section} section",
        )
        for index, edit in enumerate(edits.section_edits)
        if index in applied
    ]
    return ChangeLog(
        changes=changes,
        summary=ChangeSummary(
            keywords_added=gap.matched_keywords,
            keywords_missing=gap.missing_keywords,
            questions_for_user=gap.clarification_questions,
            relevance_improvement="CV was optimized using targeted edits to preserve LaTeX structure",
        ),
    )


def letter_fallback(job: JobRecord, document: DocumentRecord, gap: GapAnalysis) -> CoverLetter:
    """A generic letter that only uses facts present in the records."""
    role = job.role_title or "this position"
    skills = document.all_skills()[:4]
    experience = document.sections.experience
    recent = experience[0] if experience else None
    name = document.header.name or "[Your Name]"

    body = []
    if recent and recent.role:
        at_company = f" at {recent.company}" if recent.company else ""
        body.append(
            f"In my current role as {recent.role}{at_company}, I have built practical experience "
            "that matches the responsibilities described in your posting."
        )
    if skills:
        body.append(
            f"My technical background includes {', '.join(skills)}, which I have applied in "
            "professional and project work."
        )
    if not body:
        body.append("My background and project work have prepared me well for the requirements of this role.")

    return CoverLetter(
        letter=LetterBody(
            greeting="Dear Hiring Manager,",
            opening_paragraph=f"I am writing to express my strong interest in the {role} position.",
            body_paragraphs=body,
            closing_paragraph=(
                "I am excited about the opportunity to contribute to your team and would welcome "
                "the chance to discuss how my background and skills can benefit your organization."
            ),
            signature=f"Sincerely,\n{name}",
        ),
        analysis=LetterAnalysis(
            matched_requirements=gap.matched_keywords[:5],
            highlighted_skills=skills,
            relevant_experiences=[f"{e.role}, {e.company}".strip(", ") for e in experience[:2]],
            confidence_score=ConfidenceTier.MEDIUM,
        ),
    )
