"""Apply proposed edits to a LaTeX document without breaking its structure.

Section edits are literal replace-all substitutions. Every line that received
a replacement gets an inert ``% source: {section}_{index}`` comment appended at
its end, so the marker never comments out LaTeX that follows the replaced text
on the same line. Skill emphasis wraps whole-word, case-insensitive matches in
``\\textbf{...}`` and is idempotent.
"""

import re
from typing import Any

from pydantic import ValidationError

from .latex import missing_envelope_markers
from ..errors import InvalidOutputDocument
from ..models.tailoring import EditReport, EditSet, SectionEdit, SkippedEdit
from ...observability.logger import get_logger

logger = get_logger(__name__)

SOURCE_MARKER = " % source: {section}_{index}"

# Private-use code points, used to tag replacement ends while rewriting lines
_ANCHOR_RANGE = range(0xE000, 0xF8FF)


def _anchor_for(text: str) -> str:
    for code in _ANCHOR_RANGE:
        anchor = chr(code)
        if anchor not in text:
            return anchor
    raise ValueError("No free anchor character available")


def _coerce_edit_set(edit_set: EditSet | dict[str, Any] | None) -> EditSet | None:
    if edit_set is None or isinstance(edit_set, EditSet):
        return edit_set
    try:
        return EditSet.model_validate(edit_set)
    except ValidationError as e:
        logger.warning("edit_set_invalid", error=str(e))
        return None


def _replace_section_text(document: str, edit: SectionEdit, index: int) -> str:
    anchor = _anchor_for(document + edit.new_text)
    pattern = re.compile(re.escape(edit.original_text))
    # Callable replacement keeps backslashes in LaTeX literal
    tagged = pattern.sub(lambda _match: edit.new_text + anchor, document)

    marker = SOURCE_MARKER.format(section=edit.section, index=index)
    lines = tagged.split("\n")
    for i, line in enumerate(lines):
        if anchor not in line:
            continue
        line = line.replace(anchor, "")
        if line.endswith("\r"):
            lines[i] = line[:-1] + marker + "\r"
        else:
            lines[i] = line + marker
    return "\n".join(lines)


def _skip_reason(document: str, edit: SectionEdit) -> str | None:
    if not edit.original_text or not edit.new_text:
        return "empty_text"
    if edit.original_text == edit.new_text:
        return "identical_text"
    if edit.original_text not in document:
        return "original_not_found"
    return None


# Regions emphasis must not touch: link targets, package/class options and comments
_PROTECTED = re.compile(
    r"\\(?:href|url)\{[^{}]*\}"
    r"|\\(?:documentclass|usepackage|RequirePackage|hypersetup)(?:\[[^\]]*\])?\{[^{}]*\}"
    r"|(?<!\\)%[^\n]*"
)


def protected_spans(document: str) -> list[tuple[int, int]]:
    """Character ranges where wrapping text in \\textbf would break the LaTeX."""
    spans = [match.span() for match in _PROTECTED.finditer(document)]
    body_start = document.find("\\begin{document}")
    if body_start > 0:
        spans.append((0, body_start))
    return spans


def emphasis_pattern(skill: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive match outside command names and environment names."""
    prefix = r"\b" if re.match(r"\w", skill) else ""
    suffix = r"\b" if re.search(r"\w$", skill) else ""
    return re.compile(
        rf"(?<!\\)(?<!\\begin\{{)(?<!\\end\{{){prefix}{re.escape(skill)}{suffix}",
        re.IGNORECASE,
    )


def emphasize_skill(document: str, skill: str) -> str:
    """Wrap every match of a skill in \\textbf{}; unchanged if already emphasised.

    Matches in the preamble, inside \\href/\\url targets, package options or
    comments are left as they are.
    """
    skill = skill.strip()
    if not skill:
        return document
    if f"\\textbf{{{skill}}}".lower() in document.lower():
        return document
    pattern = emphasis_pattern(skill)
    if not pattern.search(document):
        return document

    spans = protected_spans(document)

    def wrap(match: re.Match[str]) -> str:
        if any(start <= match.start() < end for start, end in spans):
            return match.group(0)
        return f"\\textbf{{{match.group(0)}}}"

    return pattern.sub(wrap, document)


def apply_edits_with_report(
    document: str, edit_set: EditSet | dict[str, Any] | None
) -> tuple[str, EditReport]:
    """Apply an edit set and report what was applied or skipped.

    Args:
        document: Template text
        edit_set: Proposed edits (record or raw dict)

    Returns:
        Tuple of (edited text, report)
    """
    report = EditReport()
    edits = _coerce_edit_set(edit_set)
    if edits is None or edits.is_empty:
        logger.info("edits_not_needed")
        return document, report

    result = document
    for index, edit in enumerate(edits.section_edits):
        reason = _skip_reason(result, edit)
        if reason:
            report.skipped.append(SkippedEdit(index=index, reason=reason))
            continue
        try:
            result = _replace_section_text(result, edit, index)
        except (re.error, ValueError) as e:
            logger.error("edit_application_failed", index=index, section=edit.section, error=str(e))
            report.skipped.append(SkippedEdit(index=index, reason=f"error: {e}"))
            continue
        report.applied.append(index)
        logger.info(
            "edit_applied",
            index=index,
            section=edit.section,
            justification=edit.justification or "No justification provided",
        )

    for emphasis in edits.skill_additions:
        for skill in emphasis.skills_to_emphasize:
            try:
                emphasised = emphasize_skill(result, skill)
            except re.error as e:
                logger.error("skill_emphasis_failed", skill=skill, error=str(e))
                continue
            if emphasised != result:
                result = emphasised
                report.emphasized_skills.append(skill)
                logger.info("skill_emphasized", skill=skill)

    logger.info(
        "edits_applied",
        applied=len(report.applied),
        skipped=len(report.skipped),
        emphasized=len(report.emphasized_skills),
    )
    return result, report


def apply_edits(document: str, edit_set: EditSet | dict[str, Any] | None) -> str:
    """Apply an edit set and return the edited text. Never raises."""
    return apply_edits_with_report(document, edit_set)[0]


def ensure_valid_document(text: str) -> str:
    """Raise InvalidOutputDocument unless all envelope markers are present."""
    missing = missing_envelope_markers(text)
    if missing:
        raise InvalidOutputDocument(missing)
    return text
