"""Edit engine: literal replacements, source markers and skill emphasis."""

import pytest

from cvtailor.core.errors import InvalidOutputDocument
from cvtailor.core.models.tailoring import EditSet, SectionEdit, SkillEmphasis
from cvtailor.core.tailoring.editor import (
    apply_edits,
    apply_edits_with_report,
    emphasize_skill,
    ensure_valid_document,
)


def _edit(original, new, section="experience"):
    return SectionEdit(section=section, original_text=original, new_text=new, confidence="HIGH")


def test_empty_edit_set_returns_document(template_text):
    assert apply_edits(template_text, EditSet()) == template_text
    assert apply_edits(template_text, None) == template_text


def test_empty_emphasis_lists_leave_document_unchanged(template_text):
    edits = EditSet(skill_additions=[SkillEmphasis(category="languages", skills_to_emphasize=[])])
    assert apply_edits(template_text, edits) == template_text


def test_identical_pair_is_a_no_op(template_text):
    original = "Built REST APIs in Python"
    result, report = apply_edits_with_report(template_text, EditSet(section_edits=[_edit(original, original)]))
    assert result == template_text
    assert report.applied == []
    assert report.skipped[0].reason == "identical_text"


def test_absent_original_leaves_document_unchanged(template_text):
    result, report = apply_edits_with_report(template_text, EditSet(section_edits=[_edit("Rust compiler", "Go")]))
    assert result == template_text
    assert report.skipped[0].reason == "original_not_found"


def test_empty_text_is_skipped():
    _, report = apply_edits_with_report("A", EditSet(section_edits=[_edit("A", "")]))
    assert report.skipped[0].reason == "empty_text"


def test_marker_goes_to_end_of_line():
    result = apply_edits("A % source: x_0", EditSet(section_edits=[_edit("A", "B", section="edits")]))
    assert result == "B % source: x_0 % source: edits_0"


def test_marker_does_not_comment_out_trailing_latex():
    document = r"\item Built APIs \hfill 2023"
    result = apply_edits(document, EditSet(section_edits=[_edit("Built APIs", "Built REST APIs")]))
    assert result == r"\item Built REST APIs \hfill 2023 % source: experience_0"


def test_replacement_is_inserted_literally():
    result = apply_edits("Skills: Go", EditSet(section_edits=[_edit("Go", r"\textbf{Go} \& Python", "skills")]))
    assert result == r"Skills: \textbf{Go} \& Python % source: skills_0"


def test_every_occurrence_is_replaced():
    # Literal replace-all also rewrites matches the proposer may not have meant
    document = "Python\nPython tools\nJava"
    result = apply_edits(document, EditSet(section_edits=[_edit("Python", "Go", "skills")]))
    assert result == "Go % source: skills_0\nGo tools % source: skills_0\nJava"


def test_later_edits_see_earlier_output():
    edits = EditSet(section_edits=[_edit("A", "B", "s"), _edit("B", "C", "s")])
    result, report = apply_edits_with_report("A", edits)
    assert result == "C % source: s_0 % source: s_1"
    assert report.applied == [0, 1]


def test_raw_dict_edit_set_is_accepted():
    result = apply_edits("old text", {"section_edits": [{"section": "x", "original_text": "old", "new_text": "new"}]})
    assert result == "new text % source: x_0"


def test_emphasis_wraps_whole_words_only():
    document = "\\section{Skills}\nPython and python3 and \\python"
    result = emphasize_skill(document, "Python")
    assert result == "\\section{Skills}\n\\textbf{Python} and python3 and \\python"


def test_emphasis_skips_environment_names():
    result = emphasize_skill("\\begin{itemize} itemize \\end{itemize}", "itemize")
    assert result == "\\begin{itemize} \\textbf{itemize} \\end{itemize}"


def test_emphasis_preserves_matched_case():
    assert emphasize_skill("docker and Docker", "DOCKER") == "\\textbf{docker} and \\textbf{Docker}"


def test_emphasis_is_idempotent(template_text):
    edits = EditSet(skill_additions=[SkillEmphasis(skills_to_emphasize=["Redis", "FastAPI"])])
    once, report = apply_edits_with_report(template_text, edits)
    twice = apply_edits(once, edits)
    assert once != template_text
    assert twice == once
    assert report.emphasized_skills == ["Redis", "FastAPI"]


def test_emphasis_leaves_link_targets_alone():
    line = "\\mbox{\\href{https://github.com/jordan-example}{GitHub}}%"
    result = emphasize_skill(line, "GitHub")
    assert result == "\\mbox{\\href{https://github.com/jordan-example}{\\textbf{GitHub}}}%"


def test_emphasis_leaves_package_options_alone():
    line = "\\usepackage[colorlinks=true, urlcolor=black]{hyperref}"
    assert emphasize_skill(line, "black") == line


def test_emphasis_skips_comments_and_keeps_escaped_percent():
    document = "Go services 50\\% faster % Go was a side project"
    result = emphasize_skill(document, "Go")
    assert result == "\\textbf{Go} services 50\\% faster % Go was a side project"


def test_emphasis_never_touches_the_preamble(template_text):
    result = emphasize_skill(template_text, "black")
    assert result == template_text

    result = emphasize_skill(template_text, "GitHub")
    assert "\\href{https://github.com/jordan-example}{\\textbf{GitHub}}" in result
    assert "\\href{https://github.com/jordan-example/queue}" in result


def test_emphasis_of_missing_skill_is_a_no_op(template_text):
    edits = EditSet(skill_additions=[SkillEmphasis(skills_to_emphasize=["COBOL"])])
    assert apply_edits(template_text, edits) == template_text


def test_tailored_template_keeps_envelope(template_text):
    edits = EditSet(section_edits=[_edit("Built REST APIs in Python", "Designed REST APIs in Python")])
    assert ensure_valid_document(apply_edits(template_text, edits))


def test_missing_envelope_raises():
    with pytest.raises(InvalidOutputDocument) as exc:
        ensure_valid_document("\\documentclass{article}\n\\begin{document}\nHello")
    assert exc.value.missing_markers == ["\\end{document}"]
