"""Local LaTeX scan used as the document-parse fallback."""

from cvtailor.core.tailoring.latex import clean_latex_text, missing_envelope_markers, scan_document


def test_header(template_text):
    header = scan_document(template_text).header
    assert header.name == "Jordan Example"
    assert header.contact == "Berlin, Germany | jordan.example@example.com | GitHub"


def test_dated_sections(template_text):
    sections = scan_document(template_text).sections

    assert sections.education[0].institution == "Example Technical University"
    assert sections.education[0].degree == "B.Sc. in Computer Science"
    assert sections.education[0].dates == "2019 -- 2023"

    first, second = sections.experience
    assert (first.role, first.company, first.dates) == ("Backend Engineer", "Example Logistics GmbH", "Jan 2023 -- Present")
    assert first.bullets[2] == "Reduced PostgreSQL query latency by 40% through indexing and query rewrites"
    assert second.role == "Software Engineering Intern"


def test_projects_skills_and_achievements(template_text):
    sections = scan_document(template_text).sections

    assert [p.name for p in sections.projects] == ["Task Queue Service", "Realtime Dashboard", "Log Search Tool"]
    assert sections.projects[0].technologies == ["Python", "Redis", "Docker"]
    assert sections.skills["programming_languages"] == ["Python", "Java", "TypeScript", "Go", "SQL"]
    assert "Apache Airflow" in sections.skills["frameworks_libraries"]
    assert "AWS" in sections.skills["tools_technologies"]
    assert len(sections.achievements) == 2


def test_document_without_sections():
    record = scan_document("\\documentclass{article}\\begin{document}Hello\\end{document}")
    assert record.header.name == ""
    assert record.all_skills() == []


def test_clean_latex_text():
    assert clean_latex_text(r"\textbf{Go} \& \href{https://x.io}{Site} 50\% faster") == "Go & Site 50% faster"


def test_envelope_markers():
    assert missing_envelope_markers("\\begin{document}") == ["\\documentclass", "\\end{document}"]
