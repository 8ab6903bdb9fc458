"""LaTeX helpers: envelope markers, text cleanup and a local document scan.

The scan is deterministic and works on templates laid out like
``config/templates/sample_cv.tex`` (``\\section`` blocks, ``twocolentry``
headings, ``\\item`` bullets and ``\\textbf{Category:} a, b`` skill lines).
It is used when the generation service cannot parse the document.
"""

import re

from ..models.document_profile import (
    DocumentHeader,
    DocumentRecord,
    DocumentSections,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
)

ENVELOPE_MARKERS: tuple[str, ...] = (
    r"\documentclass",
    r"\begin{document}",
    r"\end{document}",
)

_HREF = re.compile(r"\\href\{[^}]*\}\{([^}]*)\}")
_INLINE_MATH = re.compile(r"\$[^$]*\$")
_ESCAPED_CHAR = re.compile(r"\\([&%#_$])")
_TEXT_STYLE = re.compile(r"\\(?:textbf|textit|emph|underline)\{([^}]*)\}")
_COMMAND = re.compile(r"\\[a-zA-Z]+\*?(?:\[[^\]]*\])?")
_SECTION = re.compile(r"\\section\*?\{([^}]*)\}")
_ITEM = re.compile(r"\\item\s+(.+)")
_TWOCOL = re.compile(
    r"\\begin\{twocolentry\}\{\s*(?P<dates>.*?)\s*\}\s*(?P<head>.*?)\\end\{twocolentry\}",
    re.S,
)
_HEADING = re.compile(r"\\textbf\{(?P<title>[^}]*)\}\s*,?\s*(?P<rest>.*)", re.S)
_SKILL_LINE = re.compile(r"\\textbf\{([^}]+?)\}\s*:?\s*([^\n]+)")
_NAME_PATTERNS = (
    re.compile(r"\\selectfont\s+([^\n\\%]+)"),
    re.compile(r"\\name\{([^}]*)\}"),
    re.compile(r"\\author\{([^}]*)\}"),
)
_MBOX = re.compile(r"\\mbox\{(.*)\}%?\s*$", re.M)
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_TITLE_SPLIT = re.compile(r"\s+(?:--|–|—|-)\s+")


def missing_envelope_markers(text: str) -> list[str]:
    return [marker for marker in ENVELOPE_MARKERS if marker not in text]


def clean_latex_text(text: str) -> str:
    """Reduce a LaTeX fragment to its readable text."""
    cleaned = _HREF.sub(r"\1", text)
    cleaned = _INLINE_MATH.sub("", cleaned)
    cleaned = _TEXT_STYLE.sub(r"\1", cleaned)
    cleaned = _ESCAPED_CHAR.sub(r"\1", cleaned)
    cleaned = _COMMAND.sub("", cleaned)
    cleaned = cleaned.replace("{", "").replace("}", "")
    return re.sub(r"\s+", " ", cleaned).strip(" %")


def _category_key(label: str) -> str:
    key = re.sub(r"[^a-z0-9]+", "_", clean_latex_text(label).lower().rstrip(":"))
    return key.strip("_") or "general"


def _body(text: str) -> str:
    start = text.find(r"\begin{document}")
    end = text.find(r"\end{document}")
    if start == -1:
        start = 0
    else:
        start += len(r"\begin{document}")
    return text[start:end if end != -1 else len(text)]


def _split_sections(body: str) -> tuple[str, list[tuple[str, str]]]:
    parts = _SECTION.split(body)
    preamble = parts[0]
    sections = [(parts[i].strip(), parts[i + 1]) for i in range(1, len(parts) - 1, 2)]
    return preamble, sections


def _items(content: str) -> list[str]:
    return [text for text in (clean_latex_text(m) for m in _ITEM.findall(content)) if text]


def _dated_entries(content: str) -> list[tuple[str, str, str, list[str]]]:
    """(title, rest, dates, bullets) for every twocolentry heading in a section."""
    matches = list(_TWOCOL.finditer(content))
    entries = []
    for i, match in enumerate(matches):
        tail_end = matches[i + 1].start() if i + 1 < len(matches) else len(content)
        heading = _HEADING.search(match.group("head"))
        if heading:
            title = clean_latex_text(heading.group("title"))
            rest = clean_latex_text(heading.group("rest"))
        else:
            title, rest = clean_latex_text(match.group("head")), ""
        entries.append(
            (title, rest, clean_latex_text(match.group("dates")), _items(content[match.end():tail_end]))
        )
    return entries


def _scan_header(preamble: str) -> DocumentHeader:
    name = ""
    for pattern in _NAME_PATTERNS:
        match = pattern.search(preamble)
        if match:
            name = clean_latex_text(match.group(1))
            break

    contact_parts = [clean_latex_text(m) for m in _MBOX.findall(preamble)]
    contact_parts = [part for part in contact_parts if part]
    if not contact_parts:
        contact_parts = _EMAIL.findall(preamble)
    return DocumentHeader(name=name, contact=" | ".join(contact_parts))


def scan_document(text: str) -> DocumentRecord:
    """Build a document record from LaTeX source without any service call."""
    preamble, sections = _split_sections(_body(text))
    parsed = DocumentSections()

    for title, content in sections:
        lowered = title.lower()
        if "education" in lowered:
            parsed.education.extend(
                EducationEntry(institution=t, degree=rest, dates=dates, achievements=bullets)
                for t, rest, dates, bullets in _dated_entries(content)
            )
        elif "experience" in lowered or "employment" in lowered:
            entries = _dated_entries(content)
            if not entries and _items(content):
                entries = [("", "", "", _items(content))]
            parsed.experience.extend(
                ExperienceEntry(role=t, company=rest, dates=dates, bullets=bullets)
                for t, rest, dates, bullets in entries
            )
        elif "project" in lowered:
            for item in _items(content):
                name, techs = _split_title(item)
                parsed.projects.append(
                    ProjectEntry(
                        name=name,
                        description=item,
                        technologies=[t.strip() for t in techs.split(",") if t.strip()],
                    )
                )
        elif "skill" in lowered:
            for label, values in _SKILL_LINE.findall(content):
                skills = [s.strip() for s in clean_latex_text(values).split(",") if s.strip()]
                if skills:
                    parsed.skills.setdefault(_category_key(label), []).extend(skills)
        elif "achievement" in lowered or "award" in lowered:
            parsed.achievements.extend(_items(content))

    return DocumentRecord(header=_scan_header(preamble), sections=parsed)


def _split_title(item: str) -> tuple[str, str]:
    """Split "Name -- tech, tech" into the name and the technology list."""
    parts = _TITLE_SPLIT.split(item, maxsplit=1)
    if len(parts) == 2:
        return parts[0].strip(), parts[1]
    return item, ""
