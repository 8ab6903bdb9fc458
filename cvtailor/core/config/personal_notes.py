"""Optional personal-notes supplement appended to some prompts."""

from pathlib import Path

from ...observability.logger import get_logger

logger = get_logger(__name__)

# Read once per path for the lifetime of the process
_notes_cache: dict[str, str] = {}


def load_personal_notes(path: str | Path | None) -> str:
    """Load the personal notes file, caching the result.

    A missing or unreadable file is not an error; an empty string is used.

    Args:
        path: Path to the notes file (None disables the supplement)

    Returns:
        File contents or ""
    """
    if not path:
        return ""

    key = str(Path(path).resolve())
    if key in _notes_cache:
        return _notes_cache[key]

    notes_path = Path(path)
    try:
        notes = notes_path.read_text(encoding="utf-8") if notes_path.exists() else ""
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("personal_notes_unreadable", path=str(notes_path), error=str(e))
        notes = ""

    _notes_cache[key] = notes
    return notes


def clear_personal_notes_cache() -> None:
    _notes_cache.clear()


def augment_prompt(prompt: str, notes: str, heading: str) -> str:
    """Append personal notes under a heading, or return the prompt untouched."""
    if not notes or not notes.strip():
        return prompt
    return f"{prompt}\n\n{heading}:\n{notes}"
