"""File-based artifact store for tailoring runs, letters and interview results.

Each run gets its own directory under the base path; records are written as
JSON and documents as plain text so they can be opened or compiled directly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models.interview import AssessmentResults
from ..models.letter import LetterResult
from ..models.tailoring import TailoringResult
from ...observability.logger import get_logger

logger = get_logger(__name__)


class ArtifactStore:
    """Simple JSON and text backed persistence layer."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir) if base_dir else Path("data/artifacts")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ArtifactStore":
        return cls(config.get("paths", {}).get("artifacts"))

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _run_dir(self, run_id: str) -> Path:
        path = self.base_dir / run_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _dump(self, path: Path, data: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _load(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_text(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    # ------------------------------------------------------------------
    # Tailoring runs
    # ------------------------------------------------------------------
    def save_tailoring_result(self, result: TailoringResult) -> Path:
        """Persist the result record and the tailored .tex next to it."""
        run_dir = self._run_dir(result.run_id)
        self._dump(run_dir / "tailoring_result.json", result.model_dump(mode="json"))
        tex_path = self._write_text(run_dir / "tailored_cv.tex", result.tailored_document)
        logger.info("tailoring_result_saved", run_id=result.run_id, path=str(run_dir))
        return tex_path

    def load_tailoring_result(self, run_id: str) -> TailoringResult | None:
        data = self._load(self.base_dir / run_id / "tailoring_result.json")
        return TailoringResult(**data) if data else None

    def load_tailored_document(self, run_id: str) -> str | None:
        path = self.base_dir / run_id / "tailored_cv.tex"
        return path.read_text(encoding="utf-8") if path.exists() else None

    # ------------------------------------------------------------------
    # Cover letters
    # ------------------------------------------------------------------
    def save_letter_result(self, result: LetterResult) -> Path:
        run_dir = self._run_dir(result.run_id)
        self._dump(run_dir / "letter_result.json", result.model_dump(mode="json"))
        text_path = self._write_text(run_dir / "cover_letter.txt", result.cover_letter.to_text())
        logger.info("letter_result_saved", run_id=result.run_id, path=str(run_dir))
        return text_path

    def load_letter_result(self, run_id: str) -> LetterResult | None:
        data = self._load(self.base_dir / run_id / "letter_result.json")
        return LetterResult(**data) if data else None

    # ------------------------------------------------------------------
    # Interview results
    # ------------------------------------------------------------------
    def save_assessment_results(self, results: AssessmentResults) -> Path:
        path = self._run_dir(results.session_id) / "assessment_results.json"
        self._dump(path, results.model_dump(mode="json"))
        logger.info("assessment_results_saved", session_id=results.session_id, path=str(path))
        return path

    def load_assessment_results(self, session_id: str) -> AssessmentResults | None:
        data = self._load(self.base_dir / session_id / "assessment_results.json")
        return AssessmentResults(**data) if data else None

    def list_runs(self) -> list[str]:
        return sorted(p.name for p in self.base_dir.iterdir() if p.is_dir())
