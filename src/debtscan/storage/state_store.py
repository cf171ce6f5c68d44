"""Persistence for analysis progress and per-file results."""

import logging
from pathlib import Path

from debtscan.models import AnalysisState, FileAnalysisResult
from debtscan.storage.atomic import atomic_write_json, read_json
from debtscan.utils import safe_file_name

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("results") / "analysis"
STATE_FILE = "state.json"
RESULTS_DIR = "results"


class AnalysisStateStore:
    """Owns ``state.json`` and the ``results/`` directory of one output dir.

    Layout::

        <base_dir>/state.json
        <base_dir>/results/<safe file name>.json
    """

    def __init__(self, base_dir: Path | str = DEFAULT_OUTPUT_DIR):
        self.base_dir = Path(base_dir)
        self.state_path = self.base_dir / STATE_FILE
        self.results_dir = self.base_dir / RESULTS_DIR

    def load(self, exclude_patterns: list[str]) -> AnalysisState:
        """Load persisted state; missing or corrupt state starts fresh."""
        if not self.state_path.exists():
            return AnalysisState(exclude_patterns=list(exclude_patterns))
        try:
            return AnalysisState.from_dict(read_json(self.state_path))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Starting fresh, could not read {self.state_path}: {e}")
            return AnalysisState(exclude_patterns=list(exclude_patterns))

    def save(self, state: AnalysisState) -> bool:
        """Persist state. Failures are logged, not raised.

        Returns:
            True if the state reached disk
        """
        try:
            atomic_write_json(self.state_path, state.to_dict())
            return True
        except OSError as e:
            logger.error(f"Error saving state to {self.state_path}: {e}")
            return False

    def result_path(self, file_path: str) -> Path:
        return self.results_dir / safe_file_name(file_path)

    def save_result(self, result: FileAnalysisResult) -> Path:
        """Write one per-file result atomically.

        Raises:
            OSError: if the results directory is not writable
        """
        path = self.result_path(result.file_path)
        atomic_write_json(path, result.to_dict())
        return path

    def load_result(self, file_path: str) -> FileAnalysisResult | None:
        path = self.result_path(file_path)
        if not path.exists():
            return None
        return self._read_result(path)

    def load_results(self) -> dict[str, FileAnalysisResult]:
        """Read every persisted result, keyed by source path.

        Unreadable result files are logged and skipped.
        """
        results: dict[str, FileAnalysisResult] = {}
        if not self.results_dir.is_dir():
            return results
        for path in sorted(self.results_dir.glob("*.json")):
            result = self._read_result(path)
            if result is not None:
                results[result.file_path] = result
        return results

    def clear_results(self) -> int:
        """Delete every persisted result. Returns how many were removed."""
        if not self.results_dir.is_dir():
            return 0
        removed = 0
        for path in self.results_dir.glob("*.json"):
            path.unlink()
            removed += 1
        logger.info(f"Removed {removed} results from {self.results_dir}")
        return removed

    @staticmethod
    def _read_result(path: Path) -> FileAnalysisResult | None:
        try:
            return FileAnalysisResult.from_dict(read_json(path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Skipping unreadable result {path}: {e}")
            return None
