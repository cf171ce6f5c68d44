"""Resumable, retrieval-augmented per-file analysis."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from debtscan.analysis.prompts import build_analysis_prompt
from debtscan.analysis.schemas import CodeDebtAnalysis
from debtscan.generators import ValidatingGenerator
from debtscan.ingesters import FolderIngester
from debtscan.models import (
    Analysis,
    AnalysisFailure,
    AnalysisState,
    AnalysisSuccess,
    FileAnalysisResult,
    ProgressEvent,
    RunStatus,
)
from debtscan.protocols import Ingester
from debtscan.retrieval import DEFAULT_TOP_K, Retriever
from debtscan.storage import AnalysisStateStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], Any]


class AnalysisStateMachine:
    """Analyzes every source file once, surviving restarts.

    A run moves NOT_STARTED -> LOADING_STATE -> ITERATING -> COMPLETED.
    Each file ends in exactly one persisted result (success or error) and
    one append to ``analyzed_files``; the state file is rewritten after
    every file, so an interrupted run resumes at the first file without
    a recorded result.
    """

    def __init__(
        self,
        generator: ValidatingGenerator,
        store: AnalysisStateStore,
        ingester: Ingester | None = None,
        retriever: Retriever | None = None,
        opinions: str = "",
        top_k: int = DEFAULT_TOP_K,
        schema: type = CodeDebtAnalysis,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.generator = generator
        self.store = store
        self.ingester = ingester or FolderIngester()
        self.retriever = retriever
        self.opinions = opinions
        self.top_k = top_k
        self.schema = schema
        self.progress_callback = progress_callback
        self.status = RunStatus.NOT_STARTED
        self.state = AnalysisState()

    async def analyze(self, directory: Path | str, exclude_patterns: list[str]) -> None:
        """Analyze every discovered file not already recorded as analyzed.

        Args:
            directory: Root of the source tree
            exclude_patterns: Substrings excluding matching paths
        """
        root = Path(directory)
        directory_key = str(root.resolve())

        self.status = RunStatus.LOADING_STATE
        self.state = self.store.load(exclude_patterns)
        if not self.state.belongs_to(directory_key):
            logger.warning(
                f"State in {self.store.base_dir} belongs to {self.state.directory}; "
                f"starting fresh for {directory_key}"
            )
            self.store.clear_results()
            self.state = AnalysisState(exclude_patterns=list(exclude_patterns))
        self.state.directory = directory_key

        remaining = [
            path
            for path in self.ingester.discover(root, exclude_patterns)
            if not self.state.is_analyzed(path)
        ]
        total = len(remaining)
        logger.info(
            f"{total} files to analyze ({len(self.state.analyzed_files)} already done)"
        )

        self.status = RunStatus.ITERATING
        self._report("", 0, total)

        if total:
            self.state.total_files = total
            self.state.exclude_patterns = list(exclude_patterns)

        for done, rel_path in enumerate(remaining, start=1):
            await self._analyze_file(root, rel_path)
            self._report(rel_path, done, total)

        self.status = RunStatus.COMPLETED

    async def _analyze_file(self, root: Path, rel_path: str) -> None:
        similar_chunks: list[str] | None = None
        line_count: int | None = None
        try:
            content = await asyncio.to_thread((root / rel_path).read_text, "utf-8", "replace")
            line_count = content.count("\n") + 1
            if self.retriever is not None:
                similar_chunks = await self.retriever.retrieve(content, self.top_k)
            prompt = build_analysis_prompt(rel_path, content, self.opinions, similar_chunks)
            validated = await self.generator.validate_with_retry(prompt, self.schema)
            analysis: Analysis = AnalysisSuccess(payload=_payload(validated))
            logger.info(f"Analyzed {rel_path}")
        except Exception as e:
            logger.error(f"Error analyzing file {rel_path}: {e}")
            analysis = AnalysisFailure(error=f"Failed to analyze file: {e}")

        # The result is written before the state append so a crash in
        # between re-analyzes the file rather than losing its result.
        self.store.save_result(
            FileAnalysisResult.create(rel_path, analysis, similar_chunks, line_count)
        )
        self.state.mark_analyzed(rel_path)
        self.store.save(self.state)

    def _report(self, current_file: str, done: int, total: int) -> None:
        if self.progress_callback is None:
            return
        progress = 100.0 if total == 0 else done / total * 100
        self.progress_callback(
            ProgressEvent(current_file=current_file, progress=progress, analyzed=done, total=total)
        )

    def get_results(self) -> dict[str, Analysis]:
        """Map each persisted file path to its success payload or error."""
        return {path: result.analysis for path, result in self.store.load_results().items()}


def _payload(validated: Any) -> dict[str, Any]:
    if hasattr(validated, "model_dump"):
        return validated.model_dump(by_alias=True)
    if isinstance(validated, dict):
        return validated
    return {"value": validated}
