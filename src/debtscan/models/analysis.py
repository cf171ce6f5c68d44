"""Data models for per-file analysis state and results."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


class RunStatus(str, Enum):
    """Lifecycle of a single ``analyze`` run."""

    NOT_STARTED = "not_started"
    LOADING_STATE = "loading_state"
    ITERATING = "iterating"
    COMPLETED = "completed"


@dataclass
class AnalysisState:
    """Which files a run has already handled.

    ``analyzed_files`` keeps insertion order for resumption and is mirrored
    into a set for membership tests. It only ever grows.
    ``directory`` is the resolved source tree the paths are relative to;
    None for state written before it was recorded.
    """

    analyzed_files: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    total_files: Optional[int] = None
    directory: Optional[str] = None
    _seen: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        deduped: list[str] = []
        for path in self.analyzed_files:
            if path not in self._seen:
                self._seen.add(path)
                deduped.append(path)
        self.analyzed_files = deduped

    def is_analyzed(self, path: str) -> bool:
        return path in self._seen

    def mark_analyzed(self, path: str) -> bool:
        """Record ``path`` as analyzed. Returns False if it already was."""
        if path in self._seen:
            return False
        self._seen.add(path)
        self.analyzed_files.append(path)
        return True

    def belongs_to(self, directory: str) -> bool:
        return self.directory is None or self.directory == directory

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "analyzedFiles": list(self.analyzed_files),
            "excludePatterns": list(self.exclude_patterns),
        }
        if self.total_files is not None:
            data["totalFiles"] = self.total_files
        if self.directory is not None:
            data["directory"] = self.directory
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisState":
        analyzed = data.get("analyzedFiles", [])
        excludes = data.get("excludePatterns", [])
        if not isinstance(analyzed, list) or not isinstance(excludes, list):
            raise ValueError("analyzedFiles and excludePatterns must be lists")
        total = data.get("totalFiles")
        directory = data.get("directory")
        return cls(
            analyzed_files=[str(p) for p in analyzed],
            exclude_patterns=[str(p) for p in excludes],
            total_files=int(total) if total is not None else None,
            directory=str(directory) if directory is not None else None,
        )


@dataclass(frozen=True)
class AnalysisSuccess:
    """A validated analysis payload."""

    payload: dict[str, Any]

    def to_json(self) -> dict[str, Any]:
        return self.payload


@dataclass(frozen=True)
class AnalysisFailure:
    """A file whose analysis could not be produced."""

    error: str

    def to_json(self) -> dict[str, Any]:
        return {"error": self.error}


Analysis = Union[AnalysisSuccess, AnalysisFailure]


def analysis_from_json(data: Any) -> Analysis:
    """Rebuild the tagged union from a persisted ``analysis`` field."""
    if not isinstance(data, dict):
        raise ValueError(f"analysis must be an object, got {type(data).__name__}")
    if set(data) == {"error"}:
        return AnalysisFailure(error=str(data["error"]))
    return AnalysisSuccess(payload=data)


@dataclass(frozen=True)
class FileAnalysisResult:
    """One persisted per-file result record."""

    file_path: str
    analysis: Analysis
    timestamp: str
    similar_chunks: Optional[list[str]] = None
    line_count: Optional[int] = None

    @classmethod
    def create(
        cls,
        file_path: str,
        analysis: Analysis,
        similar_chunks: Optional[list[str]] = None,
        line_count: Optional[int] = None,
    ) -> "FileAnalysisResult":
        return cls(
            file_path=file_path,
            analysis=analysis,
            timestamp=datetime.now(timezone.utc).isoformat(),
            similar_chunks=similar_chunks,
            line_count=line_count,
        )

    @property
    def succeeded(self) -> bool:
        return isinstance(self.analysis, AnalysisSuccess)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filePath": self.file_path,
            "analysis": self.analysis.to_json(),
            "timestamp": self.timestamp,
        }
        if self.similar_chunks is not None:
            data["similarChunks"] = list(self.similar_chunks)
        if self.line_count is not None:
            data["lineCount"] = self.line_count
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileAnalysisResult":
        similar = data.get("similarChunks")
        line_count = data.get("lineCount")
        return cls(
            file_path=str(data["filePath"]),
            analysis=analysis_from_json(data["analysis"]),
            timestamp=str(data.get("timestamp", "")),
            similar_chunks=[str(c) for c in similar] if similar is not None else None,
            line_count=int(line_count) if line_count is not None else None,
        )


@dataclass(frozen=True)
class ProgressEvent:
    """Progress report emitted before the loop and after every file."""

    current_file: str
    progress: float  # 0-100
    analyzed: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentFile": self.current_file,
            "progress": self.progress,
            "analyzed": self.analyzed,
            "total": self.total,
        }
