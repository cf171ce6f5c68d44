"""Data models for debtscan."""

from debtscan.models.analysis import (
    Analysis,
    AnalysisFailure,
    AnalysisState,
    AnalysisSuccess,
    FileAnalysisResult,
    ProgressEvent,
    RunStatus,
)
from debtscan.models.cache import CacheEntry, CacheMetadata
from debtscan.models.document import Document, FileMetadata
from debtscan.models.metrics import (
    AnalysisMetrics,
    FileScore,
    FolderNode,
    NodeMetrics,
    ProjectScore,
)

__all__ = [
    "Analysis",
    "AnalysisFailure",
    "AnalysisMetrics",
    "AnalysisState",
    "AnalysisSuccess",
    "CacheEntry",
    "CacheMetadata",
    "Document",
    "FileAnalysisResult",
    "FileMetadata",
    "FileScore",
    "FolderNode",
    "NodeMetrics",
    "ProgressEvent",
    "ProjectScore",
    "RunStatus",
]
