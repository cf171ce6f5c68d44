"""Persisted embedding cache records."""

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class CacheMetadata:
    """Key fields and bookkeeping stored alongside cached vectors.

    Everything except ``timestamp`` takes part in the validity check.
    """

    directory: str
    exclude_patterns: tuple[str, ...]
    model: str
    chunk_size: int
    chunk_overlap: int
    timestamp: str

    def matches(
        self,
        directory: str,
        exclude_patterns: list[str] | tuple[str, ...],
        model: str,
        chunk_size: int,
        chunk_overlap: int,
    ) -> bool:
        """Check the key fields against a fresh request.

        Exclude patterns compare as an ordered sequence, so reordering them
        is a mismatch.
        """
        return (
            self.directory == directory
            and self.exclude_patterns == tuple(exclude_patterns)
            and self.model == model
            and self.chunk_size == chunk_size
            and self.chunk_overlap == chunk_overlap
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "directory": self.directory,
            "excludePatterns": list(self.exclude_patterns),
            "timestamp": self.timestamp,
            "model": self.model,
            "chunkSize": self.chunk_size,
            "chunkOverlap": self.chunk_overlap,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheMetadata":
        """Build metadata from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: if required fields are missing
                or have the wrong shape.
        """
        return cls(
            directory=str(data["directory"]),
            exclude_patterns=tuple(str(p) for p in data["excludePatterns"]),
            model=str(data["model"]),
            # Entries written without splitting parameters never match.
            chunk_size=int(data.get("chunkSize", -1)),
            chunk_overlap=int(data.get("chunkOverlap", -1)),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass
class CacheEntry:
    """Chunks and their co-indexed vectors for one cache key."""

    chunks: list[str]
    vectors: np.ndarray  # shape (len(chunks), dim)
    metadata: CacheMetadata

    def __len__(self) -> int:
        return len(self.chunks)
