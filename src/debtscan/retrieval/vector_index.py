"""In-memory similarity index over chunk embeddings."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from debtscan.storage.embedding_cache import as_matrix

DEFAULT_TOP_K = 4


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its similarity to a query."""

    index: int
    text: str
    similarity: float


class VectorIndex:
    """Immutable cosine-similarity index.

    Rows are L2-normalised once at build time so a search is a single
    matrix-vector product. ``chunks[i]`` always pairs with row ``i``.
    """

    def __init__(self, chunks: list[str], vectors: np.ndarray):
        if len(chunks) != len(vectors):
            raise ValueError(f"{len(chunks)} chunks but {len(vectors)} vectors")
        self._chunks = list(chunks)
        self._vectors = vectors
        self._normalized = self._normalize(vectors)

    @classmethod
    def build(
        cls,
        chunks: list[str],
        vectors: Sequence[Sequence[float]] | np.ndarray,
    ) -> "VectorIndex":
        """Build an index from co-indexed chunks and vectors."""
        return cls(chunks, as_matrix(vectors))

    def extend(
        self,
        chunks: list[str],
        vectors: Sequence[Sequence[float]] | np.ndarray,
    ) -> "VectorIndex":
        """Return a new index with extra rows appended; this one is unchanged."""
        extra = as_matrix(vectors)
        if len(self) == 0:
            return VectorIndex.build(chunks, extra)
        if len(extra) == 0:
            return VectorIndex(self._chunks, self._vectors)
        if extra.shape[1] != self.dimension:
            raise ValueError(
                f"cannot extend a {self.dimension}-d index with {extra.shape[1]}-d vectors"
            )
        return VectorIndex(self._chunks + list(chunks), np.vstack([self._vectors, extra]))

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def chunks(self) -> list[str]:
        return list(self._chunks)

    @property
    def vectors(self) -> np.ndarray:
        return self._vectors

    @property
    def dimension(self) -> int:
        return self._vectors.shape[1] if len(self) else 0

    def search(self, query_vector: Sequence[float] | np.ndarray, k: int = DEFAULT_TOP_K) -> list[ScoredChunk]:
        """Return the ``k`` most similar chunks, most similar first.

        Ties keep original chunk order. Fewer than ``k`` rows returns them all.
        """
        if k <= 0 or len(self) == 0:
            return []

        query = np.asarray(query_vector, dtype=np.float32).reshape(-1)
        if query.shape[0] != self.dimension:
            raise ValueError(
                f"query has dimension {query.shape[0]}, index has {self.dimension}"
            )

        norm = np.linalg.norm(query)
        if norm == 0:
            scores = np.zeros(len(self), dtype=np.float32)
        else:
            scores = self._normalized @ (query / norm)

        order = np.argsort(-scores, kind="stable")[:k]
        return [
            ScoredChunk(index=int(i), text=self._chunks[i], similarity=float(scores[i]))
            for i in order
        ]

    @staticmethod
    def _normalize(vectors: np.ndarray) -> np.ndarray:
        if len(vectors) == 0:
            return vectors
        norms = np.linalg.norm(vectors, axis=1, keepdims=True)
        norms[norms == 0] = 1.0  # zero rows stay zero and score 0
        return vectors / norms
