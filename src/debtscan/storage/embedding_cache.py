"""On-disk cache of chunk embeddings for a source tree."""

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import numpy as np

from debtscan.chunkers import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from debtscan.errors import CacheIntegrityError
from debtscan.models import CacheEntry, CacheMetadata
from debtscan.storage.atomic import atomic_write_json, read_json
from debtscan.utils import safe_file_name

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path("cache") / "vectors"

# Tail of the sanitized directory kept in cache file names; the digest
# keeps names unique.
MAX_NAME_PREFIX = 64


def as_matrix(vectors: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Coerce vectors to a 2-D float32 array; an empty input becomes shape (0, 0).

    Raises:
        ValueError: for ragged or non-numeric input
    """
    if len(vectors) == 0:
        return np.zeros((0, 0), dtype=np.float32)
    matrix = np.asarray(vectors, dtype=np.float32)
    if matrix.ndim != 2:
        raise ValueError(f"vectors must be 2-dimensional, got shape {matrix.shape}")
    return matrix


class EmbeddingCache:
    """JSON cache of {chunks, vectors, metadata} per source tree.

    An entry is keyed by directory, the ordered exclude list, the embedding
    model and the splitting parameters. Entries never expire; they are
    replaced when the key changes or deleted with :meth:`clear`.
    """

    def __init__(
        self,
        cache_dir: Path | str = DEFAULT_CACHE_DIR,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        self.cache_dir = Path(cache_dir)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def path_for(self, directory: str, exclude_patterns: list[str], model_id: str) -> Path:
        """Deterministic cache file location for a key."""
        key = json.dumps(
            [directory, list(exclude_patterns), model_id, self.chunk_size, self.chunk_overlap]
        )
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        prefix = safe_file_name(directory, suffix="")[-MAX_NAME_PREFIX:]
        return self.cache_dir / f"{prefix}-{digest}.json"

    def load(self, directory: str, exclude_patterns: list[str], model_id: str) -> CacheEntry | None:
        """Return the cached entry for this key, or None on a miss.

        Raises:
            CacheIntegrityError: if the entry matches the key but its chunks
                and vectors cannot be co-indexed
        """
        path = self.path_for(directory, exclude_patterns, model_id)
        if not path.exists():
            logger.debug(f"No embedding cache at {path}")
            return None

        try:
            data = read_json(path)
            metadata = CacheMetadata.from_dict(data["metadata"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable embedding cache {path}: {e}")
            return None

        if not metadata.matches(
            directory, exclude_patterns, model_id, self.chunk_size, self.chunk_overlap
        ):
            logger.debug(f"Embedding cache {path} was built for a different key")
            return None

        chunks = data.get("chunks")
        raw_vectors = data.get("vectors")
        if not isinstance(chunks, list) or not isinstance(raw_vectors, list):
            raise CacheIntegrityError(f"{path}: chunks and vectors must be lists")
        if len(chunks) != len(raw_vectors):
            raise CacheIntegrityError(
                f"{path}: {len(chunks)} chunks but {len(raw_vectors)} vectors"
            )
        try:
            vectors = as_matrix(raw_vectors)
        except ValueError as e:
            raise CacheIntegrityError(f"{path}: {e}") from e

        logger.info(f"Loaded {len(chunks)} cached embeddings from {path}")
        return CacheEntry(chunks=[str(c) for c in chunks], vectors=vectors, metadata=metadata)

    def store(
        self,
        directory: str,
        exclude_patterns: list[str],
        vectors: Sequence[Sequence[float]] | np.ndarray,
        chunks: list[str],
        model_id: str,
    ) -> Path:
        """Persist an entry atomically and return its path.

        Raises:
            ValueError: if chunks and vectors differ in length
        """
        matrix = as_matrix(vectors)
        if len(matrix) != len(chunks):
            raise ValueError(f"{len(chunks)} chunks but {len(matrix)} vectors")

        metadata = CacheMetadata(
            directory=directory,
            exclude_patterns=tuple(exclude_patterns),
            model=model_id,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        path = self.path_for(directory, exclude_patterns, model_id)
        atomic_write_json(
            path,
            {
                "vectors": matrix.tolist(),
                "chunks": list(chunks),
                "metadata": metadata.to_dict(),
            },
        )
        logger.info(f"Cached {len(chunks)} embeddings -> {path}")
        return path

    def clear(self, directory: str, exclude_patterns: list[str], model_id: str) -> bool:
        """Delete the entry for a key. Returns True if one existed."""
        path = self.path_for(directory, exclude_patterns, model_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Removed embedding cache {path}")
        return True
