"""File-backed storage for embeddings and analysis progress."""

from debtscan.storage.atomic import atomic_write_json, atomic_write_text, read_json
from debtscan.storage.embedding_cache import DEFAULT_CACHE_DIR, EmbeddingCache
from debtscan.storage.state_store import DEFAULT_OUTPUT_DIR, AnalysisStateStore

__all__ = [
    "AnalysisStateStore",
    "DEFAULT_CACHE_DIR",
    "DEFAULT_OUTPUT_DIR",
    "EmbeddingCache",
    "atomic_write_json",
    "atomic_write_text",
    "read_json",
]
