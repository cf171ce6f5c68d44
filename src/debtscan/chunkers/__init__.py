"""Chunking for debtscan."""

from debtscan.chunkers.chunk_store import DEFAULT_BATCH_SIZE, ChunkStore
from debtscan.chunkers.recursive_chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    RecursiveTextSplitter,
)

__all__ = [
    "ChunkStore",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_CHUNK_SIZE",
    "RecursiveTextSplitter",
]
