"""Batched, streaming access to the chunks of a source tree."""

import logging
from pathlib import Path
from typing import Iterator

from debtscan.chunkers.recursive_chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    RecursiveTextSplitter,
)
from debtscan.ingesters import FolderIngester
from debtscan.protocols import Ingester

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 2


class ChunkStore:
    """Streams whole-file contents in bounded batches and splits them.

    Peak memory is bounded by ``batch_size`` files at a time; the caller
    pulls batches one by one.
    """

    def __init__(
        self,
        ingester: Ingester | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.ingester = ingester or FolderIngester()
        self.splitter = RecursiveTextSplitter(chunk_size, chunk_overlap)
        self.batch_size = batch_size

    @property
    def chunk_size(self) -> int:
        return self.splitter.chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self.splitter.chunk_overlap

    def stream(self, directory: Path | str, exclude_patterns: list[str]) -> Iterator[list[str]]:
        """Yield batches of raw document texts.

        Args:
            directory: Root of the source tree
            exclude_patterns: Substrings excluding matching paths

        Yields:
            Lists of at most ``batch_size`` file contents, in discovery order
        """
        batch: list[str] = []
        for doc in self.ingester.ingest(Path(directory), exclude_patterns):
            logger.debug(f"Loaded {doc.path} ({doc.metadata.size_bytes} bytes)")
            batch.append(doc.content)
            if len(batch) >= self.batch_size:
                yield batch
                batch = []
        if batch:
            yield batch

    def split(
        self,
        text: str,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
    ) -> list[str]:
        """Split one document, optionally with one-off splitting parameters."""
        if chunk_size is None and chunk_overlap is None:
            return self.splitter.split(text)
        splitter = RecursiveTextSplitter(
            chunk_size if chunk_size is not None else self.chunk_size,
            chunk_overlap if chunk_overlap is not None else self.chunk_overlap,
        )
        return splitter.split(text)

    def iter_chunks(self, directory: Path | str, exclude_patterns: list[str]) -> Iterator[list[str]]:
        """Yield the chunks of each streamed batch, flattened per batch."""
        for batch in self.stream(directory, exclude_patterns):
            chunks: list[str] = []
            for text in batch:
                chunks.extend(self.split(text))
            yield chunks
