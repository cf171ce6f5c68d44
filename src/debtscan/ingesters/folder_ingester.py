"""Ingester for local source trees."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from debtscan.models import Document, FileMetadata

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (
    ".ts", ".tsx", ".js", ".jsx",
    ".py", ".go", ".java", ".kt", ".scala",
    ".rs", ".rb", ".php", ".swift", ".cs",
    ".c", ".h", ".cpp", ".hpp",
)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

# Directories never worth analysing
SKIP_DIRS = {
    "__pycache__",
    "node_modules",
    "venv",
    "env",
    "dist",
    "build",
    "coverage",
}

_BINARY_SNIFF_BYTES = 8192


class FolderIngester:
    """Walks a local folder and yields source files.

    Files are filtered by extension allow-list, exclude patterns (plain
    substrings of the relative path), size and a binary-content sniff.
    Discovery order is the sorted walk order, so repeated runs see files
    in the same sequence.
    """

    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.extensions = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}
        self.max_file_size_bytes = max_file_size_bytes

    def discover(self, source: Path, exclude_patterns: list[str]) -> Iterator[str]:
        """Yield relative paths of eligible files.

        Args:
            source: Root folder to walk
            exclude_patterns: Substrings; any relative path containing one is skipped

        Yields:
            Relative POSIX paths, in sorted walk order
        """
        for root, dirs, files in os.walk(source):
            dirs[:] = sorted(d for d in dirs if not self._skip_dir(d))
            for filename in sorted(files):
                full_path = Path(root) / filename
                rel_path = full_path.relative_to(source).as_posix()

                if filename.startswith("."):
                    continue
                if full_path.suffix.lower() not in self.extensions:
                    continue
                if any(pattern in rel_path for pattern in exclude_patterns):
                    continue

                try:
                    size = full_path.stat().st_size
                except OSError as e:
                    logger.error(f"Cannot stat {rel_path}: {e}")
                    continue

                if size > self.max_file_size_bytes:
                    logger.warning(
                        f"Skipping {rel_path}: {size} bytes exceeds limit of "
                        f"{self.max_file_size_bytes} bytes"
                    )
                    continue

                if not self._is_text(full_path, rel_path):
                    continue

                yield rel_path

    def ingest(self, source: Path, exclude_patterns: list[str]) -> Iterator[Document]:
        """Yield documents for every discovered file.

        Unreadable files are logged and skipped.
        """
        for rel_path in self.discover(source, exclude_patterns):
            full_path = source / rel_path
            try:
                raw_content = full_path.read_bytes()
            except OSError as e:
                logger.error(f"Cannot read {rel_path}: {e}")
                continue

            yield Document(
                metadata=FileMetadata(
                    path=rel_path,
                    size_bytes=len(raw_content),
                    extension=full_path.suffix.lower(),
                ),
                content=raw_content.decode("utf-8", errors="replace"),
            )

    @staticmethod
    def _is_text(full_path: Path, rel_path: str) -> bool:
        """False for unreadable files and for NUL bytes near the start."""
        try:
            with open(full_path, "rb") as f:
                head = f.read(_BINARY_SNIFF_BYTES)
        except OSError as e:
            logger.error(f"Cannot read {rel_path}: {e}")
            return False
        if b"\x00" in head:
            logger.warning(f"Skipping {rel_path}: looks like binary content")
            return False
        return True

    def _skip_dir(self, name: str) -> bool:
        """Skip hidden directories, version control and build artifacts."""
        return name.startswith(".") or name in SKIP_DIRS or name.endswith(".egg-info")
