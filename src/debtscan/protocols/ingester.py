"""Protocol for source discovery."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from debtscan.models import Document


@runtime_checkable
class Ingester(Protocol):
    """Protocol for source tree handlers.

    Uses structural subtyping - no inheritance required.
    """

    def discover(self, source: Path, exclude_patterns: list[str]) -> Iterator[str]:
        """Yield relative POSIX paths of eligible files in discovery order."""
        ...

    def ingest(self, source: Path, exclude_patterns: list[str]) -> Iterator[Document]:
        """Yield readable documents for every discovered file."""
        ...
