"""Protocol for text splitting strategies."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextSplitter(Protocol):
    """Protocol for text splitting strategies.

    Chunks are plain strings; their order matters only for overlap.
    """

    def split(self, text: str) -> list[str]:
        """Split text into ordered chunks."""
        ...
