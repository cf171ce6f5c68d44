"""Recursive boundary-preferring chunking strategy."""

import bisect
import logging

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200
DEFAULT_SEPARATORS = ("\n\n", "\n", " ", "")


class RecursiveTextSplitter:
    """Split text at the most meaningful boundary that still fits.

    The text is first broken into pieces at the coarsest boundary that
    occurs (paragraph, line, word, character), recursing into any piece
    that is still too long. Pieces never exceed ``chunk_size - chunk_overlap``
    so that a carried overlap plus the next piece always fits one chunk.

    Chunks are then cut greedily at piece boundaries. Each chunk after the
    first starts at the earliest piece boundary inside the last
    ``chunk_overlap`` characters of its predecessor, or exactly
    ``chunk_overlap`` characters back when no boundary falls there.
    Nothing is stripped: every chunk is a substring of the input, and with
    a non-zero overlap consecutive chunks share between 1 and
    ``chunk_overlap`` characters.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        separators: tuple[str, ...] = DEFAULT_SEPARATORS,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = tuple(separators)

    @property
    def max_piece_size(self) -> int:
        return self.chunk_size - self.chunk_overlap

    def split(self, text: str) -> list[str]:
        """Split text into ordered, overlapping chunks.

        Args:
            text: The text content to chunk

        Returns:
            Chunks no longer than ``chunk_size``, in input order
        """
        if not text:
            return []
        if len(text) <= self.chunk_size:
            return [text]

        boundaries = [0]
        for piece in self._split(text, self.separators):
            boundaries.append(boundaries[-1] + len(piece))
        return self._merge(text, boundaries)

    def _split(self, text: str, separators: tuple[str, ...]) -> list[str]:
        """Break text into pieces of at most ``max_piece_size`` characters."""
        separator = separators[-1] if separators else ""
        remaining: tuple[str, ...] = ()
        for i, candidate in enumerate(separators):
            if candidate == "":
                separator = candidate
                break
            if candidate in text:
                separator = candidate
                remaining = separators[i + 1:]
                break

        pieces: list[str] = []
        for piece in self._pieces(text, separator):
            if len(piece) <= self.max_piece_size:
                pieces.append(piece)
            elif remaining:
                pieces.extend(self._split(piece, remaining))
            else:
                # Only reachable with a custom separator list lacking "".
                step = self.max_piece_size
                pieces.extend(piece[i:i + step] for i in range(0, len(piece), step))
        return pieces

    @staticmethod
    def _pieces(text: str, separator: str) -> list[str]:
        """Split on ``separator``, keeping it at the front of the following piece.

        Runs of separators are folded into the next piece so that no piece
        is a bare separator.
        """
        if separator == "":
            return list(text)

        parts = text.split(separator)
        pieces: list[str] = []
        carry = ""
        for piece in [parts[0]] + [separator + part for part in parts[1:]]:
            carry += piece
            if carry.strip(separator):
                pieces.append(carry)
                carry = ""
        if carry:
            if pieces:
                pieces[-1] += carry
            else:
                pieces.append(carry)
        return pieces

    def _merge(self, text: str, boundaries: list[int]) -> list[str]:
        """Cut chunks at piece boundaries, carrying an overlap window."""
        chunks: list[str] = []
        end_of_text = boundaries[-1]
        start = 0

        while True:
            # Largest boundary that keeps the chunk within chunk_size.
            end = boundaries[bisect.bisect_right(boundaries, start + self.chunk_size) - 1]
            chunks.append(text[start:end])
            if end == end_of_text:
                return chunks

            window_start = end - self.chunk_overlap
            i = bisect.bisect_left(boundaries, window_start)
            start = boundaries[i] if boundaries[i] < end else window_start
