"""Core data models for source documents."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileMetadata:
    """Metadata for a discovered source file."""

    path: str  # relative to the scanned directory, POSIX separators
    size_bytes: int
    extension: str


@dataclass
class Document:
    """A source file read from the scanned directory."""

    metadata: FileMetadata
    content: str

    @property
    def path(self) -> str:
        return self.metadata.path
