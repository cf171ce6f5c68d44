"""Source discovery for debtscan."""

from debtscan.ingesters.folder_ingester import (
    DEFAULT_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    FolderIngester,
)

__all__ = ["DEFAULT_EXTENSIONS", "DEFAULT_MAX_FILE_SIZE", "FolderIngester"]
