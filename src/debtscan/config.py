"""Configuration for debtscan runs.

Values are layered: defaults, then ``DEBTSCAN_*`` environment variables,
then CLI arguments.
"""

import argparse
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from debtscan.chunkers import DEFAULT_BATCH_SIZE, DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from debtscan.ingesters import DEFAULT_EXTENSIONS, DEFAULT_MAX_FILE_SIZE
from debtscan.retrieval import DEFAULT_TOP_K
from debtscan.storage import DEFAULT_CACHE_DIR, DEFAULT_OUTPUT_DIR
from debtscan.utils import DEFAULT_OLLAMA_URL

ENV_PREFIX = "DEBTSCAN_"


class AnalysisConfig(BaseModel):
    """Everything a pipeline run needs to know."""

    directory: Path = Field(default=Path("."), description="Source tree to analyze")
    exclude_patterns: list[str] = Field(
        default_factory=list,
        description="Path substrings to skip; order is part of the cache key",
    )
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    chunk_overlap: int = Field(default=DEFAULT_CHUNK_OVERLAP, ge=0)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    max_file_size_bytes: int = Field(default=DEFAULT_MAX_FILE_SIZE, gt=0)
    top_k: int = Field(default=DEFAULT_TOP_K, ge=0, description="0 disables retrieval")
    max_retries: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1000, ge=0)

    cache_dir: Path = Field(default=DEFAULT_CACHE_DIR)
    output_dir: Path = Field(default=DEFAULT_OUTPUT_DIR)
    opinions_path: Path = Field(default=Path("opinions.md"))
    use_cache: bool = True

    embedding_provider: Literal["sentence-transformers", "ollama"] = "sentence-transformers"
    embedding_model: str | None = Field(
        default=None, description="Defaults to the provider's own default model"
    )
    generation_model: str | None = None
    ollama_base_url: str = DEFAULT_OLLAMA_URL
    request_timeout: float = Field(default=120.0, gt=0)

    @field_validator("extensions")
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [e if e.startswith(".") else f".{e}" for e in (x.strip().lower() for x in v) if e]

    @model_validator(mode="after")
    def check_overlap(self) -> "AnalysisConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def retry_delay(self) -> float:
        """Base backoff in seconds."""
        return self.retry_delay_ms / 1000

    @property
    def directory_key(self) -> str:
        """Directory as it appears in cache metadata."""
        return str(self.directory)

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        """Collect overrides from ``DEBTSCAN_*`` environment variables."""
        config: dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if value is None:
                continue
            if name in ("exclude_patterns", "extensions"):
                config[name] = [p.strip() for p in value.split(",") if p.strip()]
            else:
                config[name] = value
        return config

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add run-related CLI arguments."""
        parser.add_argument(
            "-e",
            "--exclude",
            action="append",
            dest="exclude_patterns",
            metavar="PATTERN",
            help="Skip paths containing PATTERN (repeatable, order matters)",
        )
        parser.add_argument("--chunk-size", type=int, help=f"Default: {DEFAULT_CHUNK_SIZE}")
        parser.add_argument("--chunk-overlap", type=int, help=f"Default: {DEFAULT_CHUNK_OVERLAP}")
        parser.add_argument("--batch-size", type=int, help=f"Default: {DEFAULT_BATCH_SIZE}")
        parser.add_argument("--max-file-size", type=int, dest="max_file_size_bytes")
        parser.add_argument("--top-k", type=int, help=f"Default: {DEFAULT_TOP_K}; 0 disables retrieval")
        parser.add_argument("--max-retries", type=int, help="Default: 3")
        parser.add_argument("--retry-delay-ms", type=int, help="Default: 1000")
        parser.add_argument("--cache-dir", type=Path)
        parser.add_argument("--output-dir", type=Path)
        parser.add_argument("--opinions", type=Path, dest="opinions_path")
        parser.add_argument(
            "--embedding-provider", choices=["sentence-transformers", "ollama"]
        )
        parser.add_argument("--embedding-model")
        parser.add_argument("--generation-model")
        parser.add_argument("--ollama-url", dest="ollama_base_url")

    @classmethod
    def from_args(cls, args: argparse.Namespace, **overrides: Any) -> "AnalysisConfig":
        """Build a config from defaults, environment and parsed CLI args."""
        values = cls.load_from_env()
        for name in cls.model_fields:
            value = getattr(args, name, None)
            if value is not None:
                values[name] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
