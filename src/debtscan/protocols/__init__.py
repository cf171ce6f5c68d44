"""Protocol definitions for extensible components."""

from debtscan.protocols.chunker import TextSplitter
from debtscan.protocols.embedder import EmbeddingProvider
from debtscan.protocols.generator import Generation, GenerationProvider
from debtscan.protocols.ingester import Ingester

__all__ = [
    "EmbeddingProvider",
    "Generation",
    "GenerationProvider",
    "Ingester",
    "TextSplitter",
]
