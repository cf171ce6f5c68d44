"""Embedding providers for vector generation."""

from debtscan.embedders.ollama import OllamaEmbedder
from debtscan.embedders.sentence_transformer import SentenceTransformerEmbedder

__all__ = ["OllamaEmbedder", "SentenceTransformerEmbedder"]
