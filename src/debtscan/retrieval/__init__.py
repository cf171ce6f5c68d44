"""Similarity retrieval over embedded chunks."""

from debtscan.retrieval.retriever import Retriever
from debtscan.retrieval.vector_index import DEFAULT_TOP_K, ScoredChunk, VectorIndex

__all__ = ["DEFAULT_TOP_K", "Retriever", "ScoredChunk", "VectorIndex"]
