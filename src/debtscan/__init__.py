"""debtscan - retrieval-augmented, resumable code debt analysis."""

__version__ = "0.1.0"
