"""Utility functions for debtscan."""

from debtscan.utils.http import DEFAULT_OLLAMA_URL, post_json
from debtscan.utils.paths import safe_file_name

__all__ = ["DEFAULT_OLLAMA_URL", "post_json", "safe_file_name"]
