"""Generation providers and the validating wrapper."""

from debtscan.generators.ollama import OllamaGenerator
from debtscan.generators.validating import (
    RetryPhase,
    ValidatingGenerator,
    enhance_prompt,
    extract_json_object,
    parse_json_output,
)

__all__ = [
    "OllamaGenerator",
    "RetryPhase",
    "ValidatingGenerator",
    "enhance_prompt",
    "extract_json_object",
    "parse_json_output",
]
