"""Protocol for text generation providers."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Generation:
    """Raw output of one generation call."""

    text: str
    done: bool = True


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for LLM generation backends.

    Single request/response; no streaming.
    """

    @property
    def model_name(self) -> str:
        ...

    async def generate(self, prompt: str) -> Generation:
        ...
