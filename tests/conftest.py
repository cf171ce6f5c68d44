"""Shared fakes and fixtures for debtscan tests."""

import json
import re
from pathlib import Path

import numpy as np
import pytest

from debtscan.protocols import Generation

VALID_ANALYSIS = {
    "totalIssues": 2,
    "issuesBySeverity": {"high": {"score": 7, "issues": ["deep nesting"]}},
    "issues": [
        {
            "type": "complexity",
            "frequency": 1,
            "severity": 7,
            "affectedComponents": ["main"],
            "confidence": 8,
        },
        {
            "type": "naming",
            "frequency": 1,
            "severity": 2,
            "affectedComponents": [],
            "confidence": 6,
        },
    ],
}


class BagOfWordsEmbedder:
    """Deterministic embedder: one dimension per distinct word (mod ``dim``)."""

    def __init__(self, dim: int = 32, model_name: str = "bag-of-words"):
        self.dim = dim
        self._model_name = model_name
        self.vocab: dict[str, int] = {}
        self.calls: list[list[str]] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    def vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dim, dtype=np.float32)
        for word in re.findall(r"\w+", text.lower()):
            index = self.vocab.setdefault(word, len(self.vocab))
            vec[index % self.dim] += 1.0
        return vec

    async def embed(self, texts: list[str]) -> np.ndarray:
        self.calls.append(list(texts))
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        return np.stack([self.vector(t) for t in texts])


class ScriptedGenerator:
    """Replays canned responses in order; the last one repeats.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, *responses, model_name: str = "scripted"):
        self.responses = list(responses) or [json.dumps(VALID_ANALYSIS)]
        self.prompts: list[str] = []
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> Generation:
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return Generation(text=response)


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def embedder():
    return BagOfWordsEmbedder()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def source_tree(tmp_path):
    """A small TypeScript project with one nested folder."""
    return write_tree(
        tmp_path / "src",
        {
            "a.ts": "export function add(a: number, b: number) { return a + b; }\n",
            "lib/b.ts": "export const greet = (name: string) => `hello ${name}`;\n",
            "README.md": "not a source file\n",
        },
    )
