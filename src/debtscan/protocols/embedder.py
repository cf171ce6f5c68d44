"""Protocol for embedding backends."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that turns a batch of texts into one vector per text.

    Implemented by the sentence-transformers and Ollama backends and by
    the test doubles. ``model_name`` is part of the embedding cache key,
    so two providers with the same name must produce the same vectors.
    """

    @property
    def model_name(self) -> str:
        ...

    async def embed(self, texts: list[str]) -> np.ndarray:
        """Embed ``texts`` in order.

        Returns: array of shape (len(texts), dim)

        Raises on authentication, quota or transport failures.
        """
        ...
