"""Ollama HTTP embedding provider."""

import httpx
import numpy as np

from debtscan.errors import ProviderError
from debtscan.utils import DEFAULT_OLLAMA_URL, post_json


class OllamaEmbedder:
    """Embeds texts through a running Ollama server (``/api/embed``)."""

    DEFAULT_MODEL = "nomic-embed-text"

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._model_name = model_name or self.DEFAULT_MODEL
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def model_name(self) -> str:
        return self._model_name

    async def embed(self, texts: list[str]) -> np.ndarray:
        """Embed a batch of texts.

        Raises:
            ProviderError: on HTTP errors or a malformed response
        """
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)

        data = await post_json(
            f"{self._base_url}/api/embed",
            {"model": self._model_name, "input": texts},
            timeout=self._timeout,
            client=self._client,
        )

        embeddings = data.get("embeddings")
        if not isinstance(embeddings, list) or len(embeddings) != len(texts):
            count = len(embeddings) if isinstance(embeddings, list) else "no"
            raise ProviderError(
                f"Ollama returned {count} embeddings for {len(texts)} texts"
            )
        return np.asarray(embeddings, dtype=np.float32)
