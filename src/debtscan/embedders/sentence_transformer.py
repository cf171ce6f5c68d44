"""Local embedding backend built on sentence-transformers."""

import asyncio
import logging

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Embeds chunks on the local machine; no server or API key needed.

    The model is loaded on the first ``embed`` call, so constructing the
    embedder (e.g. to read ``model_name`` for a cache lookup) stays cheap.
    Vectors come back L2-normalised as float32.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(
        self,
        model_name: str | None = None,
        device: str | None = None,
        encode_batch_size: int = 32,
    ):
        self._model_name = model_name or self.DEFAULT_MODEL
        self._device = device
        self._encode_batch_size = encode_batch_size
        self._model: SentenceTransformer | None = None

    def _load(self) -> SentenceTransformer:
        if self._model is None:
            logger.info(f"Loading sentence-transformers model {self._model_name}")
            self._model = SentenceTransformer(self._model_name, device=self._device)
        return self._model

    @property
    def model_name(self) -> str:
        return self._model_name

    def _encode(self, texts: list[str]) -> np.ndarray:
        vectors = self._load().encode(
            texts,
            batch_size=self._encode_batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return np.asarray(vectors, dtype=np.float32)

    async def embed(self, texts: list[str]) -> np.ndarray:
        """Embed a batch of texts in a worker thread.

        Returns:
            Array of shape (len(texts), dimension); (0, 0) for no texts
        """
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        return await asyncio.to_thread(self._encode, texts)
