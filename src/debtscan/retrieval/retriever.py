"""Query-time retrieval of similar chunks."""

import logging

from debtscan.protocols import EmbeddingProvider
from debtscan.retrieval.vector_index import DEFAULT_TOP_K, ScoredChunk, VectorIndex

logger = logging.getLogger(__name__)


class Retriever:
    """Embeds a query and looks it up in a :class:`VectorIndex`.

    The embedder must be the one the index was built with, otherwise the
    vector spaces do not line up.
    """

    def __init__(self, index: VectorIndex, embedder: EmbeddingProvider):
        self.index = index
        self.embedder = embedder

    async def search(self, query_text: str, k: int = DEFAULT_TOP_K) -> list[ScoredChunk]:
        if k <= 0 or len(self.index) == 0:
            return []
        query_vector = (await self.embedder.embed([query_text]))[0]
        return self.index.search(query_vector, k)

    async def retrieve(self, query_text: str, k: int = DEFAULT_TOP_K) -> list[str]:
        """Return the text of the ``k`` chunks most similar to ``query_text``."""
        results = await self.search(query_text, k)
        logger.debug(f"Retrieved {len(results)} chunks")
        return [r.text for r in results]
