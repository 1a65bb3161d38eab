"""
Cache-aware embedding lookups shared by ingestion and retrieval.
"""

import asyncio
from typing import List, Optional
from noterag.core.embeddings.cache import EmbeddingCache
from noterag.core.embeddings.providers import EmbeddingProvider
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


class CachedEmbedder:
    """Looks up the cache first and computes through the provider on a miss."""

    def __init__(self, provider: EmbeddingProvider, cache: EmbeddingCache):
        self.provider = provider
        self.cache = cache

    def embed(self, text: str) -> Optional[List[float]]:
        """
        Return the embedding of a text, computing and caching it on a miss.

        Returns:
            Embedding vector, or None when the text is unscoreable
        """
        cached = self.cache.get(text)
        if cached is not None:
            return cached

        vector = self.provider.embed(text)
        if vector is None:
            return None

        self.cache.put(text, vector)
        return vector

    async def aembed(self, text: str) -> Optional[List[float]]:
        """Run ``embed`` on a worker thread."""
        return await asyncio.to_thread(self.embed, text)
