"""
Semantic retrieval over the in-process document store.

Scores every chunk of every processed document against the query
embedding with cosine similarity. No pruning happens here; reranking and
truncation are the caller's job.
"""

import asyncio
from typing import List, Optional, Sequence
from noterag.config.models import Document, ScoredCandidate
from noterag.core.data.store import DocumentStore
from noterag.core.embeddings.cached import CachedEmbedder
from noterag.core.retrieval.base import cosine_similarity
from noterag.utils.exceptions import RetrievalError
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


class RetrievalEngine:
    """Cosine-similarity scorer over all stored chunks."""

    def __init__(self, embedder: CachedEmbedder, store: DocumentStore):
        """
        Initialize retrieval engine.

        Args:
            embedder: Cache-aware embedder used for the query
            store: Store providing processed documents
        """
        self.embedder = embedder
        self.store = store
        logger.info("🔍 Initialized retrieval engine")

    @staticmethod
    def score_documents(
        query_vector: Sequence[float],
        documents: Sequence[Document]
    ) -> List[ScoredCandidate]:
        """
        Score every chunk of the given documents against a query vector.

        Returns:
            One candidate per chunk, sorted by similarity descending
        """
        candidates: List[ScoredCandidate] = []
        for document in documents:
            for chunk in document.chunks:
                if len(chunk.embedding) != len(query_vector):
                    logger.debug(f"📐 Dimension mismatch in document {document.id}: "
                                 f"{len(chunk.embedding)} != {len(query_vector)}")
                candidates.append(ScoredCandidate(
                    document_id=document.id,
                    text=chunk.text,
                    score=cosine_similarity(query_vector, chunk.embedding)
                ))

        candidates.sort(key=lambda candidate: candidate.score, reverse=True)
        return candidates

    async def embed_query(self, query: str) -> Optional[List[float]]:
        """Embed a query through the cache and provider."""
        return await self.embedder.aembed(query)

    async def score(self, query: str) -> List[ScoredCandidate]:
        """
        Score all processed chunks against a query.

        Args:
            query: Query string

        Returns:
            Candidates sorted by raw similarity; empty if the query is unscoreable

        Raises:
            RetrievalError: If scoring fails
        """
        query_vector = await self.embed_query(query)
        if query_vector is None:
            logger.info(f"🚫 Query is unscoreable, returning no candidates: '{query[:50]}'")
            return []

        documents = self.store.snapshot()
        try:
            candidates = await asyncio.to_thread(self.score_documents, query_vector, documents)
        except Exception as e:
            error_msg = f"Failed to score query against {len(documents)} documents: {str(e)}"
            logger.error(error_msg)
            raise RetrievalError(error_msg) from e

        logger.info(f"📚 Scored {len(candidates)} chunks from {len(documents)} documents")
        return candidates
