"""
Main NoteRAG class that wires all components together.

Owns one embedding provider, one embedding cache and one document store,
shared by the ingestion and query flows of this instance.
"""

from typing import Any, Dict, List, Optional, Sequence
from langchain_core.embeddings import Embeddings
from langchain_core.output_parsers import StrOutputParser
from langchain_core.runnables import Runnable

from noterag.chains.context import ContextAssembler
from noterag.config.models import Document, SearchResult
from noterag.config.settings import RAGConfig, get_config
from noterag.core.data.store import DocumentStore
from noterag.core.embeddings.cache import EmbeddingCache
from noterag.core.embeddings.cached import CachedEmbedder
from noterag.core.embeddings.providers import (
    EmbeddingProvider,
    FallbackEmbeddingProvider,
    WordVectorSource,
    create_embedding_provider
)
from noterag.core.ingestion.pipeline import IngestionPipeline
from noterag.core.retrieval.rerank import LexicalReranker
from noterag.core.retrieval.semantic import RetrievalEngine
from noterag.utils.decorators import async_timing_decorator
from noterag.utils.exceptions import GenerationError, ValidationError
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


class NoteRAG:
    """Retrieval-augmented question answering over a growing note collection."""

    def __init__(
        self,
        config: Optional[RAGConfig] = None,
        embeddings: Optional[Embeddings] = None,
        llm: Optional[Runnable] = None,
        provider: Optional[EmbeddingProvider] = None,
        cache: Optional[EmbeddingCache] = None,
        store: Optional[DocumentStore] = None,
        nlp: Any = None,
        word_vectors: Optional[WordVectorSource] = None
    ):
        """
        Initialize NoteRAG.

        Args:
            config: Configuration; the process default is used when omitted
            embeddings: External embeddings model (OpenAI when omitted)
            llm: Generation model or runnable accepting a prompt string
            provider: Ready-made embedding provider, bypassing ``embeddings``
            cache: Embedding cache to use
            store: Document store to use
            nlp: spaCy pipeline for the lexical fallback
            word_vectors: Lemma vector source for the lexical fallback

        Raises:
            ConfigurationError: If no embedding model can be initialized
        """
        self.config = config or get_config()

        self.provider = provider or create_embedding_provider(
            self.config,
            embeddings=embeddings,
            nlp=nlp,
            word_vectors=word_vectors
        )
        self.cache = cache or EmbeddingCache(self.config)
        self.store = store or DocumentStore()
        self.embedder = CachedEmbedder(self.provider, self.cache)

        self.pipeline = IngestionPipeline(
            self.embedder,
            self.store,
            config=self.config
        )
        self.retrieval_engine = RetrievalEngine(self.embedder, self.store)
        self.reranker = LexicalReranker(config=self.config)
        self.assembler = ContextAssembler()
        self.llm = llm

        logger.info("🚀 NoteRAG initialized successfully")

    async def add_document(self, document: Document) -> Document:
        """Ingest a single document."""
        return await self.pipeline.ingest(document)

    async def add_documents(self, documents: Sequence[Document]) -> List[Document]:
        """Ingest a batch of documents with bounded parallelism."""
        return await self.pipeline.ingest_all(documents)

    def remove_document(self, document_id: str) -> bool:
        """Remove a document from the index."""
        removed = self.store.remove(document_id)
        if removed:
            logger.info(f"🗑️ Removed document {document_id}")
        return removed

    @async_timing_decorator
    async def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """
        Find the chunks most relevant to a query.

        Args:
            query: Query string
            limit: Maximum number of results (``retrieval.default_limit`` when omitted)

        Returns:
            Results ranked by blended score; empty if the query is unscoreable

        Raises:
            ValidationError: If limit is not positive
        """
        limit = limit if limit is not None else self.config.retrieval.default_limit
        if limit <= 0:
            raise ValidationError(f"limit must be positive, got {limit}")
        logger.info(f"❓ Searching: {query[:50]}...")

        candidates = await self.retrieval_engine.score(query)
        ranked = self.reranker.rerank(candidates, query)
        return ranked[:limit]

    def _get_llm(self) -> Runnable:
        if self.llm is None:
            from langchain_openai import ChatOpenAI

            self.llm = ChatOpenAI(
                model=self.config.llm.model_name,
                temperature=self.config.llm.temperature,
                max_tokens=self.config.llm.max_tokens,
                timeout=self.config.llm.timeout,
                openai_api_key=self.config.openai_api_key
            )
        return self.llm

    async def generate_response(self, query: str) -> str:
        """
        Answer a query from the indexed documents.

        Args:
            query: User question

        Returns:
            Generated answer text

        Raises:
            GenerationError: If the generation model fails
        """
        results = await self.search(query)
        prompt = self.assembler.build_prompt(query, results)

        try:
            chain = self._get_llm() | StrOutputParser()
            response = await chain.ainvoke(prompt)
        except Exception as e:
            error_msg = f"Generation failed: {str(e)}"
            logger.error(error_msg)
            raise GenerationError(error_msg) from e

        logger.info(f"✅ Generated response from {len(results)} results")
        return response

    def clear_cache(self) -> None:
        """Clear both embedding cache tiers."""
        self.cache.clear()

    async def reprocess_all(self) -> List[Document]:
        """Clear the cache and re-ingest every stored document."""
        documents = self.store.all_documents()
        logger.info(f"🔄 Reprocessing {len(documents)} documents")
        self.clear_cache()
        return await self.pipeline.ingest_all(documents)

    def _provider_info(self) -> Dict[str, Any]:
        if isinstance(self.provider, FallbackEmbeddingProvider):
            return self.provider.get_provider_info()
        return {"strategies": [self.provider.name], "dimension": None}

    def get_stats(self) -> Dict[str, Any]:
        """
        Get system statistics.

        Returns:
            Dictionary with system statistics
        """
        documents = self.store.all_documents()
        return {
            "documents": {
                "stored": len(documents),
                "processed": sum(1 for doc in documents if doc.processed),
                "chunks": sum(len(doc.chunks) for doc in documents)
            },
            "cache": self.cache.get_stats(),
            "provider": self._provider_info(),
            "configuration": {
                "chunk_size": self.config.data.chunk_size,
                "overlap_words": self.config.data.overlap_words,
                "retrieval_unit": self.config.data.retrieval_unit,
                "max_concurrent_documents": self.pipeline.max_concurrent_documents,
                "embedding_model": self.config.embedding.model_name
            }
        }

    def close(self) -> None:
        """Flush pending cache writes and release background resources."""
        self.cache.close()


def create_note_rag(
    config: Optional[RAGConfig] = None,
    embeddings: Optional[Embeddings] = None,
    llm: Optional[Runnable] = None
) -> NoteRAG:
    """
    Create a NoteRAG instance.

    Args:
        config: Configuration to use
        embeddings: External embeddings model
        llm: Generation model

    Returns:
        NoteRAG instance
    """
    return NoteRAG(config=config, embeddings=embeddings, llm=llm)
