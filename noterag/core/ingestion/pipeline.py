"""
Document ingestion pipeline.

Chunks documents, embeds every chunk through the cache-aware embedder and
publishes the processed documents into the document store.

Concurrency model:
- Within one document every chunk is embedded concurrently on worker
  threads; results are tagged with their source index and re-sorted
  after the join, so completion order never reorders chunks.
- Across documents, ``ingest_all`` admits at most
  ``max_concurrent_documents`` documents at a time through a semaphore.
- Ingestion is shielded from caller cancellation: a caller that stops
  awaiting does not stop the work or the store update.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple
from noterag.config.models import Chunk, Document
from noterag.config.settings import RAGConfig, get_config
from noterag.core.data.processors import TextProcessor, create_text_processor
from noterag.core.data.store import DocumentStore
from noterag.core.embeddings.cached import CachedEmbedder
from noterag.utils.decorators import async_timing_decorator
from noterag.utils.exceptions import DataProcessingError
from noterag.utils.logging import get_logger

logger = get_logger(__name__)

EmbeddedChunk = Tuple[int, str, Optional[List[float]]]


class IngestionPipeline:
    """Chunk, embed and publish documents."""

    def __init__(
        self,
        embedder: CachedEmbedder,
        store: DocumentStore,
        processor: Optional[TextProcessor] = None,
        config: Optional[RAGConfig] = None,
        max_concurrent_documents: Optional[int] = None
    ):
        """
        Initialize ingestion pipeline.

        Args:
            embedder: Cache-aware embedder
            store: Store receiving processed documents
            processor: Text processor producing the retrieval units
            config: Configuration providing defaults
            max_concurrent_documents: Admission limit for batch ingestion
        """
        self.config = config or get_config()
        self.embedder = embedder
        self.store = store
        self.processor = processor or create_text_processor(self.config)
        self.max_concurrent_documents = (
            max_concurrent_documents or self.config.ingestion.max_concurrent_documents
        )
        if self.max_concurrent_documents <= 0:
            raise DataProcessingError("max_concurrent_documents must be positive")

        self.in_flight = 0
        self.peak_in_flight = 0

        logger.info(f"📚 Initialized ingestion pipeline "
                    f"(max_concurrent_documents={self.max_concurrent_documents})")

    async def _embed_chunk(self, index: int, text: str) -> EmbeddedChunk:
        vector = await self.embedder.aembed(text)
        return index, text, vector

    async def _process(self, document: Document) -> Document:
        try:
            texts = self.processor.chunk(document.content)
        except DataProcessingError:
            raise
        except Exception as e:
            error_msg = f"Failed to chunk document {document.id}: {str(e)}"
            logger.error(error_msg)
            raise DataProcessingError(error_msg) from e

        results = await asyncio.gather(
            *(self._embed_chunk(index, text) for index, text in enumerate(texts)),
            return_exceptions=True
        )

        embedded: List[EmbeddedChunk] = []
        for result in results:
            if isinstance(result, BaseException):
                logger.warning(f"⚠️ Chunk embedding failed in document {document.id}: {result}")
                continue
            embedded.append(result)

        embedded.sort(key=lambda item: item[0])
        chunks = [
            Chunk(text=text, embedding=vector)
            for _, text, vector in embedded
            if vector
        ]

        skipped = len(texts) - len(chunks)
        if skipped:
            logger.info(f"🚫 Document {document.id}: skipped {skipped} unscoreable chunks")

        self.store.publish(document, chunks)
        logger.info(f"✅ Ingested document {document.id} ({len(chunks)} chunks)")
        return document

    async def ingest(self, document: Document) -> Document:
        """
        Ingest a single document.

        Re-ingesting the same document replaces its chunk list.

        Args:
            document: Document to ingest

        Returns:
            The processed document

        Raises:
            DataProcessingError: If the document cannot be chunked
        """
        return await asyncio.shield(self._process(document))

    async def _admit(self, document: Document, gate: asyncio.Semaphore) -> Document:
        async with gate:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                return await self._process(document)
            finally:
                self.in_flight -= 1

    @async_timing_decorator
    async def ingest_all(self, documents: Sequence[Document]) -> List[Document]:
        """
        Ingest a batch of documents with bounded document-level parallelism.

        A document that fails is logged and left out of the result; the
        others are still ingested.

        Args:
            documents: Documents to ingest

        Returns:
            Successfully processed documents, in input order
        """
        if not documents:
            return []

        logger.info(f"📄 Ingesting {len(documents)} documents "
                    f"(max {self.max_concurrent_documents} in flight)")

        gate = asyncio.Semaphore(self.max_concurrent_documents)
        tasks = [asyncio.create_task(self._admit(document, gate)) for document in documents]
        results = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))

        processed: List[Document] = []
        for document, result in zip(documents, results):
            if isinstance(result, BaseException):
                logger.error(f"❌ Failed to ingest document {document.id}: {str(result)}")
                continue
            processed.append(result)

        logger.info(f"📊 Ingestion complete: {len(processed)}/{len(documents)} documents")
        return processed
