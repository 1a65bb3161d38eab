"""
In-process document store.

Holds ingested documents keyed by id and hands out consistent,
read-only snapshots of the processed ones.
"""

from typing import Dict, List, Optional, Tuple
from noterag.config.models import Chunk, Document
from noterag.utils.locks import ReadWriteLock
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


class DocumentStore:
    """Document collection with reader/writer discipline.

    Writes (appends from ingestion completions) are exclusive; snapshots
    for query-time scoring may run concurrently with each other. Documents
    are keyed by id with last-write-wins semantics.
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._lock = ReadWriteLock()

    def append(self, document: Document) -> None:
        """
        Publish a document, replacing any previous one with the same id.

        Args:
            document: Document to store
        """
        with self._lock.write_locked():
            replaced = document.id in self._documents
            self._documents[document.id] = document

        if replaced:
            logger.debug(f"♻️ Replaced document {document.id}")
        else:
            logger.debug(f"📥 Stored document {document.id}")

    def publish(self, document: Document, chunks: List[Chunk]) -> None:
        """
        Assign processed chunks to a document and store it atomically.

        Snapshots taken concurrently see either the previous state of the
        document or the fully processed one.

        Args:
            document: Document being ingested
            chunks: Embedded chunks in source order
        """
        with self._lock.write_locked():
            document.chunks = chunks
            document.processed = True
            self._documents[document.id] = document

        logger.debug(f"📥 Published document {document.id} with {len(chunks)} chunks")

    def snapshot(self) -> Tuple[Document, ...]:
        """Return the processed documents as an immutable tuple."""
        with self._lock.read_locked():
            return tuple(doc for doc in self._documents.values() if doc.processed)

    def get(self, document_id: str) -> Optional[Document]:
        """Get a stored document by id."""
        with self._lock.read_locked():
            return self._documents.get(document_id)

    def remove(self, document_id: str) -> bool:
        """
        Remove a document by id.

        Returns:
            True if a document was removed
        """
        with self._lock.write_locked():
            return self._documents.pop(document_id, None) is not None

    def all_documents(self) -> List[Document]:
        """Return every stored document, processed or not."""
        with self._lock.read_locked():
            return list(self._documents.values())

    def ids(self) -> List[str]:
        """Return the ids of all stored documents."""
        with self._lock.read_locked():
            return list(self._documents)

    def clear(self) -> None:
        """Remove all documents."""
        with self._lock.write_locked():
            self._documents.clear()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._documents)
