"""
Pydantic models for documents, chunks and retrieval results.
"""

from typing import List
from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """A retrieval unit of a document with its embedding."""

    text: str
    embedding: List[float] = Field(default_factory=list)


class Document(BaseModel):
    """
    A source document handed to the ingestion pipeline.

    ``id`` and ``content`` are fixed at construction; ``chunks`` and
    ``processed`` are written only by the ingestion pipeline.
    """

    id: str = Field(frozen=True)
    content: str = Field(frozen=True)
    chunks: List[Chunk] = Field(default_factory=list)
    processed: bool = False

    def is_consistent(self) -> bool:
        """Check the processed invariant: every chunk carries an embedding."""
        return self.processed and all(chunk.embedding for chunk in self.chunks)


class ScoredCandidate(BaseModel):
    """One chunk scored against one query."""

    document_id: str
    text: str
    score: float


class SearchResult(ScoredCandidate):
    """Ranked search result with its score components."""

    similarity: float = 0.0
    lexical_overlap: float = 0.0
