"""
NoteRAG

Retrieval core for a personal note collection:
- Word-window chunking with configurable overlap
- Two-tier content-addressed embedding cache
- Bounded-parallel, order-preserving ingestion
- Cosine similarity retrieval with lexical reranking
- Context assembly for LangChain generation models
"""

from noterag.config.models import Chunk, Document, ScoredCandidate, SearchResult
from noterag.core.system.rag_system import NoteRAG, create_note_rag

__version__ = "1.0.0"

__all__ = [
    "Chunk",
    "Document",
    "ScoredCandidate",
    "SearchResult",
    "NoteRAG",
    "create_note_rag"
]
