"""
Retrieval module initialization.

Exports similarity scoring and reranking for NoteRAG.
"""

from .base import cosine_similarity

from .semantic import RetrievalEngine

from .rerank import (
    LexicalReranker,
    lexical_overlap,
    word_set
)

__all__ = [
    "cosine_similarity",
    "RetrievalEngine",
    "LexicalReranker",
    "lexical_overlap",
    "word_set"
]
