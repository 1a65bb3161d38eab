"""
Core business logic modules for NoteRAG.

This package contains the fundamental components:
- Text chunking and the document store
- Embedding providers and the two-tier cache
- Document ingestion
- Similarity retrieval and reranking
"""
