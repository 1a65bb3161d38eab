"""
Data processing module initialization.

Exports text processors and the document store.
"""

from .processors import (
    TextProcessor,
    TextChunker,
    SentenceSplitter,
    normalize_text,
    create_text_processor
)

from .store import DocumentStore

__all__ = [
    # Processors
    "TextProcessor",
    "TextChunker",
    "SentenceSplitter",
    "normalize_text",
    "create_text_processor",

    # Store
    "DocumentStore"
]
