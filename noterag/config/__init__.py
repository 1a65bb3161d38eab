"""
Configuration management for NoteRAG.

Handles environment variables, settings, and data models
using Pydantic for validation and type safety.
"""

from .settings import (
    RAGConfig,
    EmbeddingConfig,
    CacheConfig,
    DataConfig,
    IngestionConfig,
    RetrievalConfig,
    LLMConfig,
    LoggingConfig,
    get_config,
    validate_api_keys
)

from .models import (
    Chunk,
    Document,
    ScoredCandidate,
    SearchResult
)

__all__ = [
    # Settings
    "RAGConfig",
    "EmbeddingConfig",
    "CacheConfig",
    "DataConfig",
    "IngestionConfig",
    "RetrievalConfig",
    "LLMConfig",
    "LoggingConfig",
    "get_config",
    "validate_api_keys",

    # Models
    "Chunk",
    "Document",
    "ScoredCandidate",
    "SearchResult"
]
