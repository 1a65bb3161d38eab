"""
Embedding module initialization.

Exports main classes and functions for embedding management.
"""

from .providers import (
    EmbeddingProvider,
    DirectEmbeddingStrategy,
    WeightedLexicalStrategy,
    FallbackEmbeddingProvider,
    POS_WEIGHTS,
    l2_normalize,
    embeddings_word_vectors,
    load_spacy_pipeline,
    create_embedding_provider
)

from .cache import (
    EmbeddingCache,
    MemoryTier,
    PersistentTier,
    cache_key
)

from .cached import CachedEmbedder

__all__ = [
    # Providers
    "EmbeddingProvider",
    "DirectEmbeddingStrategy",
    "WeightedLexicalStrategy",
    "FallbackEmbeddingProvider",
    "POS_WEIGHTS",
    "l2_normalize",
    "embeddings_word_vectors",
    "load_spacy_pipeline",
    "create_embedding_provider",

    # Cache
    "EmbeddingCache",
    "MemoryTier",
    "PersistentTier",
    "cache_key",
    "CachedEmbedder"
]
