"""
Custom exceptions for NoteRAG.

Provides specific exception types for different error scenarios.
"""


class NoteRAGException(Exception):
    """Base exception for NoteRAG errors."""
    pass


class ConfigurationError(NoteRAGException):
    """Raised when configuration is invalid or no embedding model can be built."""
    pass


class DataProcessingError(NoteRAGException):
    """Raised when text processing fails."""
    pass


class CacheError(NoteRAGException):
    """Raised when the embedding cache cannot be reset."""
    pass


class RetrievalError(NoteRAGException):
    """Raised when retrieval operations fail."""
    pass


class GenerationError(NoteRAGException):
    """Raised when text generation fails."""
    pass


class ValidationError(NoteRAGException):
    """Raised when input validation fails."""
    pass
