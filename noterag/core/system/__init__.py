"""
Core system module initialization.

Exports the main NoteRAG facade.
"""

from .rag_system import NoteRAG, create_note_rag

__all__ = [
    "NoteRAG",
    "create_note_rag"
]
