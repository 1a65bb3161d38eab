"""
Prompt and context composition for the generation step.

Contains:
- Prompt template management
- Context assembly from ranked results
"""

from .prompts import RAG_TEMPLATE, get_rag_prompt
from .context import ContextAssembler

__all__ = [
    "RAG_TEMPLATE",
    "get_rag_prompt",
    "ContextAssembler"
]
