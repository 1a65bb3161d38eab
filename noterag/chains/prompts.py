"""
Prompt templates for NoteRAG.

Contains the prompt template handed to the generation step.
"""

from langchain_core.prompts import PromptTemplate


RAG_TEMPLATE = """You are a helpful assistant that answers questions based on the provided context.

Context:
{context}

Question: {question}

Instructions:
1. Answer based solely on the information provided in the context
2. If the context doesn't contain enough information, say so
3. Be concise and accurate

Answer:"""


def get_rag_prompt() -> PromptTemplate:
    """
    Get the main RAG prompt template.

    Returns:
        PromptTemplate with ``context`` and ``question`` variables
    """
    return PromptTemplate.from_template(RAG_TEMPLATE)
