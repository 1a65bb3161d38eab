"""
Context assembly for the generation step.

Groups ranked results by source document and renders the prompt.
"""

from typing import Dict, List, Optional, Sequence
from langchain_core.prompts import PromptTemplate
from noterag.chains.prompts import get_rag_prompt
from noterag.config.models import ScoredCandidate
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


class ContextAssembler:
    """Turns top-ranked results into a prompt-ready context block."""

    def __init__(self, prompt: Optional[PromptTemplate] = None):
        self.prompt = prompt or get_rag_prompt()

    @staticmethod
    def group_by_document(results: Sequence[ScoredCandidate]) -> Dict[str, List[str]]:
        """Group result texts by document id, in first-seen rank order."""
        groups: Dict[str, List[str]] = {}
        for result in results:
            groups.setdefault(result.document_id, []).append(result.text)
        return groups

    def assemble(self, results: Sequence[ScoredCandidate]) -> str:
        """
        Render grouped results as a context block.

        Each group is headed ``Document <id>:`` with its texts on the
        following lines; groups are separated by a blank line.
        """
        groups = self.group_by_document(results)
        return "\n\n".join(
            f"Document {document_id}:\n" + "\n".join(texts)
            for document_id, texts in groups.items()
        )

    def build_prompt(self, query: str, results: Sequence[ScoredCandidate]) -> str:
        """
        Render the full generation prompt.

        Args:
            query: Original user query
            results: Top-ranked results

        Returns:
            Prompt text carrying the context and the query
        """
        context = self.assemble(results)
        prompt = self.prompt.format(context=context, question=query)
        logger.debug(f"📝 Generated prompt:\n{prompt}")
        return prompt
