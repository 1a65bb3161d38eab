"""
Lexical reranking of similarity candidates.

Final score is a fixed linear blend of cosine similarity and query-word
overlap. Sorting is deterministic: ties are ordered by document id and
then by input position.
"""

from typing import List, Optional, Sequence, Set
from noterag.config.models import ScoredCandidate, SearchResult
from noterag.config.settings import RAGConfig, get_config
from noterag.utils.logging import get_logger

logger = get_logger(__name__)


def word_set(text: str) -> Set[str]:
    """Lowercased whitespace-delimited words of a text."""
    return set(text.lower().split())


def lexical_overlap(query_words: Set[str], text: str) -> float:
    """Fraction of query words present in the text; 0.0 for an empty query."""
    if not query_words:
        return 0.0
    return len(query_words & word_set(text)) / len(query_words)


class LexicalReranker:
    """Blends similarity with lexical overlap into the final ranking."""

    def __init__(
        self,
        similarity_weight: Optional[float] = None,
        lexical_weight: Optional[float] = None,
        config: Optional[RAGConfig] = None
    ):
        """
        Initialize reranker.

        Args:
            similarity_weight: Weight of cosine similarity
            lexical_weight: Weight of lexical overlap
            config: Configuration providing default weights
        """
        config = config or get_config()
        self.similarity_weight = (
            similarity_weight if similarity_weight is not None else config.retrieval.similarity_weight
        )
        self.lexical_weight = (
            lexical_weight if lexical_weight is not None else config.retrieval.lexical_weight
        )

    def blend(self, similarity: float, overlap: float) -> float:
        return self.similarity_weight * similarity + self.lexical_weight * overlap

    def rerank(self, candidates: Sequence[ScoredCandidate], query: str) -> List[SearchResult]:
        """
        Rerank candidates against a query.

        Args:
            candidates: Candidates carrying raw cosine similarity as score
            query: Original query string

        Returns:
            Results sorted by blended score descending
        """
        query_words = word_set(query)

        scored = []
        for position, candidate in enumerate(candidates):
            overlap = lexical_overlap(query_words, candidate.text)
            result = SearchResult(
                document_id=candidate.document_id,
                text=candidate.text,
                score=self.blend(candidate.score, overlap),
                similarity=candidate.score,
                lexical_overlap=overlap
            )
            scored.append((position, result))

        scored.sort(key=lambda item: (-item[1].score, item[1].document_id, item[0]))

        logger.debug(f"🔀 Reranked {len(scored)} candidates "
                     f"(weights={self.similarity_weight}/{self.lexical_weight})")
        return [result for _, result in scored]
