"""
Text processing and chunking utilities.

Handles whitespace normalization, word-window chunking with overlap,
and sentence splitting.
"""

import re
from typing import Any, List, Optional
from noterag.utils.logging import get_logger
from noterag.utils.exceptions import DataProcessingError
from noterag.config.settings import RAGConfig, get_config

logger = get_logger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


class TextProcessor:
    """Base class for splitting text into retrieval units."""

    def __init__(self, config: Optional[RAGConfig] = None):
        """Initialize text processor."""
        self.config = config or get_config()

    def chunk(self, text: str) -> List[str]:
        """
        Split text into ordered retrieval units.

        Args:
            text: Raw document text

        Returns:
            Ordered list of unit texts

        Raises:
            DataProcessingError: If splitting fails
        """
        raise NotImplementedError("Subclasses must implement chunk")


class TextChunker(TextProcessor):
    """Word-window chunker with a trailing-word overlap between chunks."""

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        overlap_words: Optional[int] = None,
        config: Optional[RAGConfig] = None
    ):
        """
        Initialize text chunker.

        Args:
            chunk_size: Character length at which a chunk is closed
            overlap_words: Trailing words of a closed chunk that open the next one
            config: Configuration providing defaults
        """
        super().__init__(config)
        self.chunk_size = chunk_size if chunk_size is not None else self.config.data.chunk_size
        self.overlap_words = overlap_words if overlap_words is not None else self.config.data.overlap_words

        if self.chunk_size <= 0:
            raise DataProcessingError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.overlap_words < 0:
            raise DataProcessingError(f"overlap_words must not be negative, got {self.overlap_words}")

    def chunk(self, text: str) -> List[str]:
        """
        Split text into overlapping word-window chunks.

        A chunk is closed once its length reaches ``chunk_size`` characters
        or the words run out. The next chunk starts with the last
        ``overlap_words`` words of the closed one, always fewer than the
        closed chunk holds.

        Args:
            text: Raw document text

        Returns:
            Ordered list of chunk texts; empty for blank input
        """
        words = text.split()
        if not words:
            return []

        chunks: List[str] = []
        current: List[str] = []
        current_length = 0
        last_index = len(words) - 1

        for index, word in enumerate(words):
            current_length += len(word) + (1 if current else 0)
            current.append(word)

            if current_length < self.chunk_size and index != last_index:
                continue

            chunks.append(" ".join(current))

            if index < last_index:
                overlap = min(self.overlap_words, len(current) - 1)
                current = current[len(current) - overlap:] if overlap else []
                current_length = len(" ".join(current))

        logger.debug(f"✂️ Split {len(words)} words into {len(chunks)} chunks "
                     f"(size={self.chunk_size}, overlap_words={self.overlap_words})")
        return chunks


class SentenceSplitter(TextProcessor):
    """Sentence-level splitter backed by a spaCy sentencizer."""

    def __init__(self, nlp: Any = None, config: Optional[RAGConfig] = None):
        """
        Initialize sentence splitter.

        Args:
            nlp: spaCy pipeline with sentence boundaries; a blank English
                pipeline with a ``sentencizer`` is created when omitted
            config: Configuration providing defaults
        """
        super().__init__(config)
        self._nlp = nlp

    @property
    def nlp(self) -> Any:
        if self._nlp is None:
            import spacy

            nlp = spacy.blank("en")
            nlp.add_pipe("sentencizer")
            self._nlp = nlp
            logger.info("🧩 Created blank spaCy pipeline with sentencizer")
        return self._nlp

    def chunk(self, text: str) -> List[str]:
        """
        Split text into trimmed, non-empty sentences.

        Args:
            text: Raw document text

        Returns:
            Ordered list of sentences

        Raises:
            DataProcessingError: If the spaCy pipeline fails
        """
        if not text.strip():
            return []

        try:
            doc = self.nlp(text)
        except Exception as e:
            error_msg = f"Failed to split sentences: {str(e)}"
            logger.error(error_msg)
            raise DataProcessingError(error_msg) from e

        sentences = [normalize_text(sent.text) for sent in doc.sents]
        return [sentence for sentence in sentences if sentence]


def create_text_processor(config: Optional[RAGConfig] = None) -> TextProcessor:
    """
    Create the text processor selected by ``data.retrieval_unit``.

    Args:
        config: Configuration to read the retrieval unit from

    Returns:
        Text processor instance
    """
    config = config or get_config()
    if config.data.retrieval_unit == "sentence":
        return SentenceSplitter(config=config)
    return TextChunker(config=config)
