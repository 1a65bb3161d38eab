"""
Embedding providers for NoteRAG.

A single capability interface (``EmbeddingProvider.embed``) implemented by
two strategies: a direct call to the external embedding model, and a
part-of-speech weighted average of lemma vectors. ``FallbackEmbeddingProvider``
tries the strategies in order and returns the first usable vector.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence
import numpy as np
from langchain_core.embeddings import Embeddings
from noterag.core.data.processors import normalize_text
from noterag.utils.logging import get_logger
from noterag.utils.exceptions import ConfigurationError
from noterag.config.settings import RAGConfig, get_config

logger = get_logger(__name__)

WordVectorSource = Callable[[str], Optional[Sequence[float]]]

# Universal POS tags -> weight in the lexical average
POS_WEIGHTS: Dict[str, float] = {
    "NOUN": 2.0,
    "PROPN": 2.0,
    "VERB": 2.0,
    "ADJ": 1.5,
    "ADV": 1.5,
    "PRON": 0.5,
    "ADP": 0.5,
    "CCONJ": 0.5,
    "SCONJ": 0.5,
}
DEFAULT_POS_WEIGHT = 1.0


def l2_normalize(vector: Sequence[float]) -> Optional[List[float]]:
    """
    Scale a vector to unit length.

    Returns:
        Unit vector as a list, or None for an empty, zero or non-finite vector
    """
    array = np.asarray(vector, dtype=np.float64)
    if array.ndim != 1 or array.size == 0 or not np.all(np.isfinite(array)):
        return None
    magnitude = float(np.linalg.norm(array))
    if magnitude == 0.0:
        return None
    return (array / magnitude).tolist()


class EmbeddingProvider(ABC):
    """Abstract capability: text in, unit vector or None out."""

    name: str = "provider"

    @abstractmethod
    def embed(self, text: str) -> Optional[List[float]]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            L2-normalized embedding vector, or None when the text is unscoreable
        """
        pass


class DirectEmbeddingStrategy(EmbeddingProvider):
    """Calls the external embedding model on the whole normalized text."""

    name = "direct"

    def __init__(self, embeddings: Embeddings):
        """
        Initialize direct strategy.

        Args:
            embeddings: LangChain embeddings model
        """
        self.embeddings = embeddings

    def embed(self, text: str) -> Optional[List[float]]:
        cleaned = normalize_text(text)
        if not cleaned:
            return None

        try:
            vector = self.embeddings.embed_query(cleaned)
        except Exception as e:
            logger.warning(f"⚠️ Direct embedding failed for '{cleaned[:50]}': {str(e)}")
            return None

        normalized = l2_normalize(vector) if vector else None
        if normalized is None:
            logger.debug(f"🚫 No usable direct vector for '{cleaned[:50]}'")
        return normalized


class WeightedLexicalStrategy(EmbeddingProvider):
    """
    Part-of-speech weighted average of lemma vectors.

    Each non-punctuation token is lemmatized with spaCy, its lowercased
    lemma looked up in the word-vector source, and the vector weighted by
    the token's POS tag (see ``POS_WEIGHTS``). Tokens without a vector are
    skipped; when none resolve the text is unscoreable.
    """

    name = "weighted_lexical"

    def __init__(
        self,
        nlp: Any,
        word_vectors: WordVectorSource,
        pos_weights: Optional[Dict[str, float]] = None
    ):
        """
        Initialize weighted lexical strategy.

        Args:
            nlp: spaCy pipeline (tagger and lemmatizer used when present)
            word_vectors: Callable mapping a lemma to its vector or None
            pos_weights: Override for the POS weight table
        """
        self.nlp = nlp
        self.word_vectors = word_vectors
        self.pos_weights = pos_weights or POS_WEIGHTS
        # spaCy pipelines are not safe to share across threads
        self._nlp_lock = threading.Lock()

    def weight_for(self, pos: str) -> float:
        return self.pos_weights.get(pos, DEFAULT_POS_WEIGHT)

    def embed(self, text: str) -> Optional[List[float]]:
        cleaned = normalize_text(text)
        if not cleaned:
            return None

        with self._nlp_lock:
            tokens = [
                ((token.lemma_ or token.text).lower(), token.pos_)
                for token in self.nlp(cleaned)
                if not (token.is_punct or token.is_space)
            ]

        total: Optional[np.ndarray] = None
        total_weight = 0.0
        resolved = 0

        for lemma, pos in tokens:
            vector = self.word_vectors(lemma)
            if vector is None or len(vector) == 0:
                continue

            array = np.asarray(vector, dtype=np.float64)
            if total is None:
                total = np.zeros_like(array)
            elif array.shape != total.shape:
                logger.debug(f"📐 Skipping lemma '{lemma}' with dimension {array.shape[0]}")
                continue

            weight = self.weight_for(pos)
            total += array * weight
            total_weight += weight
            resolved += 1

        if total is None or total_weight == 0.0:
            logger.debug(f"🚫 No lemma resolved for '{cleaned[:50]}'")
            return None

        logger.debug(f"🔤 Lexical embedding from {resolved}/{len(tokens)} tokens")
        return l2_normalize(total / total_weight)


class FallbackEmbeddingProvider(EmbeddingProvider):
    """Tries each strategy in order and returns the first usable vector."""

    name = "fallback"

    def __init__(self, strategies: List[EmbeddingProvider]):
        """
        Initialize fallback provider.

        Args:
            strategies: Strategies in order of preference

        Raises:
            ConfigurationError: If no strategy is given
        """
        if not strategies:
            raise ConfigurationError("At least one embedding strategy is required")
        self.strategies = strategies
        self.dimension: Optional[int] = None

        logger.info(f"🤖 Initialized embedding provider with strategies: "
                    f"{[strategy.name for strategy in strategies]}")

    def embed(self, text: str) -> Optional[List[float]]:
        for strategy in self.strategies:
            vector = strategy.embed(text)
            if vector is None:
                continue

            if self.dimension is None:
                self.dimension = len(vector)
            elif len(vector) != self.dimension:
                logger.warning(f"⚠️ Strategy {strategy.name} returned dimension {len(vector)}, "
                               f"expected {self.dimension}")
            return vector

        return None

    def get_provider_info(self) -> Dict[str, Any]:
        """Get provider information."""
        return {
            "strategies": [strategy.name for strategy in self.strategies],
            "dimension": self.dimension
        }


def embeddings_word_vectors(embeddings: Embeddings) -> WordVectorSource:
    """
    Build a lemma lookup backed by the external embedding model.

    Args:
        embeddings: LangChain embeddings model

    Returns:
        Callable returning a lemma's vector, or None if the model fails
    """
    def lookup(lemma: str) -> Optional[Sequence[float]]:
        try:
            return embeddings.embed_query(lemma)
        except Exception as e:
            logger.debug(f"🚫 No vector for lemma '{lemma}': {str(e)}")
            return None

    return lookup


def load_spacy_pipeline(model_name: str) -> Any:
    """
    Load a spaCy pipeline, degrading to a blank English tokenizer.

    Args:
        model_name: Installed spaCy model name (e.g. ``en_core_web_sm``)

    Returns:
        spaCy ``Language`` instance
    """
    import spacy

    try:
        nlp = spacy.load(model_name, disable=["ner", "parser"])
        logger.info(f"🧠 Loaded spaCy model: {model_name}")
        return nlp
    except OSError as e:
        logger.warning(f"⚠️ spaCy model {model_name} unavailable ({str(e)}), "
                       f"using blank English tokenizer without POS weights")
        return spacy.blank("en")


def create_openai_embeddings(config: RAGConfig) -> Optional[Embeddings]:
    """Create the default OpenAI embeddings model, or None without an API key."""
    if not config.openai_api_key:
        logger.warning("⚠️ OPENAI_API_KEY not set, OpenAI embeddings unavailable")
        return None

    from langchain_openai import OpenAIEmbeddings

    return OpenAIEmbeddings(
        model=config.embedding.model_name,
        openai_api_key=config.openai_api_key,
        timeout=config.embedding.timeout
    )


def create_embedding_provider(
    config: Optional[RAGConfig] = None,
    embeddings: Optional[Embeddings] = None,
    nlp: Any = None,
    word_vectors: Optional[WordVectorSource] = None
) -> FallbackEmbeddingProvider:
    """
    Create the embedding provider from configuration.

    Args:
        config: Configuration to use
        embeddings: External embeddings model; OpenAI is used when omitted
        nlp: spaCy pipeline for the lexical fallback
        word_vectors: Lemma vector source; defaults to the external model

    Returns:
        Provider trying the direct strategy, then the lexical fallback

    Raises:
        ConfigurationError: If no embedding strategy can be initialized
    """
    config = config or get_config()

    if embeddings is None:
        try:
            embeddings = create_openai_embeddings(config)
        except Exception as e:
            logger.error(f"❌ Failed to initialize OpenAI embeddings: {str(e)}")
            embeddings = None

    strategies: List[EmbeddingProvider] = []
    if embeddings is not None:
        strategies.append(DirectEmbeddingStrategy(embeddings))

    if config.embedding.enable_fallback:
        source = word_vectors
        if source is None and embeddings is not None:
            source = embeddings_word_vectors(embeddings)
        if source is not None:
            pipeline = nlp if nlp is not None else load_spacy_pipeline(config.embedding.spacy_model)
            strategies.append(WeightedLexicalStrategy(pipeline, source))

    if not strategies:
        raise ConfigurationError("Unable to load embedding model: no external model "
                                 "and no fallback word-vector source configured")

    return FallbackEmbeddingProvider(strategies)
