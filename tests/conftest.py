"""
Pytest configuration and fixtures.

Provides deterministic stand-ins for the external models so the suite runs
without network access or downloaded spaCy models.
"""

import hashlib
import re
import threading
import time
from types import SimpleNamespace
from typing import Dict, List, Optional, Sequence

import pytest
import spacy
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from noterag.config.settings import CacheConfig, RAGConfig
from noterag.core.embeddings.providers import EmbeddingProvider
from noterag.core.system.rag_system import NoteRAG

_TOKEN_RE = re.compile(r"[a-z0-9]+")


class BagOfWordsEmbeddings(Embeddings):
    """Hashes lowercased alphanumeric tokens into a fixed-size count vector."""

    def __init__(self, dimension: int = 1024, fail: bool = False):
        self.dimension = dimension
        self.fail = fail
        self.calls = 0
        self._lock = threading.Lock()

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for token in _TOKEN_RE.findall(text.lower()):
            bucket = int(hashlib.sha256(token.encode("utf-8")).hexdigest(), 16) % self.dimension
            vector[bucket] += 1.0
        return vector

    def embed_query(self, text: str) -> List[float]:
        with self._lock:
            self.calls += 1
        if self.fail:
            raise RuntimeError("embedding service unavailable")
        return self._vector(text)

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_query(text) for text in texts]


class SlowProvider(EmbeddingProvider):
    """Provider with per-text delays, used to force out-of-order completion."""

    name = "slow"

    def __init__(self, delays: Optional[Dict[str, float]] = None, default_delay: float = 0.0):
        self.delays = delays or {}
        self.default_delay = default_delay
        self.active = 0
        self.peak_active = 0
        self._lock = threading.Lock()

    def embed(self, text: str) -> Optional[List[float]]:
        with self._lock:
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
        try:
            time.sleep(self.delays.get(text, self.default_delay))
            if "unscoreable" in text:
                return None
            return [1.0, float(len(text) % 7 + 1)]
        finally:
            with self._lock:
                self.active -= 1


def fake_token(text: str, pos: str, lemma: str = "", is_punct: bool = False):
    return SimpleNamespace(text=text, lemma_=lemma, pos_=pos, is_punct=is_punct, is_space=False)


class FakeTagger:
    """Callable returning pre-tagged tokens for known sentences."""

    def __init__(self, tagged: Dict[str, Sequence[SimpleNamespace]]):
        self.tagged = tagged

    def __call__(self, text: str):
        return list(self.tagged.get(text, []))


@pytest.fixture
def bag_of_words():
    return BagOfWordsEmbeddings()


@pytest.fixture
def blank_nlp():
    return spacy.blank("en")


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "embeddings")


@pytest.fixture
def config(cache_dir):
    return RAGConfig(
        cache=CacheConfig(directory=cache_dir),
        openai_api_key=None
    )


@pytest.fixture
def fake_llm():
    return FakeListChatModel(responses=["Swift was created by Apple."])


@pytest.fixture
def rag(config, bag_of_words, blank_nlp, fake_llm):
    system = NoteRAG(config=config, embeddings=bag_of_words, llm=fake_llm, nlp=blank_nlp)
    yield system
    system.close()
