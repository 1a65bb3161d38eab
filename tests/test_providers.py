import math

import numpy as np
import pytest

from noterag.config.settings import EmbeddingConfig, RAGConfig
from noterag.core.embeddings.providers import (
    DEFAULT_POS_WEIGHT,
    POS_WEIGHTS,
    DirectEmbeddingStrategy,
    FallbackEmbeddingProvider,
    WeightedLexicalStrategy,
    create_embedding_provider,
    embeddings_word_vectors,
    l2_normalize,
)
from noterag.utils.exceptions import ConfigurationError
from tests.conftest import BagOfWordsEmbeddings, FakeTagger, fake_token


WORD_VECTORS = {
    "dog": [1.0, 0.0],
    "the": [0.0, 1.0],
    "run": [0.0, 1.0],
    "wide": [1.0, 0.0, 0.0],
}


@pytest.fixture
def tagger():
    return FakeTagger({
        "the dog.": [
            fake_token("the", "DET", "the"),
            fake_token("dog", "NOUN", "dog"),
            fake_token(".", "PUNCT", ".", is_punct=True),
        ],
        "Dogs run": [
            fake_token("Dogs", "NOUN", "dog"),
            fake_token("run", "VERB", "run"),
        ],
        "zzz qqq": [
            fake_token("zzz", "X", "zzz"),
            fake_token("qqq", "X", "qqq"),
        ],
        "dog wide": [
            fake_token("dog", "NOUN", "dog"),
            fake_token("wide", "ADJ", "wide"),
        ],
    })


@pytest.fixture
def lexical(tagger):
    return WeightedLexicalStrategy(tagger, WORD_VECTORS.get)


def test_l2_normalize():
    assert l2_normalize([3.0, 4.0]) == pytest.approx([0.6, 0.8])
    assert l2_normalize([]) is None
    assert l2_normalize([0.0, 0.0]) is None
    assert l2_normalize([float("nan"), 1.0]) is None


def test_pos_weight_table():
    assert POS_WEIGHTS["NOUN"] == POS_WEIGHTS["PROPN"] == POS_WEIGHTS["VERB"] == 2.0
    assert POS_WEIGHTS["ADJ"] == POS_WEIGHTS["ADV"] == 1.5
    for tag in ("PRON", "ADP", "CCONJ", "SCONJ"):
        assert POS_WEIGHTS[tag] == 0.5
    assert DEFAULT_POS_WEIGHT == 1.0


def test_direct_strategy_returns_unit_vectors(bag_of_words):
    strategy = DirectEmbeddingStrategy(bag_of_words)
    vector = strategy.embed("Swift is a programming language")

    assert vector is not None
    assert np.linalg.norm(vector) == pytest.approx(1.0)


def test_direct_strategy_skips_blank_text(bag_of_words):
    strategy = DirectEmbeddingStrategy(bag_of_words)
    assert strategy.embed("   ") is None
    assert bag_of_words.calls == 0


def test_direct_strategy_failure_is_unscoreable():
    strategy = DirectEmbeddingStrategy(BagOfWordsEmbeddings(fail=True))
    assert strategy.embed("anything") is None


def test_lexical_strategy_weights_by_pos(lexical):
    vector = lexical.embed("the dog.")

    # NOUN weight 2.0 on [1, 0], DET default 1.0 on [0, 1]
    expected = [2 / math.sqrt(5), 1 / math.sqrt(5)]
    assert vector == pytest.approx(expected)


def test_lexical_strategy_uses_lowercased_lemmas(lexical):
    vector = lexical.embed("Dogs run")
    assert vector == pytest.approx([1 / math.sqrt(2), 1 / math.sqrt(2)])


def test_lexical_strategy_without_resolved_lemmas(lexical):
    assert lexical.embed("zzz qqq") is None
    assert lexical.embed("") is None


def test_lexical_strategy_skips_mismatched_dimensions(lexical):
    assert lexical.embed("dog wide") == pytest.approx([1.0, 0.0])


def test_fallback_prefers_first_usable_strategy(bag_of_words, lexical):
    provider = FallbackEmbeddingProvider([DirectEmbeddingStrategy(bag_of_words), lexical])
    vector = provider.embed("the dog.")

    assert vector == pytest.approx(DirectEmbeddingStrategy(bag_of_words).embed("the dog."))
    assert provider.dimension == bag_of_words.dimension


def test_fallback_used_when_direct_fails(lexical):
    provider = FallbackEmbeddingProvider([
        DirectEmbeddingStrategy(BagOfWordsEmbeddings(fail=True)),
        lexical,
    ])
    assert provider.embed("the dog.") == pytest.approx([2 / math.sqrt(5), 1 / math.sqrt(5)])
    assert provider.get_provider_info() == {
        "strategies": ["direct", "weighted_lexical"],
        "dimension": 2,
    }


def test_fallback_returns_none_when_all_strategies_fail(lexical):
    provider = FallbackEmbeddingProvider([
        DirectEmbeddingStrategy(BagOfWordsEmbeddings(fail=True)),
        lexical,
    ])
    assert provider.embed("zzz qqq") is None


def test_fallback_requires_a_strategy():
    with pytest.raises(ConfigurationError):
        FallbackEmbeddingProvider([])


def test_embeddings_word_vectors_swallows_model_errors():
    lookup = embeddings_word_vectors(BagOfWordsEmbeddings(fail=True))
    assert lookup("dog") is None


def test_create_provider_fails_fast_without_any_model():
    config = RAGConfig(openai_api_key=None)
    with pytest.raises(ConfigurationError):
        create_embedding_provider(config)


def test_create_provider_with_both_strategies(bag_of_words, blank_nlp):
    provider = create_embedding_provider(RAGConfig(), embeddings=bag_of_words, nlp=blank_nlp)
    assert [strategy.name for strategy in provider.strategies] == ["direct", "weighted_lexical"]


def test_create_provider_without_fallback(bag_of_words):
    config = RAGConfig(embedding=EmbeddingConfig(enable_fallback=False))
    provider = create_embedding_provider(config, embeddings=bag_of_words)
    assert [strategy.name for strategy in provider.strategies] == ["direct"]


def test_create_provider_with_only_word_vectors(tagger):
    config = RAGConfig(openai_api_key=None)
    provider = create_embedding_provider(config, nlp=tagger, word_vectors=WORD_VECTORS.get)

    assert [strategy.name for strategy in provider.strategies] == ["weighted_lexical"]
    assert provider.embed("Dogs run") is not None
