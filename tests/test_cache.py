import json
import os
import threading

import pytest

from noterag.core.embeddings.cache import (
    EmbeddingCache,
    MemoryTier,
    PersistentTier,
    cache_key,
)
from noterag.core.embeddings.cached import CachedEmbedder
from noterag.core.embeddings.providers import DirectEmbeddingStrategy
from noterag.utils.exceptions import CacheError


@pytest.fixture
def cache(config):
    embedding_cache = EmbeddingCache(config)
    yield embedding_cache
    embedding_cache.close()


def test_cache_key_is_normalized_sha256():
    assert cache_key("hello   world") == cache_key(" hello world\n")
    assert len(cache_key("hello")) == 64
    assert cache_key("hello") != cache_key("world")


def test_put_then_get_from_memory(cache):
    cache.put("Swift is fast", [0.6, 0.8])

    assert cache.get("Swift is fast") == [0.6, 0.8]
    assert cache.get("  Swift   is fast ") == [0.6, 0.8]
    assert cache.get_stats()["memory_hits"] == 2


def test_miss_is_counted(cache):
    assert cache.get("never stored") is None
    assert cache.get_stats()["misses"] == 1


def test_persistent_entry_layout(cache, cache_dir):
    cache.put("Swift is fast", [0.6, 0.8])
    assert cache.flush(timeout=5)

    path = os.path.join(cache_dir, cache_key("Swift is fast"))
    with open(path) as f:
        assert json.load(f) == [0.6, 0.8]


def test_persistent_hit_promotes_to_memory(config, cache_dir):
    writer = EmbeddingCache(config)
    writer.put("Swift is fast", [0.6, 0.8])
    writer.close()

    reader = EmbeddingCache(config)
    try:
        assert reader.get("Swift is fast") == [0.6, 0.8]
        assert reader.get("Swift is fast") == [0.6, 0.8]

        stats = reader.get_stats()
        assert stats["persistent_hits"] == 1
        assert stats["memory_hits"] == 1
        assert stats["cached_embeddings"] == 1
    finally:
        reader.close()


def test_persistent_write_window_is_observable(cache, cache_dir, monkeypatch):
    release = threading.Event()
    original_write = PersistentTier.write

    def gated_write(self, key, vector):
        release.wait(timeout=5)
        original_write(self, key, vector)

    monkeypatch.setattr(PersistentTier, "write", gated_write)

    cache.put("pending entry", [1.0, 0.0])
    path = os.path.join(cache_dir, cache_key("pending entry"))

    assert cache.get("pending entry") == [1.0, 0.0]
    assert cache.pending_writes == 1
    assert not os.path.exists(path)

    release.set()
    assert cache.flush(timeout=5)
    assert cache.pending_writes == 0
    assert os.path.exists(path)


def test_corrupt_entry_is_a_miss(cache, cache_dir):
    with open(os.path.join(cache_dir, cache_key("broken")), "w") as f:
        f.write("{not json")
    with open(os.path.join(cache_dir, cache_key("wrong shape")), "w") as f:
        json.dump({"vector": [1.0]}, f)

    assert cache.get("broken") is None
    assert cache.get("wrong shape") is None


def test_clear_empties_both_tiers(cache, cache_dir):
    cache.put("one", [1.0, 0.0])
    cache.put("two", [0.0, 1.0])
    cache.clear()

    assert os.path.isdir(cache_dir)
    assert os.listdir(cache_dir) == []
    assert cache.get("one") is None
    assert cache.get("two") is None


def test_clear_failure_raises_cache_error(cache, monkeypatch):
    def broken_rmtree(path):
        raise OSError("permission denied")

    monkeypatch.setattr("noterag.core.embeddings.cache.shutil.rmtree", broken_rmtree)
    with pytest.raises(CacheError):
        cache.clear()


def test_memory_only_cache(config, cache_dir):
    memory_only = EmbeddingCache(config, cache_dir=os.path.join(cache_dir, "unused"), persistent=False)
    try:
        memory_only.put("text", [1.0])
        assert memory_only.get("text") == [1.0]
        assert memory_only.pending_writes == 0
        assert not os.path.exists(os.path.join(cache_dir, "unused"))
    finally:
        memory_only.close()


class TestMemoryTier:

    def test_evicts_least_recently_used_by_count(self):
        tier = MemoryTier(max_items=2, max_bytes=1024)
        tier.put("a", [1.0])
        tier.put("b", [2.0])
        assert tier.get("a") == [1.0]
        tier.put("c", [3.0])

        assert "a" in tier
        assert "b" not in tier
        assert "c" in tier

    def test_evicts_by_bytes(self):
        tier = MemoryTier(max_items=10, max_bytes=64)
        tier.put("a", [1.0] * 4)
        tier.put("b", [1.0] * 4)
        tier.put("c", [1.0] * 4)

        assert len(tier) == 2
        assert "a" not in tier
        assert tier.bytes_used == 64

    def test_oversize_entry_not_retained(self):
        tier = MemoryTier(max_items=10, max_bytes=16)
        tier.put("big", [1.0] * 3)
        assert "big" not in tier
        assert tier.bytes_used == 0

    def test_replacing_entry_updates_bytes(self):
        tier = MemoryTier(max_items=10, max_bytes=1024)
        tier.put("a", [1.0] * 4)
        tier.put("a", [1.0] * 2)
        assert tier.bytes_used == 16

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValueError):
            MemoryTier(max_items=0, max_bytes=10)


class TestCachedEmbedder:

    def test_second_lookup_skips_the_model(self, cache, bag_of_words):
        embedder = CachedEmbedder(DirectEmbeddingStrategy(bag_of_words), cache)

        first = embedder.embed("Swift is fast")
        second = embedder.embed("Swift  is fast")

        assert first == second
        assert bag_of_words.calls == 1

    def test_unscoreable_text_is_not_cached(self, cache, bag_of_words):
        embedder = CachedEmbedder(DirectEmbeddingStrategy(bag_of_words), cache)

        assert embedder.embed("?!") is None
        assert embedder.embed("?!") is None
        assert bag_of_words.calls == 2

    @pytest.mark.asyncio
    async def test_async_lookup(self, cache, bag_of_words):
        embedder = CachedEmbedder(DirectEmbeddingStrategy(bag_of_words), cache)
        assert await embedder.aembed("Swift is fast") == embedder.embed("Swift is fast")
