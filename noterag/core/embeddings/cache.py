"""
Embedding caching utilities for performance optimization.

Two-tier, content-addressed cache: a bounded in-memory LRU tier in front
of a persistent directory holding one JSON file per entry. Keys are the
SHA-256 hex digest of the whitespace-normalized text.

Writes to the persistent tier are scheduled on a background writer and are
not durable until they land; ``pending_writes`` and ``flush()`` expose that
window explicitly. Lost writes only cost a recomputation.
"""

import os
import json
import shutil
import hashlib
import threading
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Sequence, Set
from noterag.core.data.processors import normalize_text
from noterag.utils.decorators import timing_decorator
from noterag.utils.locks import ReadWriteLock
from noterag.utils.logging import get_logger
from noterag.utils.exceptions import CacheError
from noterag.config.settings import RAGConfig, get_config

logger = get_logger(__name__)

BYTES_PER_FLOAT = 8


def cache_key(text: str) -> str:
    """Generate the content-addressed cache key for a text."""
    return hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()


class MemoryTier:
    """LRU store bounded by item count and total vector bytes."""

    def __init__(self, max_items: int, max_bytes: int):
        if max_items <= 0 or max_bytes <= 0:
            raise ValueError("max_items and max_bytes must be positive")
        self.max_items = max_items
        self.max_bytes = max_bytes
        self._entries: "OrderedDict[str, List[float]]" = OrderedDict()
        self._bytes = 0
        self._lock = threading.Lock()

    @staticmethod
    def _size_of(vector: Sequence[float]) -> int:
        return len(vector) * BYTES_PER_FLOAT

    def get(self, key: str) -> Optional[List[float]]:
        with self._lock:
            vector = self._entries.get(key)
            if vector is not None:
                self._entries.move_to_end(key)
            return vector

    def put(self, key: str, vector: List[float]) -> None:
        size = self._size_of(vector)
        if size > self.max_bytes:
            logger.debug(f"📏 Entry of {size} bytes exceeds memory tier limit, not retained")
            return

        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._bytes -= self._size_of(previous)

            self._entries[key] = vector
            self._bytes += size

            while len(self._entries) > self.max_items or self._bytes > self.max_bytes:
                _, evicted = self._entries.popitem(last=False)
                self._bytes -= self._size_of(evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._bytes = 0

    @property
    def bytes_used(self) -> int:
        return self._bytes

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PersistentTier:
    """One file per key in a dedicated directory; content is a JSON array."""

    def __init__(self, directory: str):
        self.directory = directory
        self._lock = ReadWriteLock()
        self._ensure_cache_dir()

    def _ensure_cache_dir(self) -> None:
        """Ensure cache directory exists."""
        os.makedirs(self.directory, exist_ok=True)

    def _get_cache_path(self, key: str) -> str:
        """Get cache file path for a key."""
        return os.path.join(self.directory, key)

    def read(self, key: str) -> Optional[List[float]]:
        """Read an entry; unreadable or malformed files count as a miss."""
        path = self._get_cache_path(key)
        with self._lock.read_locked():
            if not os.path.exists(path):
                return None
            try:
                with open(path, "r") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"⚠️ Cache read error for {key[:12]}: {str(e)}")
                return None

        if not isinstance(data, list) or not data or not all(
            isinstance(value, (int, float)) for value in data
        ):
            logger.warning(f"⚠️ Malformed cache entry {key[:12]}, ignoring")
            return None
        return [float(value) for value in data]

    def write(self, key: str, vector: List[float]) -> None:
        """Write an entry through a temporary file so readers never see partial content."""
        path = self._get_cache_path(key)
        tmp_path = f"{path}.{threading.get_ident()}.tmp"
        with self._lock.write_locked():
            try:
                self._ensure_cache_dir()
                with open(tmp_path, "w") as f:
                    json.dump(vector, f)
                os.replace(tmp_path, path)
            except OSError as e:
                logger.warning(f"⚠️ Cache write error for {key[:12]}: {str(e)}")
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)

    def clear(self) -> None:
        """Delete the cache directory and recreate it empty."""
        with self._lock.write_locked():
            try:
                if os.path.exists(self.directory):
                    shutil.rmtree(self.directory)
                self._ensure_cache_dir()
            except OSError as e:
                raise CacheError(f"Failed to clear cache directory {self.directory}: {str(e)}") from e

    def entry_files(self) -> List[str]:
        with self._lock.read_locked():
            if not os.path.exists(self.directory):
                return []
            return [name for name in os.listdir(self.directory) if not name.endswith(".tmp")]

    def size_bytes(self) -> int:
        return sum(
            os.path.getsize(os.path.join(self.directory, name))
            for name in self.entry_files()
        )


class EmbeddingCache:
    """Two-tier content-addressed cache for embeddings."""

    def __init__(
        self,
        config: Optional[RAGConfig] = None,
        cache_dir: Optional[str] = None,
        memory_max_items: Optional[int] = None,
        memory_max_bytes: Optional[int] = None,
        persistent: Optional[bool] = None
    ):
        """
        Initialize embedding cache.

        Args:
            config: Configuration providing defaults
            cache_dir: Directory for the persistent tier
            memory_max_items: Item limit of the memory tier
            memory_max_bytes: Byte limit of the memory tier
            persistent: Whether to use the persistent tier at all
        """
        self.config = config or get_config()
        cache_config = self.config.cache
        self.cache_dir = cache_dir or cache_config.directory

        self.memory = MemoryTier(
            memory_max_items or cache_config.memory_max_items,
            memory_max_bytes or cache_config.memory_max_bytes
        )

        self.persistent: Optional[PersistentTier] = None
        use_persistent = cache_config.persistent_enabled if persistent is None else persistent
        if use_persistent:
            try:
                self.persistent = PersistentTier(self.cache_dir)
            except OSError as e:
                logger.warning(f"⚠️ Persistent cache unavailable at {self.cache_dir}, "
                               f"using memory only: {str(e)}")

        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="noterag-cache-writer")
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()
        self._stats = {"memory_hits": 0, "persistent_hits": 0, "misses": 0}
        self._stats_lock = threading.Lock()

        logger.info(f"💾 Initialized embedding cache: {self.cache_dir if self.persistent else 'memory only'}")

    def _count(self, stat: str) -> None:
        with self._stats_lock:
            self._stats[stat] += 1

    def get(self, text: str) -> Optional[List[float]]:
        """
        Get embedding from cache.

        Args:
            text: Text that was embedded

        Returns:
            Cached embedding or None if not found
        """
        key = cache_key(text)

        vector = self.memory.get(key)
        if vector is not None:
            self._count("memory_hits")
            logger.debug(f"🎯 Memory cache hit for text: {text[:50]}...")
            return vector

        if self.persistent is not None:
            vector = self.persistent.read(key)
            if vector is not None:
                self._count("persistent_hits")
                self.memory.put(key, vector)
                logger.debug(f"🎯 Disk cache hit for text: {text[:50]}...")
                return vector

        self._count("misses")
        return None

    def put(self, text: str, embedding: Sequence[float]) -> None:
        """
        Store embedding in cache.

        The memory tier is updated before returning; the persistent write is
        scheduled and lands later (see ``flush``).

        Args:
            text: Text that was embedded
            embedding: Embedding vector to cache
        """
        key = cache_key(text)
        vector = [float(value) for value in embedding]
        self.memory.put(key, vector)

        if self.persistent is None:
            return

        try:
            future = self._writer.submit(self.persistent.write, key, vector)
        except RuntimeError as e:
            logger.warning(f"⚠️ Cache writer unavailable, entry kept in memory only: {str(e)}")
            return

        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._write_done)
        logger.debug(f"💾 Cached embedding for text: {text[:50]}...")

    def _write_done(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)
        if future.exception() is not None:
            logger.warning(f"⚠️ Background cache write failed: {future.exception()}")

    @property
    def pending_writes(self) -> int:
        """Number of scheduled persistent writes that have not landed yet."""
        with self._pending_lock:
            return sum(1 for future in self._pending if not future.done())

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for scheduled persistent writes to land.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            True if no writes remain pending
        """
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)
        return self.pending_writes == 0

    @timing_decorator
    def clear(self) -> None:
        """
        Clear both tiers.

        Raises:
            CacheError: If the persistent directory cannot be reset
        """
        self.flush()
        self.memory.clear()
        if self.persistent is not None:
            self.persistent.clear()
        logger.info("🗑️ Embedding cache cleared")

    def close(self) -> None:
        """Flush pending writes and stop the background writer."""
        self.flush()
        self._writer.shutdown(wait=True)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._stats_lock:
            stats: Dict[str, Any] = dict(self._stats)

        stats.update({
            "cache_dir": self.cache_dir if self.persistent else None,
            "memory_entries": len(self.memory),
            "memory_bytes": self.memory.bytes_used,
            "pending_writes": self.pending_writes,
        })

        if self.persistent is not None:
            try:
                stats["cached_embeddings"] = len(self.persistent.entry_files())
                stats["cache_size_mb"] = self.persistent.size_bytes() / (1024 * 1024)
            except OSError as e:
                logger.warning(f"⚠️ Cache stats error: {str(e)}")
                stats["error"] = str(e)

        return stats
