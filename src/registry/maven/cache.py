"""Session cache for normalized repositories, metadata and POMs.

Every region stores found values and confirmed absences (``None``). A miss
is fetched exactly once per key: the first caller registers a future and
runs the fetch, every concurrent caller for that key waits on the same
future. A fetch that raises is not cached, so a later call may try again.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar, Union

from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import GroupArtifactVersion, ResolvedGroupArtifactVersion
from .metadata import MavenMetadata
from .pom import Pom
from .repository import MavenRepository

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _NotAttempted:
    _instance: Optional["_NotAttempted"] = None

    def __new__(cls) -> "_NotAttempted":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_ATTEMPTED"


NOT_ATTEMPTED = _NotAttempted()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    entries: int = 0


class SingleFlightCache(Generic[K, V]):
    """Write-once map from key to value-or-absent with one in-flight fetch per key."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._entries: Dict[K, "Future[Optional[V]]"] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: K) -> Union[V, None, _NotAttempted]:
        """Return the cached value, ``None`` for a confirmed absence, or ``NOT_ATTEMPTED``.

        A fetch still in flight counts as not attempted.
        """
        with self._lock:
            future = self._entries.get(key)
        if future is None or not future.done():
            return NOT_ATTEMPTED
        return future.result()

    def put(self, key: K, value: Optional[V]) -> None:
        """Record an outcome unless one is already recorded or in flight."""
        future: "Future[Optional[V]]" = Future()
        future.set_result(value)
        with self._lock:
            self._entries.setdefault(key, future)

    def compute(self, key: K, fetch: Callable[[], Optional[V]]) -> Optional[V]:
        """Return the cached outcome for ``key``, running ``fetch`` at most once concurrently.

        Args:
            key: Cache key.
            fetch: Produces the value, or None when confirmed absent.

        Returns:
            The value, or None when absent.

        Raises:
            Exception: whatever ``fetch`` raised, for the fetching caller and every waiter.
        """
        with self._lock:
            existing = self._entries.get(key)
            if existing is None:
                future: "Future[Optional[V]]" = Future()
                self._entries[key] = future
                self._misses += 1
            else:
                self._hits += 1

        if existing is not None:
            return existing.result()

        if is_debug_enabled(logger):
            logger.debug(
                "Cache miss",
                extra=extra_context(event="cache_miss", component="cache", action="compute", target=self.name),
            )
        try:
            value = fetch()
        except BaseException as e:
            with self._lock:
                self._entries.pop(key, None)
            future.set_exception(e)
            raise
        future.set_result(value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, entries=len(self._entries))


MetadataKey = Tuple[str, GroupArtifactVersion]


class MavenPomCache:
    """The three regions one resolution session shares across its workers."""

    def __init__(self):
        self.normalized_repositories: SingleFlightCache[MavenRepository, MavenRepository] = SingleFlightCache(
            "normalized_repositories"
        )
        self.metadata: SingleFlightCache[MetadataKey, MavenMetadata] = SingleFlightCache("metadata")
        self.poms: SingleFlightCache[ResolvedGroupArtifactVersion, Pom] = SingleFlightCache("poms")

    def regions(self) -> Tuple[SingleFlightCache, ...]:
        return (self.normalized_repositories, self.metadata, self.poms)

    def stats(self) -> Dict[str, CacheStats]:
        return {region.name: region.stats() for region in self.regions()}

    def clear(self) -> None:
        for region in self.regions():
            region.clear()
