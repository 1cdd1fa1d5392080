"""Request-coalescing cache for OGP fetches."""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from linkbox_ogp.fetchers.base import OgpFetcher
from linkbox_ogp.models.ogp import FetchOutcome

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 600.0


class EntryState(str, Enum):
    """Lifecycle of a cache entry."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class CacheEntry:
    """One URL's fetch, shared by every caller that asked for it."""

    url: str
    future: "asyncio.Future[FetchOutcome]"
    inserted_at: float
    state: EntryState = EntryState.PENDING
    subscribers: int = 0
    completed_at: float | None = None
    # Set when invalidated mid-fetch: keep coalescing, drop on settlement
    discard: bool = False

    @property
    def value(self) -> FetchOutcome | None:
        """Return the settled outcome, or None while pending."""
        if self.state is EntryState.PENDING:
            return None
        return self.future.result()


class OgpRequestCache:
    """
    Coalescing TTL cache in front of an OgpFetcher.

    The first ``get`` for a URL starts the fetch and stores a pending entry;
    every later ``get`` before it settles waits on the same future, so there
    is at most one in-flight fetch per URL. Settled outcomes, failures
    included, are served for ``ttl_seconds`` after completion.

    Not thread-safe. The check-then-create in ``get`` has no await in it, which
    is all the atomicity a single event loop needs.
    """

    def __init__(
        self,
        fetcher: OgpFetcher,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int | None = 1000,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            fetcher: Fetcher invoked on a cache miss
            ttl_seconds: How long a settled outcome is served
            max_size: Maximum entries kept (None for unbounded)
            enabled: Whether caching is enabled; disabled means pass-through
            clock: Monotonic time source in seconds
        """
        self.fetcher = fetcher
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.enabled = enabled
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._tasks: set[asyncio.Task[None]] = set()

    def _is_expired(self, entry: CacheEntry) -> bool:
        """Check if a settled entry has outlived the TTL."""
        if entry.completed_at is None:
            return False
        return self._clock() - entry.completed_at >= self.ttl_seconds

    async def get(self, url: str) -> FetchOutcome:
        """
        Get the outcome for a URL, fetching it at most once per TTL window.

        Args:
            url: URL to resolve

        Returns:
            The shared FetchOutcome; every concurrent caller gets the same object
        """
        if not self.enabled:
            return await self.fetcher.fetch(url)

        entry = self._lookup(url)
        if entry is None:
            entry = self._start(url)
        elif entry.state is not EntryState.PENDING:
            logger.debug("ogp_cache_hit", url=url, state=entry.state.value)
            return entry.future.result()
        else:
            logger.debug("ogp_cache_join", url=url, subscribers=entry.subscribers + 1)

        entry.subscribers += 1
        # A caller giving up must not cancel the fetch other callers share
        return await asyncio.shield(entry.future)

    def _lookup(self, url: str) -> CacheEntry | None:
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self._is_expired(entry):
            del self._entries[url]
            logger.debug("ogp_cache_expired", url=url)
            return None
        self._entries.move_to_end(url)
        return entry

    def _start(self, url: str) -> CacheEntry:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[FetchOutcome] = loop.create_future()
        # Mark exceptions as retrieved when every waiter has gone away
        future.add_done_callback(lambda f: f.cancelled() or f.exception())

        entry = CacheEntry(url=url, future=future, inserted_at=self._clock())
        self._entries[url] = entry
        self._evict_overflow()

        task = loop.create_task(self._run(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("ogp_cache_miss", url=url)
        return entry

    async def _run(self, entry: CacheEntry) -> None:
        try:
            outcome = await self.fetcher.fetch(entry.url)
        except asyncio.CancelledError:
            self._drop(entry)
            entry.future.cancel()
            raise
        except Exception as e:
            logger.exception("ogp_cache_fetch_error", url=entry.url, error=str(e))
            self._drop(entry)
            entry.future.set_exception(e)
            return

        entry.state = EntryState.RESOLVED if outcome.ok else EntryState.FAILED
        entry.completed_at = self._clock()
        if entry.discard:
            self._drop(entry)
        entry.future.set_result(outcome)

    def _drop(self, entry: CacheEntry) -> None:
        """Remove an entry unless it has already been replaced."""
        if self._entries.get(entry.url) is entry:
            del self._entries[entry.url]

    def _evict_overflow(self) -> None:
        """Evict the least recently used settled entries beyond max_size."""
        if self.max_size is None:
            return
        while len(self._entries) > self.max_size:
            victim = next(
                (
                    key
                    for key, entry in self._entries.items()
                    if entry.state is not EntryState.PENDING
                ),
                None,
            )
            if victim is None:
                break
            del self._entries[victim]

    async def invalidate(self, url: str) -> bool:
        """
        Remove a URL's entry so the next get refetches it.

        A fetch still running is not restarted: callers arriving before it
        settles still join it, and its outcome is dropped instead of stored.

        Returns:
            True if an entry was removed or marked, False if none existed
        """
        entry = self._entries.get(url)
        if entry is None:
            return False
        if entry.state is EntryState.PENDING:
            entry.discard = True
        else:
            del self._entries[url]
        logger.debug("ogp_cache_invalidated", url=url, state=entry.state.value)
        return True

    async def clear(self) -> None:
        """Remove every settled entry and mark running fetches for discard."""
        for url in list(self._entries):
            await self.invalidate(url)

    async def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        expired = [url for url, entry in self._entries.items() if self._is_expired(entry)]
        for url in expired:
            del self._entries[url]
        return len(expired)

    def peek(self, url: str) -> CacheEntry | None:
        """Return the entry for a URL without touching recency or expiry."""
        return self._entries.get(url)

    @property
    def size(self) -> int:
        """Return current cache size."""
        return len(self._entries)

    @property
    def in_flight(self) -> int:
        """Return the number of fetches still running."""
        return sum(1 for entry in self._entries.values() if entry.state is EntryState.PENDING)

    async def close(self) -> None:
        """Wait for running fetches, then drop every entry."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._entries.clear()
