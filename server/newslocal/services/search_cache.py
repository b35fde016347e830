"""In-memory cache for search result pages, suggestions and trending topics.

Result pages are keyed by normalized query text plus the active filter
dimensions. Entries expire after a fixed TTL (checked lazily on lookup) and
the store is bounded by entry count, evicting the least recently accessed
entry first. Suggestions and trending topics never expire and are simply
overwritten.

Nothing here performs I/O. One lock guards every operation so the result
map and the recency map are always modified together.
"""

import copy
import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from newslocal.core.config import get_settings
from newslocal.core.time import Clock, utcnow
from newslocal.schemas.search import (
    CacheStatistics,
    NewsResponse,
    SearchFilters,
    TrendingTopic,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100
DEFAULT_TTL_SECONDS = 300
DEFAULT_BYTES_PER_RESULT = 1024
DEFAULT_BYTES_PER_SUGGESTION = 50

KEY_SEPARATOR = "|"
ID_SEPARATOR = ","
# Backslash first so escapes added below are not escaped twice
_KEY_ESCAPES = (("\\", "\\\\"), (KEY_SEPARATOR, "\\|"), (ID_SEPARATOR, "\\,"), (":", "\\:"))


def _escape(value: str) -> str:
    """Backslash-escape key delimiters so user text can't forge a component."""
    for raw, escaped in _KEY_ESCAPES:
        value = value.replace(raw, escaped)
    return value


def _join_ids(ids: Iterable[str]) -> str:
    return ID_SEPARATOR.join(_escape(i) for i in sorted(ids))


def generate_cache_key(query: str, filters: SearchFilters | None = None) -> str:
    """Build the deterministic cache key for a query and filter set.

    Id lists are sorted so that the input order of categories and sources
    does not matter. Filters that are None or empty map to the bare query.
    Delimiters inside the query, ids and free-text filters are escaped, so
    distinct (query, filters) pairs never share a key.
    """
    components = [_escape(query.strip().lower())]

    if filters is None or filters.is_empty:
        return components[0]

    if filters.categories:
        components.append(f"categories:{_join_ids(c.id for c in filters.categories)}")
    if filters.sources:
        components.append(f"sources:{_join_ids(s.id for s in filters.sources)}")
    if filters.sort_by is not None:
        components.append(f"sort:{filters.sort_by.value}")
    if filters.sort_order is not None:
        components.append(f"order:{filters.sort_order.value}")
    # Remaining dimensions also change the upstream result set
    if filters.language is not None:
        components.append(f"language:{_escape(filters.language.lower())}")
    if filters.country is not None:
        components.append(f"country:{_escape(filters.country.lower())}")
    if filters.date_from is not None:
        components.append(f"from:{filters.date_from.isoformat()}")
    if filters.date_to is not None:
        components.append(f"to:{filters.date_to.isoformat()}")

    return KEY_SEPARATOR.join(components)


@dataclass
class CacheEntry:
    """A cached result page and the time it was stored."""

    response: NewsResponse
    created_at: datetime
    ttl: timedelta

    def is_expired(self, now: datetime) -> bool:
        return now - self.created_at > self.ttl


class SearchResultCache:
    """Result, suggestion and trending-topic cache for the search service."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        bytes_per_result: int = DEFAULT_BYTES_PER_RESULT,
        bytes_per_suggestion: int = DEFAULT_BYTES_PER_SUGGESTION,
        clock: Clock = utcnow,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl = timedelta(seconds=ttl_seconds)
        self.bytes_per_result = bytes_per_result
        self.bytes_per_suggestion = bytes_per_suggestion
        self._clock = clock

        self._results: dict[str, CacheEntry] = {}
        # Insertion order doubles as the tie-break for equal access times
        self._access_times: OrderedDict[str, datetime] = OrderedDict()
        self._suggestions: dict[str, list[str]] = {}
        self._trending: list[TrendingTopic] = []
        self._trending_set = False
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    # -- result pages -------------------------------------------------------

    def lookup(self, query: str, filters: SearchFilters | None = None) -> NewsResponse | None:
        """Return the cached page for (query, filters), or None on a miss.

        Expired entries are dropped here and reported as misses.
        """
        key = generate_cache_key(query, filters)
        with self._lock:
            entry = self._results.get(key)
            if entry is None:
                self._misses += 1
                logger.debug("Search cache miss for %r", key)
                return None

            now = self._clock()
            if entry.is_expired(now):
                self._remove(key)
                self._misses += 1
                logger.debug("Search cache entry expired for %r", key)
                return None

            self._touch(key, now)
            self._hits += 1
            logger.debug("Search cache hit for %r", key)
            return copy.deepcopy(entry.response)

    def store(
        self, query: str, filters: SearchFilters | None, response: NewsResponse
    ) -> None:
        """Cache a successfully fetched page, evicting LRU entries past max_entries."""
        key = generate_cache_key(query, filters)
        with self._lock:
            now = self._clock()
            self._results[key] = CacheEntry(
                response=copy.deepcopy(response), created_at=now, ttl=self.ttl
            )
            self._touch(key, now)
            self._evict_overflow()

    def clear_expired(self) -> int:
        """Remove every expired result entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._results.items() if entry.is_expired(now)]
            for key in expired:
                self._remove(key)
        if expired:
            logger.info("Removed %d expired search cache entries", len(expired))
        return len(expired)

    def clear_all(self) -> int:
        """Empty every store and reset the hit/miss counters.

        Returns the number of result pages removed.
        """
        with self._lock:
            removed = len(self._results)
            self._results.clear()
            self._access_times.clear()
            self._suggestions.clear()
            self._trending = []
            self._trending_set = False
            self._hits = 0
            self._misses = 0
        logger.info("Search cache cleared (%d result pages)", removed)
        return removed

    # -- suggestions --------------------------------------------------------

    def cache_suggestions(self, query: str, suggestions: list[str]) -> None:
        with self._lock:
            self._suggestions[query] = list(suggestions)

    def lookup_suggestions(self, query: str) -> list[str] | None:
        with self._lock:
            suggestions = self._suggestions.get(query)
            return list(suggestions) if suggestions is not None else None

    # -- trending topics ----------------------------------------------------

    def cache_trending(self, topics: list[TrendingTopic]) -> None:
        with self._lock:
            self._trending = copy.deepcopy(list(topics))
            self._trending_set = True

    def lookup_trending(self) -> list[TrendingTopic] | None:
        """Return cached trending topics.

        A cached empty list is returned as ``[]``; None means the list was
        never cached (or has been cleared since).
        """
        with self._lock:
            if not self._trending_set:
                return None
            return copy.deepcopy(self._trending)

    # -- statistics ---------------------------------------------------------

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._results)

    def statistics(self) -> CacheStatistics:
        with self._lock:
            total_lookups = self._hits + self._misses
            hit_rate = self._hits / total_lookups if total_lookups else 0.0
            suggestion_strings = sum(len(s) for s in self._suggestions.values())
            memory = (
                len(self._results) * self.bytes_per_result
                + suggestion_strings * self.bytes_per_suggestion
            )
            return CacheStatistics(
                total_entries=len(self._results),
                suggestions_entries=len(self._suggestions),
                trending_present=self._trending_set,
                hit_rate=hit_rate,
                hits=self._hits,
                misses=self._misses,
                size=len(self._results),
                max_size=self.max_entries,
                estimated_memory_bytes=memory,
            )

    # -- internals (caller holds the lock) ----------------------------------

    def _touch(self, key: str, now: datetime) -> None:
        self._access_times[key] = now
        self._access_times.move_to_end(key)

    def _remove(self, key: str) -> None:
        self._results.pop(key, None)
        self._access_times.pop(key, None)

    def _evict_overflow(self) -> None:
        overflow = len(self._results) - self.max_entries
        if overflow <= 0:
            return
        # sorted() is stable, so equal timestamps keep recency-map order
        oldest = sorted(self._access_times.items(), key=lambda item: item[1])[:overflow]
        for key, _ in oldest:
            self._remove(key)
            logger.debug("Evicted search cache entry %r", key)


_cache: SearchResultCache | None = None
_cache_lock = threading.Lock()


def get_search_cache() -> SearchResultCache:
    """Get the process-wide cache, building it from settings on first use."""
    global _cache
    if _cache is not None:
        return _cache
    with _cache_lock:
        if _cache is None:
            settings = get_settings()
            _cache = SearchResultCache(
                max_entries=settings.search_cache_max_entries,
                ttl_seconds=settings.search_cache_ttl_seconds,
                bytes_per_result=settings.search_cache_bytes_per_result,
                bytes_per_suggestion=settings.search_cache_bytes_per_suggestion,
            )
    return _cache


def reset_search_cache() -> None:
    """Drop the process-wide cache so the next access rebuilds it."""
    global _cache
    with _cache_lock:
        _cache = None
