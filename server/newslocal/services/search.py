"""Cache-first search orchestration.

Every read follows the same contract: look in the cache, and on a miss
fetch from the news API and store what came back. Backend errors
propagate before anything is stored.
"""

import logging

from newslocal.core.validation import normalize_single_line
from newslocal.schemas.search import (
    CacheStatistics,
    NewsResponse,
    SearchFilters,
    TrendingTopic,
)
from newslocal.services.news_backend import NewsBackend
from newslocal.services.search_cache import SearchResultCache

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MIN_SUGGESTION_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 5
DEFAULT_TRENDING_LIMIT = 10
# Largest trending list the API serves; the cache always holds this many
MAX_TRENDING_LIMIT = 50


class SearchService:
    def __init__(self, backend: NewsBackend, cache: SearchResultCache) -> None:
        self.backend = backend
        self.cache = cache

    def search(
        self,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> NewsResponse:
        """Search articles, serving first pages from the cache when fresh.

        Only first pages of the default size are cached. Other pages and
        page sizes always go to the backend.
        """
        query = normalize_single_line(query) or ""
        if filters is not None and filters.is_empty:
            filters = None

        use_cache = page == 1 and limit == DEFAULT_PAGE_SIZE
        if use_cache:
            cached = self.cache.lookup(query, filters)
            if cached is not None:
                return cached

        response = self.backend.search_articles(query, filters, page, limit)
        logger.info(
            "Search for %r returned %d of %d results (page %d)",
            query,
            len(response.articles),
            response.total_results,
            response.page,
        )

        if use_cache:
            self.cache.store(query, filters, response)
        return response

    def suggestions(self, query: str) -> list[str]:
        """Typeahead suggestions for a partial query."""
        query = normalize_single_line(query) or ""
        if len(query) < MIN_SUGGESTION_QUERY_LENGTH:
            return []

        suggestions = self.cache.lookup_suggestions(query)
        if suggestions is None:
            suggestions = self.backend.get_search_suggestions(query)
            self.cache.cache_suggestions(query, suggestions)

        return _dedupe(suggestions)[:MAX_SUGGESTIONS]

    def trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[TrendingTopic]:
        topics = self.cache.lookup_trending()
        if topics is None:
            topics = self.backend.get_trending_topics(MAX_TRENDING_LIMIT)
            self.cache.cache_trending(topics)
        return topics[:limit]

    def cache_statistics(self) -> CacheStatistics:
        return self.cache.statistics()

    def clear_cache(self) -> int:
        return self.cache.clear_all()

    def clear_expired(self) -> int:
        return self.cache.clear_expired()


def _dedupe(items: list[str]) -> list[str]:
    """Drop repeated suggestions (case-insensitive), keeping first occurrence."""
    seen: set[str] = set()
    unique = []
    for item in items:
        marker = item.strip().lower()
        if not marker or marker in seen:
            continue
        seen.add(marker)
        unique.append(item)
    return unique
