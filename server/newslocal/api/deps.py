from functools import lru_cache

from fastapi import Depends

from newslocal.services.news_backend import NewsBackend, NewsBackendClient
from newslocal.services.search import SearchService
from newslocal.services.search_cache import SearchResultCache, get_search_cache


@lru_cache
def get_news_backend() -> NewsBackend:
    return NewsBackendClient.from_settings()


def get_cache() -> SearchResultCache:
    return get_search_cache()


def get_search_service(
    backend: NewsBackend = Depends(get_news_backend),
    cache: SearchResultCache = Depends(get_cache),
) -> SearchService:
    return SearchService(backend=backend, cache=cache)
