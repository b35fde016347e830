import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from newslocal.api.deps import get_search_service
from newslocal.core.admin_auth import verify_admin_api_key
from newslocal.core.config import get_settings
from newslocal.core.rate_limit import limiter
from newslocal.core.validation import parse_id_list
from newslocal.schemas.common import CacheClearResponse
from newslocal.schemas.search import (
    CacheStatistics,
    NewsCategory,
    NewsResponse,
    NewsSource,
    SearchFilters,
    SortOption,
    SortOrder,
    TrendingTopic,
)
from newslocal.services.news_backend import NewsBackendError
from newslocal.services.search import DEFAULT_PAGE_SIZE, MAX_TRENDING_LIMIT, SearchService

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

UNAVAILABLE_DETAIL = "News search is currently unavailable"


def get_search_filters(
    categories: str | None = Query(None, max_length=500),
    sources: str | None = Query(None, max_length=500),
    sort_by: SortOption | None = None,
    sort_order: SortOrder | None = None,
    language: str | None = Query(None, min_length=2, max_length=8),
    country: str | None = Query(None, min_length=2, max_length=8),
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> SearchFilters | None:
    """Build a filter set from query parameters; None when nothing is set."""
    category_ids = parse_id_list(categories)
    source_ids = parse_id_list(sources)
    filters = SearchFilters(
        categories=[NewsCategory.from_id(c) for c in category_ids] if category_ids else None,
        sources=[NewsSource(id=s, name=s) for s in source_ids] if source_ids else None,
        sort_by=sort_by,
        sort_order=sort_order,
        language=language,
        country=country,
        date_from=date_from,
        date_to=date_to,
    )
    return None if filters.is_empty else filters


@router.get("", response_model=NewsResponse)
@limiter.limit(lambda: f"{settings.search_rate_limit_per_minute}/minute")
def search(
    request: Request,
    q: str = Query("", max_length=200),
    page: int = Query(1, ge=1, le=500),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    filters: SearchFilters | None = Depends(get_search_filters),
    service: SearchService = Depends(get_search_service),
) -> NewsResponse:
    try:
        return service.search(q, filters, page=page, limit=limit)
    except NewsBackendError as e:
        logger.warning("Search failed for %r: %s", q, e.message)
        raise HTTPException(status_code=502, detail=UNAVAILABLE_DETAIL) from e


@router.get("/suggestions", response_model=list[str])
@limiter.limit(lambda: f"{settings.search_rate_limit_per_minute}/minute")
def suggestions(
    request: Request,
    q: str = Query("", max_length=200),
    service: SearchService = Depends(get_search_service),
) -> list[str]:
    try:
        return service.suggestions(q)
    except NewsBackendError as e:
        raise HTTPException(status_code=502, detail=UNAVAILABLE_DETAIL) from e


@router.get("/trending", response_model=list[TrendingTopic])
def trending(
    limit: int = Query(10, ge=1, le=MAX_TRENDING_LIMIT),
    service: SearchService = Depends(get_search_service),
) -> list[TrendingTopic]:
    try:
        return service.trending(limit)
    except NewsBackendError as e:
        raise HTTPException(status_code=502, detail=UNAVAILABLE_DETAIL) from e


@router.get("/cache/stats", response_model=CacheStatistics)
def cache_stats(service: SearchService = Depends(get_search_service)) -> CacheStatistics:
    return service.cache_statistics()


@router.delete(
    "/cache",
    response_model=CacheClearResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
def clear_search_cache(service: SearchService = Depends(get_search_service)) -> CacheClearResponse:
    """Clear all cached results, suggestions and trending topics (admin only)."""
    count = service.clear_cache()
    return CacheClearResponse(message=f"Cleared {count} cached search results", cleared=count)


@router.post(
    "/cache/clear-expired",
    response_model=CacheClearResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
def clear_expired_search_cache(
    service: SearchService = Depends(get_search_service),
) -> CacheClearResponse:
    """Drop expired result pages only (admin only)."""
    count = service.clear_expired()
    return CacheClearResponse(message=f"Cleared {count} expired search results", cleared=count)
