from newslocal.schemas.common import CacheClearResponse, StatusResponse
from newslocal.schemas.search import (
    CacheStatistics,
    NewsArticle,
    NewsCategory,
    NewsResponse,
    NewsSource,
    SearchFilters,
    SortOption,
    SortOrder,
    TrendingTopic,
)

__all__ = [
    "CacheClearResponse",
    "CacheStatistics",
    "NewsArticle",
    "NewsCategory",
    "NewsResponse",
    "NewsSource",
    "SearchFilters",
    "SortOption",
    "SortOrder",
    "StatusResponse",
    "TrendingTopic",
]
