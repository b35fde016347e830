import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class SortOption(str, Enum):
    """Field the upstream search sorts by."""

    PUBLISHED_AT = "published_at"
    RELEVANCE = "relevance"
    POPULARITY = "popularity"
    VIEW_COUNT = "view_count"
    LIKE_COUNT = "like_count"


class SortOrder(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class NewsCategory(BaseModel):
    id: str
    name: str
    display_name: str

    @classmethod
    def from_id(cls, category_id: str) -> "NewsCategory":
        """Resolve a well-known category, or build one from an unknown id."""
        known = KNOWN_CATEGORIES.get(category_id.lower())
        if known is not None:
            return known
        return cls(id=category_id, name=category_id, display_name=category_id.title())


KNOWN_CATEGORIES: dict[str, NewsCategory] = {
    c: NewsCategory(id=c, name=c, display_name=c.title())
    for c in (
        "general",
        "business",
        "technology",
        "science",
        "health",
        "sports",
        "entertainment",
        "politics",
        "world",
        "local",
    )
}


class NewsSource(BaseModel):
    id: str
    name: str
    description: str = ""
    url: str | None = None
    logo_url: str | None = None
    credibility_score: float = 0.0
    is_verified: bool = False
    country: str = "US"
    language: str = "en"


class SearchFilters(BaseModel):
    """Optional filter dimensions applied to a search."""

    categories: list[NewsCategory] | None = None
    sources: list[NewsSource] | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    language: str | None = None
    country: str | None = None
    sort_by: SortOption | None = None
    sort_order: SortOrder | None = None

    @property
    def is_empty(self) -> bool:
        return self.active_filter_count == 0 and self.sort_order is None

    @property
    def active_filter_count(self) -> int:
        """Number of active filter dimensions (sort order alone is not counted)."""
        active = [
            bool(self.categories),
            bool(self.sources),
            self.date_from is not None,
            self.date_to is not None,
            self.language is not None,
            self.country is not None,
            self.sort_by is not None,
        ]
        return sum(active)


class NewsArticle(BaseModel):
    id: str
    title: str
    summary: str = ""
    content: str = ""
    author: str = ""
    source: NewsSource | None = None
    category: NewsCategory | None = None
    published_at: datetime | None = None
    image_url: str | None = None
    article_url: str | None = None
    is_breaking: bool = False
    tags: list[str] = Field(default_factory=list)
    like_count: int = 0
    share_count: int = 0


class NewsResponse(BaseModel):
    """One page of search results."""

    articles: list[NewsArticle] = Field(default_factory=list)
    total_results: int = 0
    page: int = 1
    page_size: int = 20
    has_more: bool = False

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_results / self.page_size)


class TrendingTopic(BaseModel):
    id: str
    topic: str
    category: NewsCategory | None = None
    popularity: float = 0.0
    growth: float = 0.0
    article_count: int = 0
    last_updated: datetime | None = None


class CacheStatistics(BaseModel):
    total_entries: int
    suggestions_entries: int
    trending_present: bool
    hit_rate: float
    hits: int = 0
    misses: int = 0
    size: int
    max_size: int
    estimated_memory_bytes: int

    @computed_field
    @property
    def formatted_hit_rate(self) -> str:
        return f"{self.hit_rate * 100:.1f}%"

    @computed_field
    @property
    def formatted_memory_usage(self) -> str:
        usage = self.estimated_memory_bytes
        if usage < 1024:
            return f"{usage} bytes"
        if usage < 1024 * 1024:
            return f"{usage // 1024} KB"
        return f"{usage // (1024 * 1024)} MB"
