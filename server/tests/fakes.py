"""Test doubles shared across the test modules."""

from datetime import datetime, timedelta

from newslocal.schemas.search import (
    NewsArticle,
    NewsResponse,
    SearchFilters,
    TrendingTopic,
)
from newslocal.services.news_backend import NewsBackendError


class FakeClock:
    """Manually advanced clock returning naive datetimes."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeNewsBackend:
    """In-memory stand-in for the upstream news API that records calls."""

    def __init__(self):
        self.search_calls: list[tuple[str, SearchFilters | None, int, int]] = []
        self.suggestion_calls: list[str] = []
        self.trending_calls: list[int | None] = []
        self.suggestions: list[str] = ["technology", "tech news", "techno"]
        self.topics: list[TrendingTopic] = [
            TrendingTopic(id="t1", topic="AI", popularity=0.9, growth=0.2, article_count=42),
            TrendingTopic(id="t2", topic="Elections", popularity=0.7, growth=0.1, article_count=17),
        ]
        self.fail = False

    def search_articles(self, query, filters, page, limit):
        self.search_calls.append((query, filters, page, limit))
        if self.fail:
            raise NewsBackendError("News API returned 503", status_code=503)
        return make_page(query, page=page, page_size=limit)

    def get_search_suggestions(self, query):
        self.suggestion_calls.append(query)
        if self.fail:
            raise NewsBackendError("News API request failed")
        return list(self.suggestions)

    def get_trending_topics(self, limit=None):
        self.trending_calls.append(limit)
        if self.fail:
            raise NewsBackendError("News API request failed")
        topics = list(self.topics)
        return topics[:limit] if limit is not None else topics


def make_page(title: str, page: int = 1, page_size: int = 20, count: int = 1) -> NewsResponse:
    articles = [NewsArticle(id=f"{title}-{page}-{i}", title=f"{title} #{i}") for i in range(count)]
    return NewsResponse(
        articles=articles,
        total_results=count * 3,
        page=page,
        page_size=page_size,
        has_more=True,
    )
