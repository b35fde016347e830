"""HTTP client for the upstream news API.

Only the three search-related endpoints are used:

- ``GET /news/search``     paginated article search
- ``GET /content/tags``    typeahead suggestions for a partial query
- ``GET /news/trending``   trending topics

Every failure raises NewsBackendError instead of returning an empty result,
so a failed fetch can never end up in the search cache.
"""

import logging
import time
from typing import Any, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from newslocal.core.config import get_settings
from newslocal.schemas.search import NewsResponse, SearchFilters, TrendingTopic

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
INITIAL_BACKOFF = 0.5  # seconds

SEARCH_PATH = "/news/search"
SUGGESTIONS_PATH = "/content/tags"
TRENDING_PATH = "/news/trending"

_suggestions_adapter = TypeAdapter(list[str])
_trending_adapter = TypeAdapter(list[TrendingTopic])


class NewsBackendError(Exception):
    """The upstream news API failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NewsBackend(Protocol):
    def search_articles(
        self, query: str, filters: SearchFilters | None, page: int, limit: int
    ) -> NewsResponse: ...

    def get_search_suggestions(self, query: str) -> list[str]: ...

    def get_trending_topics(self, limit: int | None = None) -> list[TrendingTopic]: ...


def build_search_params(
    query: str, filters: SearchFilters | None, page: int, limit: int
) -> dict[str, str]:
    """Translate a query and filter set into upstream query parameters."""
    params = {"q": query, "page": str(page), "pageSize": str(limit)}
    if filters is None:
        return params

    if filters.categories:
        params["categories"] = ",".join(c.id for c in filters.categories)
    if filters.sources:
        params["sources"] = ",".join(s.id for s in filters.sources)
    if filters.sort_by is not None:
        params["sortBy"] = filters.sort_by.value
    if filters.sort_order is not None:
        params["sortOrder"] = filters.sort_order.value
    if filters.language:
        params["language"] = filters.language
    if filters.country:
        params["country"] = filters.country
    if filters.date_from is not None:
        params["from"] = filters.date_from.isoformat()
    if filters.date_to is not None:
        params["to"] = filters.date_to.isoformat()
    return params


class NewsBackendClient:
    """Synchronous httpx client for the upstream news API."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        initial_backoff: float = INITIAL_BACKOFF,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.initial_backoff = initial_backoff
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "NewsBackendClient":
        settings = get_settings()
        return cls(
            base_url=settings.news_api_url,
            api_key=settings.news_api_key,
            timeout=settings.news_api_timeout_seconds,
        )

    def search_articles(
        self, query: str, filters: SearchFilters | None, page: int, limit: int
    ) -> NewsResponse:
        data = self._get(SEARCH_PATH, build_search_params(query, filters, page, limit))
        try:
            return NewsResponse.model_validate(data)
        except ValidationError as e:
            logger.error("Malformed search response from news API: %s", e)
            raise NewsBackendError("Malformed search response") from e

    def get_search_suggestions(self, query: str) -> list[str]:
        data = self._get(SUGGESTIONS_PATH, {"q": query})
        try:
            return _suggestions_adapter.validate_python(data)
        except ValidationError as e:
            logger.error("Malformed suggestions response from news API: %s", e)
            raise NewsBackendError("Malformed suggestions response") from e

    def get_trending_topics(self, limit: int | None = None) -> list[TrendingTopic]:
        params = {"limit": str(limit)} if limit is not None else {}
        data = self._get(TRENDING_PATH, params)
        try:
            return _trending_adapter.validate_python(data)
        except ValidationError as e:
            logger.error("Malformed trending response from news API: %s", e)
            raise NewsBackendError("Malformed trending response") from e

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    def _get(self, path: str, params: dict[str, str]) -> Any:
        """GET a JSON document, retrying timeouts and connection failures."""
        url = f"{self.base_url}{path}"
        last_exception: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            try:
                with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                    response = client.get(url, params=params, headers=self._headers())
                response.raise_for_status()
                return response.json()
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_exception = e
                if attempt < MAX_RETRIES:
                    backoff = self.initial_backoff * (2**attempt)
                    logger.warning(
                        "News API request to %s failed (attempt %d/%d), retrying in %ss: %s",
                        path,
                        attempt + 1,
                        MAX_RETRIES + 1,
                        backoff,
                        e,
                    )
                    time.sleep(backoff)
            except httpx.HTTPStatusError as e:
                logger.warning(
                    "News API error %s on %s: %s",
                    e.response.status_code,
                    path,
                    e.response.text[:200],
                )
                raise NewsBackendError(
                    f"News API returned {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                logger.warning("News API request to %s failed: %s", path, e)
                raise NewsBackendError("News API request failed") from e
            except ValueError as e:
                logger.error("News API returned invalid JSON on %s: %s", path, e)
                raise NewsBackendError("News API returned invalid JSON") from e

        logger.error("News API request to %s failed after %d attempts", path, MAX_RETRIES + 1)
        raise NewsBackendError("News API unreachable") from last_exception
