"""
NewsAPI.org client

Wraps the two read endpoints used by the fetch service:
- /top-headlines (country, optional category, pageSize)
- /everything (q, sortBy, language, pageSize)

Every call is a single attempt with a bounded timeout; failures are raised as
NewsSourceError and never retried.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..config import Settings
from ..exceptions import NewsSourceError

logger = structlog.get_logger(__name__)


@dataclass
class NewsApiResponse:
    total_results: int
    articles: List[Dict[str, Any]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {"totalResults": self.total_results, "articles": self.articles}


class NewsApiClient:

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.base_url = settings.news_api_base_url.rstrip("/")
        self.default_api_key = settings.news_api_key
        self.country = settings.news_api_country
        self.language = settings.news_api_language
        self.page_size = settings.news_api_page_size
        self.http_client = http_client or httpx.Client(timeout=settings.news_api_timeout_seconds)

    def top_headlines(self, category: Optional[str] = None, api_key: Optional[str] = None) -> NewsApiResponse:
        params = {
            "apiKey": api_key or self.default_api_key,
            "country": self.country,
            "pageSize": self.page_size,
        }
        if category:
            params["category"] = category
        return self._get("top-headlines", params)

    def search(self, query: str, api_key: Optional[str] = None) -> NewsApiResponse:
        params = {
            "apiKey": api_key or self.default_api_key,
            "q": query,
            "pageSize": self.page_size,
            "sortBy": "publishedAt",
            "language": self.language,
        }
        return self._get("everything", params)

    def _get(self, endpoint: str, params: Dict[str, Any]) -> NewsApiResponse:
        url = f"{self.base_url}/{endpoint}"
        log_params = {k: v for k, v in params.items() if k != "apiKey"}

        try:
            response = self.http_client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error("NewsAPI request failed", endpoint=endpoint, params=log_params, error=str(e))
            raise NewsSourceError(f"NewsAPI request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "NewsAPI returned an error status",
                endpoint=endpoint,
                params=log_params,
                status_code=response.status_code,
            )
            raise NewsSourceError(
                f"NewsAPI returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NewsSourceError("NewsAPI returned invalid JSON", status_code=response.status_code) from e

        articles = data.get("articles") or []
        logger.info("NewsAPI fetch succeeded", endpoint=endpoint, params=log_params, articles=len(articles))
        return NewsApiResponse(total_results=data.get("totalResults") or 0, articles=articles)

    def close(self):
        self.http_client.close()
