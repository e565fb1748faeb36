"""
News Fetch Service
Answers "current articles for request shape X":
1. Look up the TTL cache
2. On a miss, fetch from NewsAPI
3. Mirror images and upsert each article (one failure never aborts the batch)
4. Cache the raw remote payload for 15 minutes
"""

import hashlib
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional

import structlog

from ..config import CACHE_TTL_MINUTES, NEWS_CATEGORIES, Settings
from ..core.cache import CacheStore
from ..exceptions import NewsSourceError
from ..repositories.news_article_repository import NewsArticleRepository
from .image_mirror import ImageMirrorService
from .news_api_client import NewsApiClient, NewsApiResponse

logger = structlog.get_logger(__name__)

CACHE_TTL = timedelta(minutes=CACHE_TTL_MINUTES)
DEFAULT_CATEGORY = "general"
SEARCH_CATEGORY = "search"
TOP_HEADLINES_CACHE_KEY = "news_top_headlines"


def category_cache_key(category: str) -> str:
    return f"news_category_{category}"


def search_cache_key(query: str) -> str:
    return f"news_search_{hashlib.md5(query.encode('utf-8')).hexdigest()}"


def resolve_category(category: Optional[str]) -> str:
    """Unknown categories fall back to 'general'"""
    return category if category in NEWS_CATEGORIES else DEFAULT_CATEGORY


@dataclass
class PersistOutcome:
    url: Optional[str]
    success: bool
    mirrored: bool = False
    error: Optional[str] = None


@dataclass
class BatchReport:
    outcomes: List[PersistOutcome] = field(default_factory=list)

    @property
    def stored(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def mirrored(self) -> int:
        return sum(1 for o in self.outcomes if o.mirrored)


@dataclass
class FetchResult:
    success: bool
    cached: bool = False
    total_results: int = 0
    articles: List[Dict[str, Any]] = field(default_factory=list)
    category: Optional[str] = None
    query: Optional[str] = None
    message: Optional[str] = None
    report: Optional[BatchReport] = None


class NewsFetchService:

    def __init__(
        self,
        cache: CacheStore,
        client: NewsApiClient,
        settings: Settings,
        repository: Optional[NewsArticleRepository] = None,
        image_mirror: Optional[ImageMirrorService] = None
    ):
        self.cache = cache
        self.client = client
        self.settings = settings
        self.repository = repository if settings.persist_articles else None
        self.image_mirror = image_mirror if settings.mirror_images else None

    def get_all_news(self, api_key: Optional[str] = None) -> FetchResult:
        """General top headlines"""
        return self._cache_or_fetch(
            cache_key=TOP_HEADLINES_CACHE_KEY,
            fetch=lambda: self.client.top_headlines(api_key=api_key),
            store_category=DEFAULT_CATEGORY,
            failure_message="Failed to fetch news from API",
        )

    def get_news_by_category(self, category: Optional[str], api_key: Optional[str] = None) -> FetchResult:
        resolved = resolve_category(category)
        if resolved != category:
            logger.info("Unknown category, using default", requested=category, category=resolved)

        result = self._cache_or_fetch(
            cache_key=category_cache_key(resolved),
            fetch=lambda: self.client.top_headlines(category=resolved, api_key=api_key),
            store_category=resolved,
            failure_message="Failed to fetch news by category",
        )
        result.category = resolved
        return result

    def search_news(self, query: Optional[str] = None, api_key: Optional[str] = None) -> FetchResult:
        query = query or self.settings.default_search_query

        result = self._cache_or_fetch(
            cache_key=search_cache_key(query),
            fetch=lambda: self.client.search(query, api_key=api_key),
            store_category=SEARCH_CATEGORY,
            failure_message="Failed to search news",
        )
        result.query = query
        return result

    def clear_cache(self) -> None:
        self.cache.flush_all()

    def _cache_or_fetch(self, cache_key: str, fetch, store_category: str, failure_message: str) -> FetchResult:
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Serving news from cache", cache_key=cache_key)
            return FetchResult(
                success=True,
                cached=True,
                total_results=cached.get("totalResults", 0),
                articles=cached.get("articles", []),
            )

        try:
            response: NewsApiResponse = fetch()
        except NewsSourceError as e:
            logger.warning("Remote news fetch failed", cache_key=cache_key, error=str(e))
            return FetchResult(success=False, message=failure_message)

        report = self.persist_articles(response.articles, store_category)

        self.cache.put(cache_key, response.to_payload(), CACHE_TTL)
        logger.info(
            "Fetched news from API",
            cache_key=cache_key,
            articles=len(response.articles),
            stored=report.stored,
            failed=report.failed,
            mirrored=report.mirrored,
        )

        return FetchResult(
            success=True,
            cached=False,
            total_results=response.total_results,
            articles=response.articles,
            report=report,
        )

    def persist_articles(self, articles: List[Dict[str, Any]], category: str) -> BatchReport:
        """Mirror and upsert each article; failures are recorded, never raised"""
        report = BatchReport()
        if self.repository is None:
            return report

        for article in articles:
            url = article.get("url")
            if not url:
                logger.warning("Skipping article without url", category=category, title=article.get("title"))
                report.outcomes.append(PersistOutcome(url=None, success=False, error="Article has no url"))
                continue

            try:
                local_image = None
                if self.image_mirror is not None:
                    local_image = self.image_mirror.mirror(article.get("urlToImage"), article.get("title"))

                self.repository.upsert(article, category, image_url=local_image)
                report.outcomes.append(PersistOutcome(url=url, success=True, mirrored=local_image is not None))

            except Exception as e:
                logger.error("Failed to persist article", url=url, category=category, error=str(e))
                report.outcomes.append(PersistOutcome(url=url, success=False, error=str(e)))

        return report
