"""
News Importer
Full refresh used by the CLI and scheduled runs:
one fetch per category, then general headlines, sequentially.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

import structlog

from ..config import NEWS_CATEGORIES
from ..repositories.news_article_repository import NewsArticleRepository
from .news_fetch_service import DEFAULT_CATEGORY, FetchResult, NewsFetchService

logger = structlog.get_logger(__name__)

# "general" is covered by the headlines fetch
IMPORT_CATEGORIES = [c for c in NEWS_CATEGORIES if c != DEFAULT_CATEGORY]


@dataclass
class ImportReport:
    started_at: datetime
    count_before: int = 0
    count_after: int = 0
    results: Dict[str, FetchResult] = field(default_factory=dict)
    finished_at: Optional[datetime] = None

    @property
    def new_articles(self) -> int:
        return self.count_after - self.count_before

    @property
    def failed_fetches(self) -> int:
        return sum(1 for r in self.results.values() if not r.success)

    @property
    def success(self) -> bool:
        return bool(self.results) and self.failed_fetches < len(self.results)


class NewsImporter:

    def __init__(self, fetch_service: NewsFetchService, repository: NewsArticleRepository):
        self.fetch_service = fetch_service
        self.repository = repository

    def run(self, category: str = "all") -> ImportReport:
        """
        Run an import.

        Args:
            category: "all" for every category plus general headlines, a single
                category name, or anything else for general headlines only

        Returns:
            ImportReport with per-shape results and the net-new row count
        """
        report = ImportReport(started_at=datetime.now(), count_before=self.repository.count())
        logger.info("Starting news import", category=category, articles_before=report.count_before)

        if category == "all":
            for name in IMPORT_CATEGORIES:
                report.results[name] = self._fetch_category(name)
            report.results[DEFAULT_CATEGORY] = self._fetch_headlines()
        elif category in IMPORT_CATEGORIES:
            report.results[category] = self._fetch_category(category)
        else:
            report.results[DEFAULT_CATEGORY] = self._fetch_headlines()

        report.count_after = self.repository.count()
        report.finished_at = datetime.now()

        logger.info(
            "News import completed",
            category=category,
            new_articles=report.new_articles,
            failed_fetches=report.failed_fetches,
            duration_seconds=round((report.finished_at - report.started_at).total_seconds(), 2),
        )
        return report

    def _fetch_category(self, category: str) -> FetchResult:
        logger.info("Fetching category news", category=category)
        result = self.fetch_service.get_news_by_category(category)
        self._log_result(category, result)
        return result

    def _fetch_headlines(self) -> FetchResult:
        logger.info("Fetching general headlines")
        result = self.fetch_service.get_all_news()
        self._log_result(DEFAULT_CATEGORY, result)
        return result

    def _log_result(self, name: str, result: FetchResult):
        if not result.success:
            logger.warning("Import fetch failed", shape=name, message=result.message)
        elif result.cached:
            logger.info("Import fetch served from cache, nothing persisted", shape=name)
        else:
            logger.info("Import fetch saved", shape=name, stored=result.report.stored if result.report else 0)
