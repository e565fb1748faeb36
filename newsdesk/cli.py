"""
Command line importer

    newsdesk-fetch                         # every category plus general headlines
    newsdesk-fetch --category sports       # a single category
    newsdesk-fetch --interval-minutes 30   # repeat until interrupted
"""

import argparse
import sys
import time
from typing import List, Optional

import structlog

from .config import NEWS_CATEGORIES, get_settings
from .core.cache import DatabaseCacheStore, InMemoryCacheStore
from .core.database import SessionLocal, create_tables
from .logging_config import configure_logging
from .repositories.news_article_repository import NewsArticleRepository
from .services.image_mirror import ImageMirrorService
from .services.news_api_client import NewsApiClient
from .services.news_fetch_service import NewsFetchService
from .services.news_importer import ImportReport, NewsImporter

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newsdesk-fetch",
        description="Fetch latest news from NewsAPI and save to database",
    )
    parser.add_argument(
        "--category",
        default="all",
        help=f"'all' or one of: {', '.join(NEWS_CATEGORIES)} (anything else fetches general headlines)",
    )
    parser.add_argument("--api-key", default=None, help="Override NEWS_API_KEY for this run")
    parser.add_argument(
        "--interval-minutes",
        type=int,
        default=None,
        help="Repeat the import every N minutes until interrupted",
    )
    return parser


def run_import(category: str, api_key: Optional[str] = None, cache=None) -> ImportReport:
    settings = get_settings()
    if api_key:
        settings = settings.model_copy(update={"news_api_key": api_key})

    db = SessionLocal()
    client = NewsApiClient(settings)
    try:
        if cache is None:
            cache = DatabaseCacheStore(db) if settings.cache_backend == "database" else InMemoryCacheStore()
        repository = NewsArticleRepository(db)
        fetch_service = NewsFetchService(
            cache=cache,
            client=client,
            settings=settings,
            repository=repository,
            image_mirror=ImageMirrorService(settings),
        )
        return NewsImporter(fetch_service, repository).run(category)
    finally:
        client.close()
        db.close()


def print_report(report: ImportReport):
    for name, result in report.results.items():
        if not result.success:
            print(f"✗ {name}: {result.message}")
        elif result.cached:
            print(f"✓ {name}: served from cache")
        else:
            print(f"✓ {name}: {len(result.articles)} articles saved")
    print(f"\n✓ News fetch completed: {report.new_articles} new articles")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    create_tables()

    # One in-memory cache for the whole process so repeated runs honour the TTL
    cache = None if settings.cache_backend == "database" else InMemoryCacheStore()

    print("Fetching news from NewsAPI...")
    try:
        while True:
            report = run_import(args.category, api_key=args.api_key, cache=cache)
            print_report(report)

            if args.interval_minutes is None:
                return 0 if report.success else 1

            logger.info("Next import scheduled", minutes=args.interval_minutes)
            time.sleep(args.interval_minutes * 60)
    except KeyboardInterrupt:
        logger.info("Importer stopped")
        return 0


if __name__ == "__main__":
    sys.exit(main())
