from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DatabaseError, ValidationError
from ..models.news_article import NewsArticle

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_NAME = "Unknown"
DEFAULT_TITLE = "No title"


def parse_published_at(value: Any, default: datetime) -> datetime:
    """Parse an upstream ISO-8601 timestamp into naive UTC, falling back to ``default``"""
    if not value:
        return default
    if not isinstance(value, str):
        logger.warning("Non-string publishedAt, using fetch time", published_at=value)
        return default
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable publishedAt, using fetch time", published_at=value)
        return default
    if parsed.tzinfo is not None:
        # Stored columns are naive UTC
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class NewsArticleRepository:

    def __init__(self, session: Session, clock=None):
        self.session = session
        self.clock = clock or datetime.utcnow

    def get_by_url(self, url: str) -> Optional[NewsArticle]:
        return self.session.query(NewsArticle).filter(NewsArticle.url == url).first()

    def upsert(self, article: Dict[str, Any], category: Optional[str], image_url: Optional[str] = None) -> NewsArticle:
        """
        Insert or update an article keyed by its URL.

        Args:
            article: Raw article payload as returned by NewsAPI
            category: Category tag stored with the row
            image_url: Mirrored image path; the upstream ``urlToImage`` is used when None

        Returns:
            The stored NewsArticle
        """
        url = article.get("url")
        if not url:
            raise ValidationError("Article has no url")

        source = article.get("source") or {}
        fields = {
            "source_id": source.get("id"),
            "source_name": source.get("name") or DEFAULT_SOURCE_NAME,
            "author": article.get("author"),
            "title": article.get("title") or DEFAULT_TITLE,
            "description": article.get("description"),
            "url_to_image": image_url or article.get("urlToImage"),
            "published_at": parse_published_at(article.get("publishedAt"), self.clock()),
            "content": article.get("content"),
            "category": category,
        }

        try:
            existing = self.get_by_url(url)
            if existing:
                for name, value in fields.items():
                    setattr(existing, name, value)
                stored = existing
            else:
                stored = NewsArticle(url=url, **fields)
                self.session.add(stored)
            self.session.commit()
            self.session.refresh(stored)
            return stored
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to upsert article {url}: {e}") from e

    def _filtered_query(self, category: Optional[str]):
        query = self.session.query(NewsArticle)
        if category and category != "all":
            query = query.filter(NewsArticle.category == category)
        return query

    def count(self, category: Optional[str] = None) -> int:
        return self._filtered_query(category).count()

    def list_articles(
        self,
        category: Optional[str] = None,
        per_page: Optional[int] = None,
        page: int = 1
    ) -> Tuple[List[NewsArticle], int]:
        """
        List stored articles, newest first.

        ``per_page=None`` returns every matching row.
        """
        query = self._filtered_query(category)
        total = query.count()
        query = query.order_by(desc(NewsArticle.published_at), desc(NewsArticle.id))

        if per_page is not None:
            page = max(1, page)
            query = query.offset((page - 1) * per_page).limit(per_page)

        return query.all(), total

    def stats(self) -> Dict[str, Any]:
        total = self.session.query(NewsArticle).count()

        by_category = {
            category or "uncategorized": count
            for category, count in (
                self.session.query(NewsArticle.category, func.count(NewsArticle.id))
                .group_by(NewsArticle.category)
                .order_by(NewsArticle.category)
                .all()
            )
        }

        latest, oldest = self.session.query(
            func.max(NewsArticle.published_at),
            func.min(NewsArticle.published_at)
        ).one()

        return {
            "total": total,
            "by_category": by_category,
            "latest_published_at": latest,
            "oldest_published_at": oldest,
        }
