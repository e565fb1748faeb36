from .news_article_repository import NewsArticleRepository

__all__ = ["NewsArticleRepository"]
