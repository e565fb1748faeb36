from .news_article import NewsArticle
from .cache_entry import CacheEntry

__all__ = ["NewsArticle", "CacheEntry"]
