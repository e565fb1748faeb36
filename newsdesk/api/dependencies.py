from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..core.cache import CacheStore, DatabaseCacheStore, InMemoryCacheStore
from ..core.database import get_db
from ..repositories.news_article_repository import NewsArticleRepository
from ..services.image_mirror import ImageMirrorService
from ..services.news_api_client import NewsApiClient
from ..services.news_fetch_service import NewsFetchService


@lru_cache()
def get_memory_cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@lru_cache()
def get_news_api_client() -> NewsApiClient:
    return NewsApiClient(get_settings())


def get_cache_store(db: Session = Depends(get_db)) -> CacheStore:
    if get_settings().cache_backend == "database":
        return DatabaseCacheStore(db)
    return get_memory_cache()


def get_article_repository(db: Session = Depends(get_db)) -> NewsArticleRepository:
    return NewsArticleRepository(db)


def get_image_mirror() -> ImageMirrorService:
    return ImageMirrorService(get_settings())


def get_news_fetch_service(
    cache: CacheStore = Depends(get_cache_store),
    client: NewsApiClient = Depends(get_news_api_client),
    repository: NewsArticleRepository = Depends(get_article_repository),
    image_mirror: ImageMirrorService = Depends(get_image_mirror)
) -> NewsFetchService:
    return NewsFetchService(
        cache=cache,
        client=client,
        settings=get_settings(),
        repository=repository,
        image_mirror=image_mirror,
    )
