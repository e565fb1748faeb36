import math
from typing import Optional, Union

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ....config import get_settings
from ....repositories.news_article_repository import NewsArticleRepository
from ....schemas.news import (
    ArticleResponse,
    CategoryNewsResponse,
    ClearCacheResponse,
    ErrorResponse,
    NewsFeedResponse,
    NewsStatsResponse,
    PaginatedSavedNewsResponse,
    SavedNewsResponse,
    SearchNewsResponse,
)
from ....services.news_fetch_service import FetchResult, NewsFetchService
from ...dependencies import get_article_repository, get_news_fetch_service

logger = structlog.get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def _failure(result: FetchResult) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(message=result.message or "Failed to fetch news").model_dump(),
    )


@router.get("", response_model=NewsFeedResponse, responses=ERROR_RESPONSES)
def get_all_news(news_service: NewsFetchService = Depends(get_news_fetch_service)):
    """Latest general headlines (cache-or-fetch)"""
    result = news_service.get_all_news()
    if not result.success:
        return _failure(result)

    return NewsFeedResponse(
        cached=result.cached,
        total_results=result.total_results,
        articles=result.articles,
    )


@router.get("/search", response_model=SearchNewsResponse, responses=ERROR_RESPONSES)
def search_news(
    q: Optional[str] = Query(None, description="Search keyword"),
    news_service: NewsFetchService = Depends(get_news_fetch_service)
):
    """Search news by keyword; defaults to the configured search term"""
    result = news_service.search_news(q)
    if not result.success:
        return _failure(result)

    return SearchNewsResponse(
        cached=result.cached,
        query=result.query,
        total_results=result.total_results,
        articles=result.articles,
    )


@router.get("/category/{category}", response_model=CategoryNewsResponse, responses=ERROR_RESPONSES)
def get_news_by_category(
    category: str,
    news_service: NewsFetchService = Depends(get_news_fetch_service)
):
    """Category headlines; unknown categories are served as 'general'"""
    result = news_service.get_news_by_category(category)
    if not result.success:
        return _failure(result)

    return CategoryNewsResponse(
        cached=result.cached,
        category=result.category,
        total_results=result.total_results,
        articles=result.articles,
    )


@router.post("/clear-cache", response_model=ClearCacheResponse)
def clear_cache(news_service: NewsFetchService = Depends(get_news_fetch_service)):
    """Flush every cache entry"""
    news_service.clear_cache()
    logger.info("News cache cleared via API")
    return ClearCacheResponse()


@router.get(
    "/saved",
    response_model=Union[PaginatedSavedNewsResponse, SavedNewsResponse],
    responses={422: {"model": ErrorResponse}},
)
def get_saved_news(
    category: str = Query("all", description="Category filter or 'all'"),
    per_page: Optional[str] = Query(None, description="Page size or 'all'"),
    page: int = Query(1, ge=1, description="Page number"),
    repository: NewsArticleRepository = Depends(get_article_repository)
):
    """Read persisted articles, newest first"""
    if per_page == "all":
        articles, total = repository.list_articles(category=category)
        return SavedNewsResponse(
            total=total,
            articles=[ArticleResponse.model_validate(a) for a in articles],
        )

    if per_page is None:
        page_size = get_settings().saved_news_per_page
    else:
        try:
            page_size = int(per_page)
        except ValueError:
            page_size = 0
        if page_size < 1:
            return JSONResponse(
                status_code=422,
                content=ErrorResponse(message="per_page must be a positive integer or 'all'").model_dump(),
            )

    articles, total = repository.list_articles(category=category, per_page=page_size, page=page)
    return PaginatedSavedNewsResponse(
        total=total,
        current_page=page,
        per_page=page_size,
        last_page=max(1, math.ceil(total / page_size)),
        articles=[ArticleResponse.model_validate(a) for a in articles],
    )


@router.get("/stats", response_model=NewsStatsResponse)
def get_news_stats(repository: NewsArticleRepository = Depends(get_article_repository)):
    """Aggregate counts over persisted articles"""
    return NewsStatsResponse(**repository.stats())
