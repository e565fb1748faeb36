"""News API response schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Remote feed responses (cache-or-fetch)
# ============================================================================

class NewsFeedResponse(BaseModel):
    """Headlines envelope; articles are passed through from NewsAPI untouched"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    cached: bool
    total_results: int = Field(0, alias="totalResults")
    articles: List[Dict[str, Any]] = []


class CategoryNewsResponse(NewsFeedResponse):
    category: str


class SearchNewsResponse(NewsFeedResponse):
    query: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class ClearCacheResponse(BaseModel):
    success: bool = True
    message: str = "Cache cleared successfully"


# ============================================================================
# Stored articles
# ============================================================================

class ArticleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source_id: Optional[str] = None
    source_name: str
    author: Optional[str] = None
    title: str
    description: Optional[str] = None
    url: str
    url_to_image: Optional[str] = None
    published_at: datetime
    content: Optional[str] = None
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SavedNewsResponse(BaseModel):
    """Returned for per_page=all"""
    success: bool = True
    total: int
    articles: List[ArticleResponse]


class PaginatedSavedNewsResponse(SavedNewsResponse):
    current_page: int
    per_page: int
    last_page: int


class NewsStatsResponse(BaseModel):
    success: bool = True
    total: int
    by_category: Dict[str, int]
    latest_published_at: Optional[datetime] = None
    oldest_published_at: Optional[datetime] = None
