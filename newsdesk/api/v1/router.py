from fastapi import APIRouter

from .endpoints import news

api_router = APIRouter()

# Public news routes (e.g. /news, /news/search, /news/category/{category})
api_router.include_router(news.router, prefix="/news", tags=["news"])
