import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .api.v1 import api_router
from .api.v1.endpoints import health
from .config import get_settings
from .core.database import create_tables
from .logging_config import apply_logging_preferences, configure_logging
from .services.image_mirror import PUBLIC_PREFIX

settings = get_settings()

configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    apply_logging_preferences(settings)
    logger.info("Starting Newsdesk API", version=__version__, cache_backend=settings.cache_backend)
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down Newsdesk API")


def create_application() -> FastAPI:
    app = FastAPI(
        title="Newsdesk",
        description="Caching NewsAPI proxy with article persistence and local image mirroring",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": f"Error: {exc}",
            }
        )

    app.include_router(health.router, tags=["health"])

    # Mirrored images live under <file_storage_dir>/news_images
    os.makedirs(settings.file_storage_dir, exist_ok=True)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.file_storage_dir), name="storage")

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
    )
