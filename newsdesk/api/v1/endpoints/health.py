from datetime import datetime
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

from ....core.database import get_db
from ....config import get_settings
from .... import __version__

logger = structlog.get_logger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/health")
def health_check(
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "error": "Database connectivity failed",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    return {
        "status": "healthy",
        "service": "Newsdesk API",
        "version": __version__,
        "environment": "development" if settings.debug else "production",
        "database": "healthy",
        "cache_backend": settings.cache_backend,
        "timestamp": datetime.utcnow().isoformat(),
    }
