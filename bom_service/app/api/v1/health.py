"""
Health API endpoints
"""

from fastapi import APIRouter
from sqlalchemy import text

from bom_service.app.core.database import get_database_manager
from bom_service.app.core.settings import get_settings
from bom_service.app.schemas.user import HealthResponse
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("health")
settings = get_settings()

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint; reports whether the database answers."""
    try:
        async with get_database_manager().async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database = "healthy"
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "unhealthy",
        service=settings.SERVICE_NAME,
        version=settings.APP_VERSION,
        database=database,
    )
