"""Endpoint de health check."""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.cache.redis_cache import redis_cache
from pagos_instructores.infrastructure.config.settings import get_settings
from pagos_instructores.interfaces.api.v1.schemas import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """Health check del servicio."""
    settings = get_settings()
    
    # Verificar base de datos
    db_status = "connected"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        db_status = "disconnected"
    
    # Redis es opcional: sin él se usa el bloqueo en proceso
    if not settings.redis_enabled:
        redis_status = "disabled"
    elif redis_cache.disponible:
        redis_status = "connected"
    else:
        redis_status = "disconnected"
    
    status = "healthy" if db_status == "connected" and redis_status != "disconnected" else "degraded"
    
    return HealthResponse(
        status=status,
        service=settings.app_name,
        version=settings.app_version,
        database=db_status,
        redis=redis_status,
    )
