"""
Health check router.

Liveness and readiness check. Reports ``degraded`` instead of failing
when the database cannot be reached.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.interfaces.trading.dependencies import get_db_engine
from app.interfaces.trading.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(engine: Engine = Depends(get_db_engine)) -> HealthResponse:
    """Return current application health status."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database")
        return HealthResponse(status="degraded", version=settings.version)
    return HealthResponse(status="ok", version=settings.version)
