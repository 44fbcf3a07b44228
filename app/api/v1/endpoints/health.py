"""Liveness and readiness checks."""

import logging
import os
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exception_handlers import error_response
from app.core.rate_limit import rate_limiter
from app.db.session import get_db

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("")
async def health():
    """Process is up. ``rate_limit_keys`` is the size of the in-memory limiter map."""
    payload: dict = {
        "success": True,
        "status": "ok",
        "environment": settings.environment,
        "rate_limit_keys": len(rate_limiter),
    }
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    started = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        return error_response(503, "Database unavailable")
    return {
        "success": True,
        "status": "ok",
        "database": "connected",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }
