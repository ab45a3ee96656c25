"""
Health check endpoint
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

import redis
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_redis
from core.config import settings
from core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def check_database_health(db: Session) -> Dict[str, Any]:
    """
    Check database connectivity.

    Args:
        db: Database session dependency

    Returns:
        Dict containing database health status
    """
    try:
        start_time = time.time()
        db.execute(text("SELECT 1")).fetchone()
        latency_ms = (time.time() - start_time) * 1000
        return {"status": "connected", "latency_ms": round(latency_ms, 2)}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return {"status": "error", "error": str(e)}


def check_redis_health(client: redis.Redis) -> Dict[str, Any]:
    """
    Check Redis connectivity with PING command.

    Returns:
        Dict containing Redis health status
    """
    try:
        start_time = time.time()
        response = client.ping()
        latency_ms = (time.time() - start_time) * 1000

        if response:
            return {"status": "connected", "latency_ms": round(latency_ms, 2)}
        return {"status": "error", "error": "PING returned False"}
    except redis.RedisError as e:
        logger.error(f"Redis health check failed: {str(e)}")
        return {"status": "error", "error": str(e)}


@router.get("/health")
def health_check(db: Session = Depends(get_db), client: redis.Redis = Depends(get_redis)) -> JSONResponse:
    """
    Health check for external monitoring.

    The database is critical; Redis only backs the render cache, so a
    Redis failure is reported but does not make the service unhealthy.

    Returns:
        JSONResponse: Health status with 200 (healthy) or 503 (unhealthy)
    """
    start_time = time.time()

    health_data = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {},
    }

    db_result = check_database_health(db)
    health_data["checks"]["database"] = db_result
    is_healthy = db_result.get("status") == "connected"

    if settings.enable_render_cache:
        redis_result = check_redis_health(client)
        health_data["checks"]["redis"] = redis_result
        if redis_result.get("status") != "connected":
            logger.warning(f"Redis health check failed: {redis_result}")

    health_data["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

    if not is_healthy:
        health_data["status"] = "unhealthy"

    return JSONResponse(status_code=200 if is_healthy else 503, content=health_data)
