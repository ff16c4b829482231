"""
Health check endpoints
"""

from typing import Any
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sportsbnb.config import settings
from sportsbnb.core.database import async_session
from sportsbnb.core.metrics import HealthChecker
from sportsbnb.core.redis import redis_manager

router = APIRouter()

health_checker = HealthChecker(redis_manager, async_session)


@router.get("/live")
async def liveness() -> Any:
    """
    Kubernetes liveness check
    """
    return {"status": "alive", "service": "sportsbnb-api"}


@router.get("/ready")
async def readiness() -> Any:
    """
    Kubernetes readiness check covering database and Redis
    """
    health = await health_checker.get_system_health()
    health["version"] = settings.APP_VERSION
    status_code = 503 if health["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=health)
