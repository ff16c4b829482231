"""
Prometheus metrics and dependency health checks
"""

import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from prometheus_client import Counter, Histogram, REGISTRY
from sqlalchemy import text

logger = logging.getLogger(__name__)


def _counter(name: str, documentation: str, labels=()) -> Counter:
    # The app module can be imported more than once under test runners
    try:
        return Counter(name, documentation, list(labels))
    except ValueError:
        return REGISTRY._names_to_collectors[name]


def _histogram(name: str, documentation: str, labels=()) -> Histogram:
    try:
        return Histogram(name, documentation, list(labels))
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUEST_COUNT = _counter(
    "sportsbnb_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = _histogram(
    "sportsbnb_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"]
)
BOOKINGS = _counter(
    "sportsbnb_bookings_total",
    "Booking lifecycle events",
    ["event"]
)
GAME_JOINS = _counter(
    "sportsbnb_game_joins_total",
    "Players joining games",
    ["paid"]
)
PAYMENT_FAILURES = _counter(
    "sportsbnb_payment_failures_total",
    "Payment gateway calls that failed",
    ["operation"]
)


def record_booking(event: str) -> None:
    """event is one of: checkout, confirmed, manual, refunded, cancelled, expired"""
    BOOKINGS.labels(event=event).inc()


def record_game_join(paid: bool) -> None:
    GAME_JOINS.labels(paid=str(paid).lower()).inc()


def record_payment_failure(operation: str) -> None:
    PAYMENT_FAILURES.labels(operation=operation).inc()


class HealthChecker:
    """Health checking for the database and Redis"""

    def __init__(self, redis_manager, session_factory):
        self.redis_manager = redis_manager
        self.session_factory = session_factory

    async def check_redis_health(self) -> Dict[str, Any]:
        try:
            start_time = time.time()
            client = await self.redis_manager.get_client()
            await client.ping()
            return {
                "status": "healthy",
                "response_time_ms": (time.time() - start_time) * 1000,
                "error": None
            }
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return {"status": "unhealthy", "response_time_ms": None, "error": str(e)}

    async def check_database_health(self) -> Dict[str, Any]:
        try:
            start_time = time.time()
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "response_time_ms": (time.time() - start_time) * 1000,
                "error": None
            }
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return {"status": "unhealthy", "response_time_ms": None, "error": str(e)}

    async def get_system_health(self) -> Dict[str, Any]:
        redis_health = await self.check_redis_health()
        db_health = await self.check_database_health()

        healthy = [c["status"] == "healthy" for c in (redis_health, db_health)]
        if all(healthy):
            overall_status = "healthy"
        elif any(healthy):
            overall_status = "degraded"
        else:
            overall_status = "unhealthy"

        return {
            "status": overall_status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "components": {
                "redis": redis_health,
                "database": db_health
            }
        }
