import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django_redis.exceptions import ConnectionInterrupted

logger = structlog.get_logger(__name__)

HEALTH_CACHE_KEY = "catalog:health"


def _ping_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache() -> None:
    cache.set(HEALTH_CACHE_KEY, "ok", 10)
    if cache.get(HEALTH_CACHE_KEY) != "ok":
        raise ConnectionError("Cache read-back mismatch")


def _probe(name: str, ping: Callable[[], None], errors: tuple) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        ping()
    except errors as exc:
        logger.error("health.service_down", service=name, error=str(exc))
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Report database and cache reachability (200 healthy, 503 otherwise)."""
    services = {
        "database": _probe("database", _ping_database, (DatabaseError,)),
        "cache": _probe("cache", _ping_cache, (ConnectionInterrupted, ConnectionError)),
    }
    healthy = all(service["status"] == "up" for service in services.values())
    overall = "healthy" if healthy else "unhealthy"

    logger.info("health.checked", status=overall)
    return JsonResponse(
        {
            "status": overall,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )
