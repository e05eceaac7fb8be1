# apps/core/views/health.py

from __future__ import annotations

import asyncio
import time
from asyncio import to_thread
from typing import TYPE_CHECKING

from django.apps import apps as django_apps
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connections
from django.utils import timezone
from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.requests import Request

# --------------------------------------------------------------------------- helpers


def _simple_db_query() -> None:
    """Gets a connection and performs a simple query within the same thread."""
    db_conn = connections["default"]
    with db_conn.cursor() as cur:
        cur.execute("SELECT 1")
        cur.fetchone()


async def _check_database() -> dict[str, str | float]:
    start = time.perf_counter()
    try:
        await to_thread(_simple_db_query)
        return {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
        }
    except DatabaseError as exc:
        return {"status": "unhealthy", "error": str(exc)}


async def _check_cache() -> dict[str, str]:
    key = f"health:{int(time.time())}"

    def check_cache_sync() -> bool:
        cache.set(key, "ok", 10)
        ok = cache.get(key) == "ok"
        cache.delete(key)
        return ok

    if await to_thread(check_cache_sync):
        return {"status": "healthy"}
    return {"status": "unhealthy", "error": "Cache round-trip check failed"}


async def _check_hero_cache() -> dict[str, object]:
    """Reports the hero document cache counters; a disabled cache is not a failure."""
    stats = django_apps.get_app_config("heroes").document_cache.stats()
    if not stats["enabled"]:
        return {"status": "disabled", **stats}
    return {"status": "healthy", **stats}


# --------------------------------------------------------------------------- view
async def health_check(request: Request) -> JSONResponse:
    """
    Comprehensive health endpoint.
    • `?check=basic`  → liveness-only.
    """
    start_view = time.perf_counter()
    base_payload = {
        "timestamp": timezone.now().isoformat(),
        "version": getattr(settings, "APP_VERSION", "unknown"),
        "environment": getattr(settings, "ENVIRONMENT", "unknown"),
    }

    # very cheap liveness probe for Kubernetes/ECS
    if request.query_params.get("check") == "basic":
        return JSONResponse({"status": "ok", **base_payload})

    db_result, cache_result, hero_cache_result = await asyncio.gather(
        _check_database(),
        _check_cache(),
        _check_hero_cache(),
    )
    checks = {
        "database": db_result,
        "cache": cache_result,
        "hero_cache": hero_cache_result,
    }

    # Unhealthy if any enabled check is not healthy.
    overall_healthy = all(v["status"] == "healthy" for v in checks.values() if v.get("status") != "disabled")
    status_code = 200 if overall_healthy else 503

    response = {
        "status": "healthy" if overall_healthy else "unhealthy",
        "checks": checks,
        "response_time_ms": round((time.perf_counter() - start_view) * 1000, 2),
        **base_payload,
    }
    return JSONResponse(response, status_code=status_code)
