"""
Django 5.2 ASGI application wrapped in Starlette for health and lifecycle hooks.
"""

from __future__ import annotations

import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.asgi import get_asgi_application
from django.db import DatabaseError, connections
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import BaseRoute, Mount, Route

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from django.db.backends.base.base import BaseDatabaseWrapper

# --- Set up Django environment
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")
import django

django.setup()

from django.apps import apps as django_apps

from apps.core.views import health_check

# --- Constants
DB_WARMUP_TIMEOUT = 5.0
SHUTDOWN_TIMEOUT = 10.0

logger = structlog.get_logger(__name__)

django_app = get_asgi_application()


class WarmupError(Exception):
    """Raised when a warmup operation fails."""


async def _test_database_connection() -> None:
    """Test database connectivity with timeout protection."""

    def _db_test() -> None:
        conn: BaseDatabaseWrapper = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()

    try:
        await asyncio.wait_for(asyncio.to_thread(_db_test), timeout=DB_WARMUP_TIMEOUT)
    except TimeoutError as e:
        msg = f"Database connection timed out after {DB_WARMUP_TIMEOUT}s"
        raise WarmupError(msg) from e
    except DatabaseError as e:
        msg = f"Database connection failed: {e}"
        raise WarmupError(msg) from e


# --- Centralized Lifespan Manager ---
@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    """
    Startup: verifies the database is reachable and reports hero cache settings.
    Shutdown: drops cached hero documents and closes database connections.
    """
    logger.info("🚀 ASGI application starting up...")
    start_time = time.monotonic()
    try:
        await _test_database_connection()
    except WarmupError as e:
        logger.warning("Database warm-up failed", error=str(e))
    else:
        logger.info("✓ Database warmed up successfully")

    hero_cache = django_apps.get_app_config("heroes").document_cache
    cfg = hero_cache.config
    logger.info(
        "✅ Application startup complete. Ready to serve requests.",
        duration_s=f"{time.monotonic() - start_time:.2f}",
        hero_cache_enabled=cfg.enabled,
        hero_cache_ttl_s=cfg.ttl_s,
        hero_cache_max_entries=cfg.max_entries,
    )
    yield

    logger.info("🛑 ASGI application shutting down...")
    hero_cache.clear()
    try:
        async with asyncio.timeout(SHUTDOWN_TIMEOUT):
            await sync_to_async(connections.close_all)()
            logger.info("✓ Database connections closed")
    except TimeoutError:
        logger.warning(f"Shutdown timed out after {SHUTDOWN_TIMEOUT}s. Forcing exit.")
    except DatabaseError as e:
        logger.exception("Error during shutdown cleanup", error=str(e))
    logger.info("✅ ASGI application shutdown complete.")


# --- Application Factory Functions ---
def create_middleware() -> list[Middleware]:
    """Create middleware stack based on settings."""
    return [
        Middleware(
            CORSMiddleware,
            allow_origins=getattr(settings, "CORS_ALLOWED_ORIGINS", ["*"]),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    ]


def create_routes() -> list[BaseRoute]:
    """Create application routes."""
    return [
        Route("/health", endpoint=health_check, methods=["GET", "HEAD"]),
        Mount("/", app=django_app),
    ]


# --- Main Application Instance ---
application = Starlette(
    debug=settings.DEBUG,
    routes=create_routes(),
    middleware=create_middleware(),
    lifespan=lifespan,
)
