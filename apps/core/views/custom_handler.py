# apps/core/views/custom_handler.py
"""JSON replacements for Django's HTML 404 / 500 pages."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from common.views_utils import OrjsonResponse

if TYPE_CHECKING:
    from django.http import HttpRequest

log = structlog.get_logger(__name__).bind(component="ErrorHandlers")


def json_404_handler(request: HttpRequest, exception: Exception) -> OrjsonResponse:
    log.info("Unknown endpoint", path=request.path)
    return OrjsonResponse(
        {"detail": "The requested endpoint was not found.", "path": request.path},
        status=404,
    )


def json_500_handler(request: HttpRequest) -> OrjsonResponse:
    return OrjsonResponse(
        {"detail": "An internal server error occurred."},
        status=500,
    )
