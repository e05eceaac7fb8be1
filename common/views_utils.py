# common/views_utils.py
# ======================================================================
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Self

import orjson
import structlog
from django.core.exceptions import BadRequest
from django.http import (
    Http404,
    HttpRequest,
    HttpResponse,
)
from django.views import View

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger(__name__).bind(component="ViewsUtils")


class OrjsonResponse(HttpResponse):
    """
    A high-performance JSON response using `orjson`.

    Data are encoded as UTF-8 bytes; `content_type` is set to
    `application/json` automatically.
    """

    def __init__(self, data: Any, *, status: int = 200, **kw: Any) -> None:
        opts = orjson.OPT_NAIVE_UTC
        content = orjson.dumps(data, option=opts)
        kw.setdefault("content_type", "application/json")
        super().__init__(content=content, status=status, **kw)


# ------------------------------------------------------------------ pagination
@dataclass(slots=True, frozen=True)
class Page:
    """
    Simple value-object for pagination.

    Attributes
    ----------
    number : 1-based page index
    size   : page size in rows
    offset : slice offset, computed automatically
    """

    number: int
    size: int
    offset: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", (self.number - 1) * self.size)

    @classmethod
    def from_request(
        cls,
        req: HttpRequest,
        /,
        *,
        max_size: int = 100,
        default_size: int = 50,
    ) -> Self:
        """
        Parse `page` and `page_size` query params into a Page instance,
        applying sane defaults & bounds.
        """
        try:
            page_num = int(req.GET.get("page", 1))
        except (TypeError, ValueError):
            page_num = 1
        page_num = max(page_num, 1)

        try:
            raw_size = int(req.GET.get("page_size", default_size))
        except (TypeError, ValueError):
            raw_size = default_size
        page_size = max(1, min(raw_size, max_size))

        return cls(page_num, page_size)

    def total_pages(self, total: int) -> int:
        return -(-total // self.size) if self.size else 0


# ------------------------------------------------------------------ BaseAsyncView
class BaseAsyncView(View):
    """
    Base-class for *async* Django CBVs with

        • Centralised error handling
        • orjson responses
        • Per-view mapping of domain exceptions to status codes
    """

    # Checked in order, so list subclasses before their bases.
    ERROR_STATUS: ClassVar[Mapping[type[Exception], int]] = {}

    # ───────────────────────────── dispatch ──────────────────────────
    async def dispatch(self, request: HttpRequest, *args: Any, **kw: Any):  # type: ignore[override]
        self.request = request  # Make request available to all methods

        handler = getattr(self, request.method.lower(), None)
        if handler is None:
            return await self.http_method_not_allowed(request, *args, **kw)

        try:
            response = await handler(request, *args, **kw)
        except Http404 as exc:
            log.info("Resource not found", path=request.path, err=str(exc))
            response = OrjsonResponse({"detail": str(exc) or "Not found."}, status=404)
        except BadRequest as exc:
            log.info("Bad request", path=request.path, err=str(exc))
            response = OrjsonResponse({"detail": str(exc) or "Bad request."}, status=400)
        except Exception as exc:
            status = self._status_for(exc)
            if status is None:
                log.exception("Unhandled API error", path=request.path, exc_info=exc)
                return OrjsonResponse({"detail": "An internal server error occurred."}, status=500)
            log.warning("Request failed", path=request.path, status=status, err=str(exc))
            response = OrjsonResponse({"detail": str(exc)}, status=status)
        return response

    def _status_for(self, exc: Exception) -> int | None:
        for exc_type, status in self.ERROR_STATUS.items():
            if isinstance(exc, exc_type):
                return status
        return None

    async def http_method_not_allowed(self, request: HttpRequest, *a: Any, **k: Any) -> HttpResponse:
        log.warning("Method Not Allowed", method=request.method, path=request.path)
        return OrjsonResponse({"detail": f'Method "{request.method}" not allowed.'}, status=405)

    # ─────────────────────── request-parsing helpers ─────────────────
    @staticmethod
    def get_page(request: HttpRequest) -> Page:
        return Page.from_request(request)

    @staticmethod
    def get_bool_param(request: HttpRequest, key: str, *, default: bool = False) -> bool:
        val = request.GET.get(key)
        if val is None:
            return default
        return val.lower() in {"1", "true", "yes", "on"}

    @staticmethod
    def get_json_body(request: HttpRequest) -> Any:
        """Decodes the request body with orjson; malformed JSON is a 400."""
        try:
            return orjson.loads(request.body or b"null")
        except orjson.JSONDecodeError as exc:
            msg = f"Malformed JSON body: {exc}"
            raise BadRequest(msg) from exc


class BaseAppView(BaseAsyncView, ABC):
    """
    Universal base class for read-only application API views.

    It standardizes the GET request lifecycle:
    1. It calls a subclass-defined `_get_params` to gather all relevant parameters
       from the request path (kwargs) and query string (GET).
    2. It calls a subclass-defined `_produce_payload` with these clean parameters
       to generate the core data.
    3. It returns a consistent OrjsonResponse.
    """

    @abstractmethod
    def _get_params(self, request: HttpRequest, **kwargs) -> dict[str, Any]:
        """Subclasses must implement this to define the parameters they care about."""
        raise NotImplementedError

    @abstractmethod
    async def _produce_payload(self, params: dict[str, Any]) -> Any:
        """Subclasses must implement this to perform their core data generation."""
        raise NotImplementedError

    async def get(self, request: HttpRequest, **kwargs) -> OrjsonResponse:
        """Universal GET handler that orchestrates the entire process."""
        params = self._get_params(request, **kwargs)
        data = await self._produce_payload(params)
        return OrjsonResponse(data)
