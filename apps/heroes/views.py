# apps/heroes/views.py
# ======================================================================
"""Asynchronous API views for the 'heroes' application."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.apps import apps as django_apps
from django.core.exceptions import BadRequest
from django.http import Http404, HttpRequest, HttpResponse

from apps.heroes.errors import HeroNotFoundError, RepositoryError, RepositoryTimeoutError, ValidationError
from apps.heroes.services import export_documents
from common.views_utils import BaseAppView, BaseAsyncView, OrjsonResponse

if TYPE_CHECKING:
    from apps.heroes.schemas import HeroDocument
    from apps.heroes.services import HeroDocumentCache

log = structlog.get_logger(__name__).bind(component="HeroViews")

HERO_ERROR_STATUS: dict[type[Exception], int] = {
    ValidationError: 400,
    HeroNotFoundError: 404,
    RepositoryTimeoutError: 504,
    RepositoryError: 503,
}


def document_cache() -> HeroDocumentCache:
    return django_apps.get_app_config("heroes").document_cache


# --- /heroes ---
class HeroListView(BaseAppView):
    """GET /api/v1/heroes – list heroes.

    Filters: `class`, `faction`, `equipment` (heroes using that item) and
    `ids` (comma-separated slugs).
    """

    ERROR_STATUS = HERO_ERROR_STATUS

    def _get_params(self, request: HttpRequest, **kwargs) -> dict[str, Any]:
        page = self.get_page(request)
        return {
            "page": page,
            "hero_class": request.GET.get("class", "").strip().lower(),
            "faction": request.GET.get("faction", "").strip().lower(),
            "equipment": request.GET.get("equipment", "").strip(),
            "ids": [s for s in (p.strip() for p in request.GET.get("ids", "").split(",")) if s],
        }

    async def _fetch(self, p: dict[str, Any]) -> list[HeroDocument]:
        cache = document_cache()
        if p["equipment"]:
            heroes = await cache.get_heroes_using_item(p["equipment"])
            return [h for h in heroes if h.id in p["ids"]] if p["ids"] else heroes
        if p["ids"]:
            return await cache.get_many(p["ids"])
        return await cache.get_all()

    async def _produce_payload(self, p: dict[str, Any]) -> dict[str, Any]:
        heroes = await self._fetch(p)
        if p["hero_class"]:
            heroes = [h for h in heroes if h.hero_class == p["hero_class"]]
        if p["faction"]:
            heroes = [h for h in heroes if h.faction == p["faction"]]

        page = p["page"]
        total = len(heroes)
        return {
            "count": total,
            "page": page.number,
            "page_size": page.size,
            "total_pages": page.total_pages(total),
            "data": [h.to_wire() for h in heroes[page.offset : page.offset + page.size]],
        }


# --- /heroes/<hero_id> ---
class HeroDetailView(BaseAsyncView):
    """GET, PATCH and DELETE /api/v1/heroes/{hero_id}."""

    ERROR_STATUS = HERO_ERROR_STATUS

    async def get(self, request: HttpRequest, hero_id: str) -> OrjsonResponse:
        document = await document_cache().get_by_id(hero_id)
        if document is None:
            msg = f"Hero {hero_id} not found."
            raise Http404(msg)
        return OrjsonResponse(document.to_wire())

    async def patch(self, request: HttpRequest, hero_id: str) -> OrjsonResponse:
        body = self.get_json_body(request)
        if not isinstance(body, dict):
            msg = "Expected a JSON object."
            raise BadRequest(msg)
        document = await document_cache().update(hero_id, body)
        return OrjsonResponse(document.to_wire())

    async def delete(self, request: HttpRequest, hero_id: str) -> HttpResponse:
        await document_cache().delete(hero_id)
        return HttpResponse(status=204)


# --- /heroes/export ---
class HeroExportView(BaseAsyncView):
    """GET /api/v1/heroes/export – every hero in the import/export file format."""

    ERROR_STATUS = HERO_ERROR_STATUS

    async def get(self, request: HttpRequest) -> HttpResponse:
        heroes = await document_cache().get_all()
        response = HttpResponse(export_documents(heroes), content_type="application/json")
        if self.get_bool_param(request, "download"):
            response["Content-Disposition"] = 'attachment; filename="heroes.json"'
        log.info("Exported heroes", count=len(heroes))
        return response
