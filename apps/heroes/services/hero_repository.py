# /home/ubuntu/herowars/apps/heroes/services/hero_repository.py
# ================================================================================
"""
DjangoHeroRepository – async access to the five hero tables.

Reads use the async ORM. Multi-table writes run in one transaction on the
sync side via `sync_to_async(thread_sensitive=True)`. Database failures
surface as `RepositoryError`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction

from apps.heroes.errors import HeroAlreadyExistsError, HeroNotFoundError, RepositoryError
from apps.heroes.models import Hero, HeroArtifact, HeroEquipmentSlot, HeroGlyph, HeroSkin
from apps.heroes.schemas import HeroRow

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from apps.heroes.schemas import HeroRowSet

log = structlog.get_logger(__name__).bind(component="DjangoHeroRepository")


@contextmanager
def _database_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except DatabaseError as exc:
        log.error("Repository operation failed", operation=operation, err=str(exc), **context)
        msg = f"{operation} failed: {exc}"
        raise RepositoryError(msg) from exc


class DjangoHeroRepository:
    """Implements `HeroRepositoryProtocol` on top of the Django ORM."""

    async def find_all(self) -> list[HeroRow]:
        with _database_errors("find_all"):
            return [hero.to_row() async for hero in Hero.objects.ordered()]

    async def find_by_id(self, hero_id: str) -> HeroRow | None:
        with _database_errors("find_by_id", hero_id=hero_id):
            hero = await Hero.objects.filter(slug=hero_id).afirst()
        return hero.to_row() if hero is not None else None

    async def find_using_equipment(self, equipment_id: str) -> list[HeroRow]:
        with _database_errors("find_using_equipment", equipment_id=equipment_id):
            heroes = Hero.objects.filter(equipment_slots__equipment_id=equipment_id).distinct().ordered()
            return [hero.to_row() async for hero in heroes]

    async def find_with_all_data(self, hero_id: str) -> HeroRowSet:
        with _database_errors("find_with_all_data", hero_id=hero_id):
            try:
                hero = await Hero.objects.with_all_data().aget(slug=hero_id)
            except Hero.DoesNotExist as exc:
                raise HeroNotFoundError(hero_id) from exc
            return await sync_to_async(hero.to_row_set)()

    async def update(self, hero_id: str, changes: Mapping[str, Any]) -> HeroRow:
        fields = {k: v for k, v in changes.items() if k in HeroRow.PATCHABLE_FIELDS}
        with _database_errors("update", hero_id=hero_id):
            return await sync_to_async(self._update_sync, thread_sensitive=True)(hero_id, fields)

    async def delete(self, hero_id: str) -> None:
        with _database_errors("delete", hero_id=hero_id):
            deleted, _ = await Hero.objects.filter(slug=hero_id).adelete()
        if not deleted:
            raise HeroNotFoundError(hero_id)
        log.info("Hero deleted", hero_id=hero_id)

    async def create_with_all_data(self, row_set: HeroRowSet) -> None:
        with _database_errors("create_with_all_data", hero_id=row_set.hero_id):
            await sync_to_async(self._create_sync, thread_sensitive=True)(row_set)

    # ─── sync helpers ───

    @staticmethod
    def _update_sync(hero_id: str, fields: dict[str, Any]) -> HeroRow:
        with transaction.atomic():
            hero = Hero.objects.select_for_update().filter(slug=hero_id).first()
            if hero is None:
                raise HeroNotFoundError(hero_id)
            for name, value in fields.items():
                setattr(hero, name, list(value) if name in ("attack_types", "stone_sources") else value)
            hero.save(update_fields=list(fields) or None)
        return hero.to_row()

    @staticmethod
    def _create_sync(row_set: HeroRowSet) -> None:
        with transaction.atomic():
            if Hero.objects.filter(slug=row_set.hero_id).exists():
                raise HeroAlreadyExistsError(row_set.hero_id)
            Hero.from_row(row_set.hero).save(force_insert=True)
            HeroArtifact.objects.bulk_create(HeroArtifact.from_row(r) for r in row_set.artifacts)
            HeroSkin.objects.bulk_create(HeroSkin.from_row(r) for r in row_set.skins)
            HeroGlyph.objects.bulk_create(HeroGlyph.from_row(r) for r in row_set.glyphs)
            HeroEquipmentSlot.objects.bulk_create(HeroEquipmentSlot.from_row(r) for r in row_set.equipment_slots)
        log.debug("Hero created", hero_id=row_set.hero_id, **row_set.related_counts())
