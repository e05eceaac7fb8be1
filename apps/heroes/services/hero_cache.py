# /home/ubuntu/herowars/apps/heroes/services/hero_cache.py
# ================================================================================
"""
HeroDocumentCache – a bounded, TTL-based read-through cache of decoded heroes.

Reads go to the repository on a miss and the decoded document is kept for
`ttl_s` seconds. When full, the entry with the fewest hits is evicted. The
"all heroes" listing lives in its own slot, outside the capacity count.
Writes go straight to the repository and invalidate what they touch.

Every repository call is bounded by `repository_timeout_s`.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from apps.heroes.conf import ALL_HEROES_CACHE_KEY, HeroCacheConfig
from apps.heroes.errors import HeroNotFoundError, RepositoryTimeoutError, ValidationError
from apps.heroes.schemas import HeroPatch

from .renormalizer import renormalize

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping

    from apps.heroes.schemas import HeroDocument, HeroRow

    from .protocols import HeroRepositoryProtocol

log = structlog.get_logger(__name__).bind(component="HeroDocumentCache")

type Clock = Callable[[], float]


@dataclass(slots=True)
class CacheEntry[T]:
    value: T
    inserted_at: float
    access_count: int = 0


class HeroDocumentCache:
    def __init__(
        self,
        repository: HeroRepositoryProtocol,
        config: HeroCacheConfig | None = None,
        *,
        clock: Clock = time.monotonic,
        wall_clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._repository = repository
        self._config = config or HeroCacheConfig()
        self._clock = clock
        self._wall_clock = wall_clock
        self._entries: dict[str, CacheEntry[HeroDocument]] = {}
        self._all: CacheEntry[list[HeroDocument]] | None = None
        # Bumped by every invalidation; reads that started earlier do not store.
        self._generation = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def config(self) -> HeroCacheConfig:
        return self._config

    # ─── reads ───

    async def get_by_id(self, hero_id: str) -> HeroDocument | None:
        """The decoded hero, or None when the repository has no such id."""
        if (document := self._lookup(hero_id)) is not None:
            return document

        generation = self._generation
        hero_row = await self._call("find_by_id", self._repository.find_by_id(hero_id))
        if hero_row is None:
            return None
        document = await self._decode(hero_row)
        self._store(hero_id, document, generation)
        return document

    async def get_many(self, hero_ids: Iterable[str]) -> list[HeroDocument]:
        """
        The requested heroes sorted by name.

        Fresh entries are served from the cache and only the misses go to the
        repository. Unknown ids are left out.
        """
        documents = [d for hero_id in dict.fromkeys(hero_ids) if (d := await self.get_by_id(hero_id)) is not None]
        documents.sort(key=lambda d: d.name.casefold())
        return documents

    async def get_heroes_using_item(self, equipment_id: str) -> list[HeroDocument]:
        """Heroes with `equipment_id` in any equipment slot, sorted by name. Not cached."""
        rows = await self._call("find_using_equipment", self._repository.find_using_equipment(equipment_id))
        documents = [await self._decode(row) for row in rows]
        documents.sort(key=lambda d: d.name.casefold())
        log.debug("Loaded heroes using item", equipment_id=equipment_id, count=len(documents))
        return documents

    async def get_all(self) -> list[HeroDocument]:
        """Every hero, decoded and sorted by name."""
        if self._all is not None and self._fresh(self._all):
            self._all.access_count += 1
            self._hits += 1
            return list(self._all.value)
        self._misses += 1

        generation = self._generation
        rows = await self._call("find_all", self._repository.find_all())
        documents = [await self._decode(row) for row in rows]
        documents.sort(key=lambda d: d.name.casefold())
        for document in documents:
            self._store(document.id, document, generation)
        if self._config.enabled and generation == self._generation:
            self._all = CacheEntry(documents, self._clock())
        log.debug("Loaded all heroes", key=ALL_HEROES_CACHE_KEY, count=len(documents))
        return list(documents)

    # ─── writes ───

    async def update(self, hero_id: str, patch: HeroPatch | Mapping[str, Any]) -> HeroDocument:
        """
        Applies a scalar patch and returns the freshly decoded hero.

        The patch is validated before the repository is touched. The id may
        be echoed but not changed; `updated_on` is always stamped. The result
        is not cached: the next read goes to the repository.
        """
        parsed = self._parse_patch(hero_id, patch)
        if parsed.id is not None and parsed.id != hero_id:
            msg = f"cannot change hero id from {hero_id!r} to {parsed.id!r}"
            raise ValidationError("id", msg, document_id=hero_id)

        changes = parsed.row_changes()
        changes["updated_on"] = self._wall_clock()
        hero_row = await self._call("update", self._repository.update(hero_id, changes))
        self.invalidate(hero_id)
        log.info("Hero updated", hero_id=hero_id, fields=sorted(changes))
        return await self._decode(hero_row)

    async def delete(self, hero_id: str) -> None:
        """Deletes the hero; raises `HeroNotFoundError` when it does not exist."""
        if await self._call("find_by_id", self._repository.find_by_id(hero_id)) is None:
            raise HeroNotFoundError(hero_id)
        await self._call("delete", self._repository.delete(hero_id))
        self.invalidate(hero_id)
        log.info("Hero deleted", hero_id=hero_id)

    # ─── maintenance ───

    def invalidate(self, hero_id: str) -> None:
        self._entries.pop(hero_id, None)
        self._all = None
        self._generation += 1

    def clear(self) -> None:
        self._entries.clear()
        self._all = None
        self._generation += 1
        self._hits = self._misses = self._evictions = 0
        log.info("Hero cache cleared")

    def stats(self) -> dict[str, Any]:
        return {
            "enabled": self._config.enabled,
            "size": len(self._entries),
            "max_entries": self._config.max_entries,
            "all_cached": self._all is not None,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }

    # ─── internals ───

    def _fresh(self, entry: CacheEntry[Any]) -> bool:
        return self._clock() - entry.inserted_at < self._config.ttl_s

    def _lookup(self, hero_id: str) -> HeroDocument | None:
        entry = self._entries.get(hero_id)
        if entry is None:
            self._misses += 1
            return None
        if not self._fresh(entry):
            del self._entries[hero_id]
            self._misses += 1
            log.debug("Cache entry expired", hero_id=hero_id)
            return None
        entry.access_count += 1
        self._hits += 1
        return entry.value

    def _store(self, hero_id: str, document: HeroDocument, generation: int) -> None:
        if not self._config.enabled:
            return
        if generation != self._generation:
            log.debug("Dropped read overtaken by a write", hero_id=hero_id)
            return
        if hero_id not in self._entries and len(self._entries) >= self._config.max_entries:
            self._evict_one()
        self._entries[hero_id] = CacheEntry(document, self._clock())

    def _evict_one(self) -> None:
        # min() keeps the first of equal counts, i.e. the oldest insertion.
        victim = min(self._entries, key=lambda k: self._entries[k].access_count)
        del self._entries[victim]
        self._evictions += 1
        log.debug("Evicted cache entry", hero_id=victim)

    async def _decode(self, hero_row: HeroRow) -> HeroDocument:
        row_set = await self._call("find_with_all_data", self._repository.find_with_all_data(hero_row.hero_id))
        return renormalize(
            hero_row,
            artifacts=row_set.artifacts,
            skins=row_set.skins,
            glyphs=row_set.glyphs,
            equipment_slots=row_set.equipment_slots,
        )

    async def _call[T](self, operation: str, awaitable: Awaitable[T]) -> T:
        timeout_s = self._config.repository_timeout_s
        try:
            async with asyncio.timeout(timeout_s):
                return await awaitable
        except TimeoutError as exc:
            log.error("Repository call timed out", operation=operation, timeout_s=timeout_s)
            raise RepositoryTimeoutError(operation, timeout_s) from exc

    @staticmethod
    def _parse_patch(hero_id: str, patch: HeroPatch | Mapping[str, Any]) -> HeroPatch:
        if isinstance(patch, HeroPatch):
            return patch
        try:
            return HeroPatch.model_validate(patch)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, document_id=hero_id, rename=HeroPatch.field_name) from exc
