# /home/ubuntu/herowars/apps/heroes/tests/conftest.py
# ================================================================================
from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from apps.heroes.conf import HeroCacheConfig
from apps.heroes.errors import HeroAlreadyExistsError, HeroNotFoundError
from apps.heroes.schemas import HeroRow
from apps.heroes.services import HeroDocumentCache, denormalize

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from apps.heroes.schemas import HeroRowSet

FIXED_NOW = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)


def build_hero_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "slug": "astaroth",
        "name": "Astaroth",
        "class": "tank",
        "faction": "progress",
        "main_stat": "strength",
        "attack_type": ["physical"],
        "stone_source": ["Campaign", "Tower"],
        "order_rank": 3,
        "updated_on": "2024-05-01T12:00:00+00:00",
        "artifacts": {
            "weapon": {"name": "Righteous Maul", "team_buff": "armor", "team_buff_secondary": "magic defense"},
            "book": "Defender's Covenant",
            "ring": "Ring of Strength",
        },
        "skins": [
            {"name": "Default Skin", "stat": "health", "has_plus": False, "source": "Default"},
            {"name": "Winter Skin", "stat": "armor", "has_plus": True, "source": "Winter Event"},
        ],
        "glyphs": ["health", "armor", None, "strength", "magic defense"],
        "items": {
            "white": ["w1", "w2", "w3", "w4", "w5", "w6"],
            "green": ["g1", "g2"],
            "orange+4": ["o1"],
        },
    }
    payload.update(overrides)
    return payload


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryHeroRepository:
    """Dict-backed `HeroRepositoryProtocol` that counts calls per operation."""

    def __init__(self, row_sets: tuple[HeroRowSet, ...] = (), *, delay_s: float = 0.0) -> None:
        self.row_sets: dict[str, HeroRowSet] = {rs.hero_id: rs for rs in row_sets}
        self.calls: Counter[str] = Counter()
        self.delay_s = delay_s
        # Calls to a gated operation wait until the test sets the event.
        self.gates: dict[str, asyncio.Event] = {}

    async def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        if (gate := self.gates.get(operation)) is not None:
            await gate.wait()
        if self.delay_s:
            await asyncio.sleep(self.delay_s)

    async def find_all(self) -> list[HeroRow]:
        await self._enter("find_all")
        return [rs.hero for rs in self.row_sets.values()]

    async def find_by_id(self, hero_id: str) -> HeroRow | None:
        await self._enter("find_by_id")
        row_set = self.row_sets.get(hero_id)
        return row_set.hero if row_set is not None else None

    async def find_using_equipment(self, equipment_id: str) -> list[HeroRow]:
        await self._enter("find_using_equipment")
        heroes = [
            rs.hero for rs in self.row_sets.values() if any(s.equipment_id == equipment_id for s in rs.equipment_slots)
        ]
        return sorted(heroes, key=lambda h: h.name)

    async def find_with_all_data(self, hero_id: str) -> HeroRowSet:
        await self._enter("find_with_all_data")
        try:
            return self.row_sets[hero_id]
        except KeyError:
            raise HeroNotFoundError(hero_id) from None

    async def update(self, hero_id: str, changes: Mapping[str, Any]) -> HeroRow:
        await self._enter("update")
        if hero_id not in self.row_sets:
            raise HeroNotFoundError(hero_id)
        row_set = self.row_sets[hero_id]
        allowed = {k: v for k, v in changes.items() if k in HeroRow.PATCHABLE_FIELDS}
        for key in ("attack_types", "stone_sources"):
            if key in allowed:
                allowed[key] = tuple(allowed[key])
        hero = replace(row_set.hero, **allowed)
        self.row_sets[hero_id] = replace(row_set, hero=hero)
        return hero

    async def delete(self, hero_id: str) -> None:
        await self._enter("delete")
        if self.row_sets.pop(hero_id, None) is None:
            raise HeroNotFoundError(hero_id)

    async def create_with_all_data(self, row_set: HeroRowSet) -> None:
        await self._enter("create_with_all_data")
        if row_set.hero_id in self.row_sets:
            raise HeroAlreadyExistsError(row_set.hero_id)
        self.row_sets[row_set.hero_id] = row_set


@pytest.fixture
def hero_payload() -> Callable[..., dict[str, Any]]:
    return build_hero_payload


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryHeroRepository:
    return InMemoryHeroRepository()


@pytest.fixture
def seeded_repository() -> InMemoryHeroRepository:
    row_sets = tuple(
        denormalize(build_hero_payload(slug=slug, name=name))
        for slug, name in (("astaroth", "Astaroth"), ("celeste", "Celeste"), ("aurora", "Aurora"))
    )
    return InMemoryHeroRepository(row_sets)


@pytest.fixture
def cache_config() -> HeroCacheConfig:
    return HeroCacheConfig(ttl_s=60, max_entries=10, repository_timeout_s=1.0)


@pytest.fixture
def hero_cache(seeded_repository, cache_config, clock) -> HeroDocumentCache:
    return HeroDocumentCache(seeded_repository, cache_config, clock=clock, wall_clock=lambda: FIXED_NOW)


@pytest.fixture
def fresh_document_cache():
    """Empties the app-wide document cache around a test."""
    from django.apps import apps as django_apps

    cache = django_apps.get_app_config("heroes").document_cache
    cache.clear()
    yield cache
    cache.clear()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def repository_factory() -> type[InMemoryHeroRepository]:
    return InMemoryHeroRepository
