# /home/ubuntu/herowars/apps/heroes/services/protocols.py
# ================================================================================
"""
Structural contract for hero storage.

The cache and the importer depend only on this shape, so the Django-backed
repository can be swapped for an in-memory one in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apps.heroes.schemas import HeroRow, HeroRowSet


class HeroRepositoryProtocol(Protocol):
    async def find_all(self) -> list[HeroRow]:
        """Every stored hero row."""
        ...

    async def find_by_id(self, hero_id: str) -> HeroRow | None:
        """The hero row for `hero_id`, or None when absent."""
        ...

    async def find_using_equipment(self, equipment_id: str) -> list[HeroRow]:
        """Distinct heroes with an equipment slot holding `equipment_id`, ordered by name."""
        ...

    async def find_with_all_data(self, hero_id: str) -> HeroRowSet:
        """The hero row plus all related rows; raises `HeroNotFoundError`."""
        ...

    async def update(self, hero_id: str, changes: Mapping[str, Any]) -> HeroRow:
        """Applies scalar changes and returns the stored row; raises `HeroNotFoundError`."""
        ...

    async def delete(self, hero_id: str) -> None:
        """Removes the hero and its related rows; raises `HeroNotFoundError`."""
        ...

    async def create_with_all_data(self, row_set: HeroRowSet) -> None:
        """Stores a hero and its related rows atomically; raises `HeroAlreadyExistsError`."""
        ...
