# /home/ubuntu/herowars/apps/heroes/schemas/hero_rows.py
# ================================================================================
"""
Flat, normalized row shapes for the five hero tables.

Each row is a frozen DTO keyed by `hero_id`; together they are the relational
form of one canonical hero document.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import TYPE_CHECKING, Any, ClassVar

from apps.heroes.conf import DEFAULT_STAT_VALUE

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class HeroRow:
    """Scalar hero fields, one row per hero."""

    hero_id: str
    name: str
    hero_class: str
    faction: str
    main_stat: str
    attack_types: tuple[str, ...] = ()
    stone_sources: tuple[str, ...] = ()
    order_rank: int = 1
    updated_on: datetime | None = None

    PATCHABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "hero_class",
        "faction",
        "main_stat",
        "attack_types",
        "stone_sources",
        "order_rank",
        "updated_on",
    )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ArtifactRow:
    hero_id: str
    artifact_type: str  # weapon | book | ring
    name: str | None
    primary_buff: str | None = None
    secondary_buff: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class SkinRow:
    """A skin; `stat_value` is default-filled because source documents lack it."""

    hero_id: str
    name: str
    stat_type: str
    stat_value: int = DEFAULT_STAT_VALUE
    has_plus: bool = False
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class GlyphRow:
    hero_id: str
    position: int  # 1..5
    stat_type: str
    stat_value: int = DEFAULT_STAT_VALUE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class EquipmentSlotRow:
    hero_id: str
    quality_tier: str
    slot_position: int  # 1..tier limit
    equipment_id: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class HeroRowSet:
    """All normalized rows belonging to a single hero."""

    hero: HeroRow
    artifacts: tuple[ArtifactRow, ...] = field(default=())
    skins: tuple[SkinRow, ...] = field(default=())
    glyphs: tuple[GlyphRow, ...] = field(default=())
    equipment_slots: tuple[EquipmentSlotRow, ...] = field(default=())

    @property
    def hero_id(self) -> str:
        return self.hero.hero_id

    def related_counts(self) -> dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self) if f.name != "hero"}

    def to_dict(self) -> dict[str, Any]:
        return {
            "hero": self.hero.to_dict(),
            "artifacts": [r.to_dict() for r in self.artifacts],
            "skins": [r.to_dict() for r in self.skins],
            "glyphs": [r.to_dict() for r in self.glyphs],
            "equipment_slots": [r.to_dict() for r in self.equipment_slots],
        }
