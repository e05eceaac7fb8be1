# /home/ubuntu/herowars/apps/heroes/schemas/document.py
# ================================================================================
"""
Pydantic models for the canonical (nested) hero document and its update patch.

Field names are Pythonic; aliases match the keys of the JSON import/export
format (`slug`, `class`, `attack_type`, ...).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from apps.heroes.conf import GLYPH_SLOT_COUNT, AttackType, Faction, HeroClass, MainStat


class GlyphSlots(Mapping[int, str]):
    """
    The five glyph slots of a hero as a mapping from position (1..5) to stat.

    Empty slots are simply absent keys. The list form with `None` gaps exists
    only at the wire boundary (`from_sequence` / `to_sequence`).
    """

    __slots__ = ("_slots",)

    def __init__(self, slots: Mapping[int, str] | None = None) -> None:
        validated: dict[int, str] = {}
        for position, stat in (slots or {}).items():
            if isinstance(position, bool) or not isinstance(position, int):
                msg = f"glyph position must be an integer, got {position!r}"
                raise ValueError(msg)
            if not 1 <= position <= GLYPH_SLOT_COUNT:
                msg = f"glyph position {position} outside 1..{GLYPH_SLOT_COUNT}"
                raise ValueError(msg)
            if stat is None or stat == "":
                continue
            if not isinstance(stat, str):
                msg = f"glyph stat must be a string, got {type(stat).__name__}"
                raise ValueError(msg)
            validated[position] = stat
        self._slots = dict(sorted(validated.items()))

    @classmethod
    def from_sequence(cls, values: Sequence[str | None]) -> GlyphSlots:
        if len(values) > GLYPH_SLOT_COUNT:
            msg = f"expected at most {GLYPH_SLOT_COUNT} glyph slots, got {len(values)}"
            raise ValueError(msg)
        return cls({idx + 1: stat for idx, stat in enumerate(values) if stat})

    def to_sequence(self) -> list[str | None]:
        return [self._slots.get(pos) for pos in range(1, GLYPH_SLOT_COUNT + 1)]

    def __getitem__(self, position: int) -> str:
        return self._slots[position]

    def __iter__(self) -> Iterator[int]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"GlyphSlots({self.to_sequence()!r})"


# ─── Sub-groups ────────────────────────────────────────────────────────────────


class HeroWeapon(BaseModel):
    name: str
    team_buff: str
    team_buff_secondary: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class HeroArtifacts(BaseModel):
    weapon: HeroWeapon | None = None
    book: str | None = None
    ring: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    def is_empty(self) -> bool:
        return self.weapon is None and not self.book and not self.ring


class HeroSkin(BaseModel):
    name: str
    stat: str
    has_plus: bool = False
    source: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")


# ─── Canonical document ────────────────────────────────────────────────────────


class _WireModel(BaseModel):
    @classmethod
    def field_name(cls, key: str) -> str:
        """Maps a wire key (alias) back to the field name."""
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return key


class HeroDocument(_WireModel):
    """
    One hero in nested, document form.

    Optional groups are normalised on construction so that "absent" has a
    single representation: empty skins, empty item tiers and an all-empty
    glyph row all collapse to `None`.
    """

    id: str = Field(alias="slug")
    name: str
    hero_class: str = Field(alias="class")
    faction: str
    main_stat: str
    attack_types: list[str] = Field(default_factory=list, alias="attack_type")
    stone_sources: list[str] = Field(default_factory=list, alias="stone_source")
    order_rank: int
    updated_on: datetime | None = None

    artifacts: HeroArtifacts | None = None
    skins: list[HeroSkin] | None = None
    glyphs: GlyphSlots | None = None
    items: dict[str, list[str]] | None = None

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @field_validator("glyphs", mode="before")
    @classmethod
    def _coerce_glyphs(cls, v: Any) -> GlyphSlots | None:
        if v is None or isinstance(v, GlyphSlots):
            slots = v
        elif isinstance(v, Mapping):
            slots = GlyphSlots({int(k): s for k, s in v.items()})
        elif isinstance(v, Sequence) and not isinstance(v, str):
            slots = GlyphSlots.from_sequence(list(v))
        else:
            msg = "glyphs must be a list of up to 5 stats or a position mapping"
            raise ValueError(msg)
        return slots or None

    @field_validator("skins")
    @classmethod
    def _empty_skins_to_none(cls, v: list[HeroSkin] | None) -> list[HeroSkin] | None:
        return v or None

    @field_validator("items")
    @classmethod
    def _drop_empty_tiers(cls, v: dict[str, list[str]] | None) -> dict[str, list[str]] | None:
        if v is None:
            return None
        return {tier: ids for tier, ids in v.items() if ids} or None

    @field_validator("artifacts")
    @classmethod
    def _empty_artifacts_to_none(cls, v: HeroArtifacts | None) -> HeroArtifacts | None:
        return None if v is None or v.is_empty() else v

    @field_serializer("glyphs")
    def _serialize_glyphs(self, v: GlyphSlots | None) -> list[str | None] | None:
        return v.to_sequence() if v is not None else None

    def to_wire(self) -> dict[str, Any]:
        """Dumps the document with export-format keys and no null fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HeroPatch(_WireModel):
    """
    Partial update for a hero's scalar fields.

    Enumerated fields are validated strictly on write; the id may be echoed
    back but never changed.
    """

    id: str | None = Field(default=None, alias="slug")
    name: str | None = Field(default=None, min_length=1)
    hero_class: HeroClass | None = Field(default=None, alias="class")
    faction: Faction | None = None
    main_stat: MainStat | None = None
    attack_types: list[AttackType] | None = Field(default=None, alias="attack_type", min_length=1)
    stone_sources: list[str] | None = Field(default=None, alias="stone_source")
    order_rank: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_validator("name")
    @classmethod
    def _reject_blank_name(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            msg = "name cannot be blank"
            raise ValueError(msg)
        return v

    def row_changes(self) -> dict[str, Any]:
        """Returns the explicitly set fields, keyed by `HeroRow` attribute names."""
        changes = self.model_dump(mode="json", exclude_unset=True, exclude={"id"})
        return {k: v for k, v in changes.items() if v is not None}
