# /home/ubuntu/herowars/apps/heroes/services/renormalizer.py
# ================================================================================
"""
Reassembles a canonical hero document from the rows of the five hero tables.

Decoding is total: enumerated values outside their closed sets are replaced
by fallbacks, never rejected. Every substitution is logged and, when an
`audit` list is supplied, appended to it as an `EnumSubstitution`.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

import structlog

from apps.heroes.conf import (
    ATTACK_TYPE_FALLBACK,
    BOOK_NAME_FALLBACK,
    FACTION_FALLBACK,
    GLYPH_SLOT_COUNT,
    HERO_CLASS_FALLBACK,
    MAIN_STAT_FALLBACK,
    STAT_TYPE_FALLBACK,
    TEAM_BUFF_FALLBACK,
    ArtifactType,
    AttackType,
    BookName,
    Faction,
    HeroClass,
    MainStat,
    StatType,
    TeamBuff,
    tier_sort_key,
)
from apps.heroes.schemas import GlyphSlots, HeroArtifacts, HeroDocument, HeroSkin, HeroWeapon

from .choices import EnumSubstitution, coerce_choice, coerce_choices

if TYPE_CHECKING:
    from collections.abc import Iterable
    from enum import StrEnum

    from apps.heroes.schemas import (
        ArtifactRow,
        EquipmentSlotRow,
        GlyphRow,
        HeroRow,
        HeroRowSet,
        SkinRow,
    )

log = structlog.get_logger(__name__).bind(component="HeroRenormalizer")


class _Decoder:
    """Carries the hero id and audit sink through one decode."""

    __slots__ = ("audit", "hero_id")

    def __init__(self, hero_id: str, audit: list[EnumSubstitution] | None) -> None:
        self.hero_id = hero_id
        self.audit = audit

    def _record(self, field: str, raw: Any, fallback: Any) -> None:
        log.warning(
            "Substituted fallback for unknown value",
            hero_id=self.hero_id,
            field=field,
            raw=raw,
            fallback=fallback,
        )
        if self.audit is not None:
            self.audit.append(EnumSubstitution(self.hero_id, field, raw, fallback))

    def choice(self, field: str, choices: type[StrEnum], raw: Any, default: StrEnum) -> str:
        result = coerce_choice(choices, raw, default=default)
        if result.substituted:
            self._record(field, raw, result.value.value)
        return result.value.value

    def choices(self, field: str, choices: type[StrEnum], raw: Iterable[Any], default: StrEnum) -> list[str]:
        result = coerce_choices(choices, raw, default=default)
        values = [member.value for member in result.value]
        if result.substituted:
            self._record(field, list(result.raw), values)
        return values

    def owns(self, row: Any, group: str) -> bool:
        if row.hero_id == self.hero_id:
            return True
        log.warning("Ignoring row of another hero", hero_id=self.hero_id, group=group, row_hero_id=row.hero_id)
        return False

    # ─── groups ───

    def artifacts(self, rows: Iterable[ArtifactRow]) -> HeroArtifacts | None:
        weapon: HeroWeapon | None = None
        book: str | None = None
        ring: str | None = None
        for row in rows:
            if not self.owns(row, "artifacts") or not row.name:
                continue
            match row.artifact_type:
                case ArtifactType.WEAPON:
                    weapon = HeroWeapon(
                        name=row.name,
                        team_buff=self.choice(
                            "artifacts.weapon.team_buff", TeamBuff, row.primary_buff, TEAM_BUFF_FALLBACK
                        ),
                        team_buff_secondary=(
                            self.choice(
                                "artifacts.weapon.team_buff_secondary",
                                TeamBuff,
                                row.secondary_buff,
                                TEAM_BUFF_FALLBACK,
                            )
                            if row.secondary_buff
                            else None
                        ),
                    )
                case ArtifactType.BOOK:
                    book = self.choice("artifacts.book", BookName, row.name, BOOK_NAME_FALLBACK)
                case ArtifactType.RING:
                    ring = row.name
                case _:
                    log.warning("Ignoring unknown artifact type", hero_id=self.hero_id, artifact_type=row.artifact_type)
        if weapon is None and book is None and ring is None:
            return None
        return HeroArtifacts(weapon=weapon, book=book, ring=ring)

    def skins(self, rows: Iterable[SkinRow]) -> list[HeroSkin] | None:
        skins = [
            HeroSkin(
                name=row.name,
                stat=self.choice(f"skins.{row.name}.stat", StatType, row.stat_type, STAT_TYPE_FALLBACK),
                has_plus=bool(row.has_plus),
                source=row.source or None,
            )
            for row in rows
            if self.owns(row, "skins")
        ]
        return skins or None

    def glyphs(self, rows: Iterable[GlyphRow]) -> GlyphSlots | None:
        slots: dict[int, str] = {}
        for row in sorted((r for r in rows if self.owns(r, "glyphs")), key=lambda r: r.position):
            if not 1 <= row.position <= GLYPH_SLOT_COUNT:
                log.warning("Ignoring glyph outside 1..5", hero_id=self.hero_id, position=row.position)
                continue
            slots[row.position] = self.choice(
                f"glyphs.{row.position}", StatType, row.stat_type, STAT_TYPE_FALLBACK
            )
        return GlyphSlots(slots) or None

    def items(self, rows: Iterable[EquipmentSlotRow]) -> dict[str, list[str]] | None:
        by_tier: defaultdict[str, list[EquipmentSlotRow]] = defaultdict(list)
        for row in rows:
            if self.owns(row, "equipment_slots"):
                by_tier[row.quality_tier].append(row)

        items: dict[str, list[str]] = {}
        for tier in sorted(by_tier, key=tier_sort_key):
            ordered = sorted(by_tier[tier], key=lambda r: r.slot_position)
            if ids := [r.equipment_id for r in ordered if r.equipment_id]:
                items[tier] = ids
        return items or None


def renormalize(
    hero_row: HeroRow,
    *,
    artifacts: Iterable[ArtifactRow] = (),
    skins: Iterable[SkinRow] = (),
    glyphs: Iterable[GlyphRow] = (),
    equipment_slots: Iterable[EquipmentSlotRow] = (),
    audit: list[EnumSubstitution] | None = None,
) -> HeroDocument:
    """
    Builds the `HeroDocument` for `hero_row` from its related rows.

    Rows whose `hero_id` differs from the hero's are skipped with a warning.
    Empty groups come back absent (`None`), never as empty containers.
    """
    decoder = _Decoder(hero_row.hero_id, audit)
    return HeroDocument(
        id=hero_row.hero_id,
        name=hero_row.name,
        hero_class=decoder.choice("hero_class", HeroClass, hero_row.hero_class, HERO_CLASS_FALLBACK),
        faction=decoder.choice("faction", Faction, hero_row.faction, FACTION_FALLBACK),
        main_stat=decoder.choice("main_stat", MainStat, hero_row.main_stat, MAIN_STAT_FALLBACK),
        attack_types=decoder.choices("attack_types", AttackType, hero_row.attack_types, ATTACK_TYPE_FALLBACK),
        stone_sources=list(hero_row.stone_sources),
        order_rank=hero_row.order_rank,
        updated_on=hero_row.updated_on,
        artifacts=decoder.artifacts(artifacts),
        skins=decoder.skins(skins),
        glyphs=decoder.glyphs(glyphs),
        items=decoder.items(equipment_slots),
    )


def renormalize_row_set(row_set: HeroRowSet, *, audit: list[EnumSubstitution] | None = None) -> HeroDocument:
    return renormalize(
        row_set.hero,
        artifacts=row_set.artifacts,
        skins=row_set.skins,
        glyphs=row_set.glyphs,
        equipment_slots=row_set.equipment_slots,
        audit=audit,
    )
