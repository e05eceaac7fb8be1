# /home/ubuntu/herowars/apps/heroes/services/integrity.py
# ================================================================================
"""
Consistency checks over the row collections of a bulk migration.

Read-only: findings are returned, never raised, so they can be surfaced next
to writes that already happened.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from apps.heroes.conf import GLYPH_SLOT_COUNT, tier_slot_limit

if TYPE_CHECKING:
    from collections.abc import Sequence

    from apps.heroes.schemas import ArtifactRow, EquipmentSlotRow, GlyphRow, HeroRow, SkinRow


class RowCollections(Protocol):
    heroes: Sequence[HeroRow]
    artifacts: Sequence[ArtifactRow]
    skins: Sequence[SkinRow]
    glyphs: Sequence[GlyphRow]
    equipment_slots: Sequence[EquipmentSlotRow]


@dataclass(slots=True, frozen=True)
class IntegrityViolation:
    code: str
    message: str
    count: int = 0

    def __str__(self) -> str:
        return self.message


def _duplicate_hero_ids(heroes: Sequence[HeroRow]) -> list[str]:
    counts = Counter(h.hero_id for h in heroes)
    return sorted(hero_id for hero_id, n in counts.items() if n > 1)


def check_integrity(result: RowCollections) -> list[IntegrityViolation]:
    """
    Runs every check and returns one violation per failing check.

    Checks, in order: duplicate hero ids, related rows without a hero (per
    collection), glyph positions outside 1..5, slot positions outside their
    tier's range, duplicate glyph positions and duplicate slot positions.
    """
    violations: list[IntegrityViolation] = []

    if duplicates := _duplicate_hero_ids(result.heroes):
        violations.append(
            IntegrityViolation(
                "duplicate_hero_id",
                f"Duplicate hero ids found: {', '.join(duplicates)}",
                len(duplicates),
            ),
        )

    hero_ids = {h.hero_id for h in result.heroes}
    for label, rows in (
        ("artifacts", result.artifacts),
        ("skins", result.skins),
        ("glyphs", result.glyphs),
        ("equipment slots", result.equipment_slots),
    ):
        if orphans := sum(1 for r in rows if r.hero_id not in hero_ids):
            violations.append(
                IntegrityViolation(
                    "orphan_rows",
                    f"Found {orphans} {label} with missing hero references",
                    orphans,
                ),
            )

    if bad_glyphs := sum(1 for g in result.glyphs if not 1 <= g.position <= GLYPH_SLOT_COUNT):
        violations.append(
            IntegrityViolation(
                "glyph_position",
                f"Found {bad_glyphs} glyphs with invalid positions (must be 1-{GLYPH_SLOT_COUNT})",
                bad_glyphs,
            ),
        )

    bad_slots = [
        s for s in result.equipment_slots if not 1 <= s.slot_position <= tier_slot_limit(s.quality_tier)
    ]
    if bad_slots:
        tiers = sorted({s.quality_tier for s in bad_slots})
        violations.append(
            IntegrityViolation(
                "equipment_position",
                f"Found {len(bad_slots)} equipment slots with invalid positions for tiers: {', '.join(tiers)}",
                len(bad_slots),
            ),
        )

    glyph_keys = Counter((g.hero_id, g.position) for g in result.glyphs)
    if dup_glyphs := sum(n - 1 for n in glyph_keys.values() if n > 1):
        violations.append(
            IntegrityViolation(
                "duplicate_glyph_position",
                f"Found {dup_glyphs} duplicate glyph positions",
                dup_glyphs,
            ),
        )

    slot_keys = Counter((s.hero_id, s.quality_tier, s.slot_position) for s in result.equipment_slots)
    if dup_slots := sum(n - 1 for n in slot_keys.values() if n > 1):
        violations.append(
            IntegrityViolation(
                "duplicate_slot_position",
                f"Found {dup_slots} duplicate equipment slot positions",
                dup_slots,
            ),
        )

    return violations


def validate_migration_result(result: RowCollections) -> list[str]:
    """Human-readable form of `check_integrity`; empty when consistent."""
    return [v.message for v in check_integrity(result)]
