# /home/ubuntu/herowars/apps/heroes/services/migration.py
# ================================================================================
"""
Bulk conversion of hero documents into row collections.

Runs `denormalize` over an ordered batch. In lenient mode a bad document is
recorded and skipped; in strict mode the first failure aborts the batch.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from apps.heroes.errors import HeroDataError, TransformationError
from apps.heroes.schemas import HeroRowSet

from .denormalizer import denormalize, document_id_of

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from apps.heroes.schemas import ArtifactRow, EquipmentSlotRow, GlyphRow, HeroRow, SkinRow

    from .denormalizer import DocumentInput

log = structlog.get_logger(__name__).bind(component="HeroMigration")

type ProgressCallback = Callable[[int, int], None]


class MigrationMode(StrEnum):
    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(slots=True)
class MigrationResult:
    """Row collections produced by one bulk run, plus per-document errors."""

    heroes: list[HeroRow] = field(default_factory=list)
    artifacts: list[ArtifactRow] = field(default_factory=list)
    skins: list[SkinRow] = field(default_factory=list)
    glyphs: list[GlyphRow] = field(default_factory=list)
    equipment_slots: list[EquipmentSlotRow] = field(default_factory=list)
    errors: list[TransformationError] = field(default_factory=list)

    def add(self, row_set: HeroRowSet) -> None:
        self.heroes.append(row_set.hero)
        self.artifacts.extend(row_set.artifacts)
        self.skins.extend(row_set.skins)
        self.glyphs.extend(row_set.glyphs)
        self.equipment_slots.extend(row_set.equipment_slots)

    def row_sets(self) -> list[HeroRowSet]:
        """
        Regroups the flat collections per hero, in hero order.

        Only the first hero row of a duplicated id is kept; related rows whose
        hero is absent are left out.
        """
        grouped: dict[str, dict[str, list]] = defaultdict(lambda: defaultdict(list))
        for name in ("artifacts", "skins", "glyphs", "equipment_slots"):
            for row in getattr(self, name):
                grouped[row.hero_id][name].append(row)

        row_sets: list[HeroRowSet] = []
        seen: set[str] = set()
        for hero in self.heroes:
            if hero.hero_id in seen:
                continue
            seen.add(hero.hero_id)
            related = grouped.get(hero.hero_id, {})
            row_sets.append(
                HeroRowSet(
                    hero=hero,
                    artifacts=tuple(related.get("artifacts", ())),
                    skins=tuple(related.get("skins", ())),
                    glyphs=tuple(related.get("glyphs", ())),
                    equipment_slots=tuple(related.get("equipment_slots", ())),
                ),
            )
        return row_sets

    def summary(self) -> dict[str, int]:
        return {
            "heroes": len(self.heroes),
            "artifacts": len(self.artifacts),
            "skins": len(self.skins),
            "glyphs": len(self.glyphs),
            "equipment_slots": len(self.equipment_slots),
            "errors": len(self.errors),
        }


def progress_logger(operation: str) -> ProgressCallback:
    """A progress callback that reports through structlog."""
    bound = log.bind(operation=operation)

    def _report(processed: int, total: int) -> None:
        pct = round(processed * 100 / total, 1) if total else 100.0
        bound.info("Progress", processed=processed, total=total, percent=pct)

    return _report


def migrate_documents(
    documents: Sequence[DocumentInput],
    *,
    mode: MigrationMode = MigrationMode.LENIENT,
    on_progress: ProgressCallback | None = None,
    now: datetime | None = None,
) -> MigrationResult:
    """
    Denormalizes every document in `documents`, preserving input order.

    `on_progress(processed, total)` fires after each document. Strict mode
    raises the first `TransformationError`; lenient mode collects them.
    """
    mode = MigrationMode(mode)
    total = len(documents)
    result = MigrationResult()
    log.info("Starting hero migration", total=total, mode=str(mode))

    for index, raw in enumerate(documents):
        try:
            result.add(denormalize(raw, now=now))
        except HeroDataError as exc:
            error = TransformationError(document_id_of(raw), exc, index=index)
            if mode is MigrationMode.STRICT:
                log.error("Aborting strict migration", index=index, error=error.message)
                raise error from exc
            log.warning("Skipping invalid hero document", index=index, error=error.message)
            result.errors.append(error)

        if on_progress is not None:
            on_progress(index + 1, total)

    log.info("Hero migration finished", **result.summary())
    return result
