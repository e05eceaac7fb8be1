# /home/ubuntu/herowars/apps/heroes/services/denormalizer.py
# ================================================================================
"""
Splits one canonical hero document into the rows of the five hero tables.

The transform is pure: no I/O, no shared state. Unknown quality tiers are the
only data it drops, and it logs each one.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from apps.heroes.conf import QUALITY_TIERS, ArtifactType, tier_sort_key
from apps.heroes.errors import ValidationError
from apps.heroes.schemas import (
    ArtifactRow,
    EquipmentSlotRow,
    GlyphRow,
    HeroDocument,
    HeroRow,
    HeroRowSet,
    SkinRow,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from apps.heroes.schemas import HeroArtifacts, HeroSkin

log = structlog.get_logger(__name__).bind(component="HeroDenormalizer")

type DocumentInput = HeroDocument | Mapping[str, Any]


def document_id_of(raw: Any) -> str | None:
    """Best-effort id of a possibly invalid document, for error reporting."""
    if isinstance(raw, HeroDocument):
        return raw.id or None
    if isinstance(raw, Mapping):
        value = raw.get("slug", raw.get("id"))
        return value if isinstance(value, str) and value else None
    return None


def parse_document(raw: DocumentInput) -> HeroDocument:
    """Validates wire-format input into a `HeroDocument`."""
    if isinstance(raw, HeroDocument):
        return raw
    if not isinstance(raw, Mapping):
        msg = f"expected a hero object, got {type(raw).__name__}"
        raise ValidationError("document", msg)
    try:
        return HeroDocument.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(
            exc,
            document_id=document_id_of(raw),
            rename=HeroDocument.field_name,
        ) from exc


def _check_required(document: HeroDocument) -> None:
    if not document.id or not document.id.strip():
        raise ValidationError("id", "hero id is required and cannot be empty")
    if not document.name or not document.name.strip():
        raise ValidationError("name", "hero name is required", document_id=document.id)
    if document.order_rank <= 0:
        msg = f"must be a positive integer, got {document.order_rank}"
        raise ValidationError("order_rank", msg, document_id=document.id)


# ─── Per-group emitters ────────────────────────────────────────────────────────


def _artifact_rows(hero_id: str, artifacts: HeroArtifacts | None) -> Iterator[ArtifactRow]:
    if artifacts is None:
        return
    if (weapon := artifacts.weapon) is not None:
        yield ArtifactRow(
            hero_id=hero_id,
            artifact_type=ArtifactType.WEAPON.value,
            name=weapon.name,
            primary_buff=weapon.team_buff,
            secondary_buff=weapon.team_buff_secondary,
        )
    if artifacts.book:
        yield ArtifactRow(hero_id=hero_id, artifact_type=ArtifactType.BOOK.value, name=artifacts.book)
    if artifacts.ring:
        yield ArtifactRow(hero_id=hero_id, artifact_type=ArtifactType.RING.value, name=artifacts.ring)


def _skin_rows(hero_id: str, skins: list[HeroSkin] | None) -> Iterator[SkinRow]:
    for skin in skins or ():
        yield SkinRow(
            hero_id=hero_id,
            name=skin.name,
            stat_type=skin.stat,
            has_plus=skin.has_plus,
            source=skin.source,
        )


def _glyph_rows(document: HeroDocument) -> Iterator[GlyphRow]:
    for position, stat in (document.glyphs or {}).items():
        yield GlyphRow(hero_id=document.id, position=position, stat_type=stat)


def _equipment_rows(hero_id: str, items: dict[str, list[str]] | None) -> Iterator[EquipmentSlotRow]:
    for tier in sorted(items or {}, key=tier_sort_key):
        if tier not in QUALITY_TIERS:
            log.warning("Skipping unknown quality tier", hero_id=hero_id, tier=tier)
            continue
        for slot_position, equipment_id in enumerate(items[tier], start=1):
            yield EquipmentSlotRow(
                hero_id=hero_id,
                quality_tier=tier,
                slot_position=slot_position,
                equipment_id=equipment_id,
            )


# ─── Public API ────────────────────────────────────────────────────────────────


def denormalize(raw: DocumentInput, *, now: datetime | None = None) -> HeroRowSet:
    """
    Turns one hero document into its `HeroRowSet`.

    Raises `ValidationError` naming the offending field when the id, name or
    order rank is missing or invalid. A missing `updated_on` is stamped with
    `now` (default: the current UTC time).
    """
    document = parse_document(raw)
    _check_required(document)

    hero_id = document.id
    hero = HeroRow(
        hero_id=hero_id,
        name=document.name,
        hero_class=document.hero_class,
        faction=document.faction,
        main_stat=document.main_stat,
        attack_types=tuple(document.attack_types),
        stone_sources=tuple(document.stone_sources),
        order_rank=document.order_rank,
        updated_on=document.updated_on or now or datetime.now(UTC),
    )
    return HeroRowSet(
        hero=hero,
        artifacts=tuple(_artifact_rows(hero_id, document.artifacts)),
        skins=tuple(_skin_rows(hero_id, document.skins)),
        glyphs=tuple(_glyph_rows(document)),
        equipment_slots=tuple(_equipment_rows(hero_id, document.items)),
    )
