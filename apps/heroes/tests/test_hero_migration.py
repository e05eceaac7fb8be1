# /home/ubuntu/herowars/apps/heroes/tests/test_hero_migration.py
import pytest

from apps.heroes.errors import TransformationError, ValidationError
from apps.heroes.schemas import EquipmentSlotRow, GlyphRow, HeroRow, SkinRow
from apps.heroes.services import (
    MigrationMode,
    MigrationResult,
    check_integrity,
    migrate_documents,
    progress_logger,
    validate_migration_result,
)


def _batch(hero_payload):
    broken = hero_payload(slug="aurora", name="Aurora")
    del broken["name"]
    return [
        hero_payload(),
        broken,
        hero_payload(slug="celeste", name="Celeste"),
    ]


def test_lenient_migration_skips_invalid_documents(hero_payload):
    result = migrate_documents(_batch(hero_payload))

    assert [h.hero_id for h in result.heroes] == ["astaroth", "celeste"]
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.document_id == "aurora"
    assert error.index == 1
    assert "aurora" in error.message
    assert isinstance(error.cause, ValidationError)
    assert error.cause.field == "name"


def test_lenient_migration_preserves_input_order(hero_payload):
    payloads = [hero_payload(slug=s, name=s.title()) for s in ("zed", "astaroth", "mira")]

    result = migrate_documents(payloads)

    assert [h.hero_id for h in result.heroes] == ["zed", "astaroth", "mira"]
    assert [s.hero_id for s in result.skins] == ["zed", "zed", "astaroth", "astaroth", "mira", "mira"]


def test_strict_migration_raises_first_failure(hero_payload):
    with pytest.raises(TransformationError) as exc_info:
        migrate_documents(_batch(hero_payload), mode=MigrationMode.STRICT)

    assert exc_info.value.index == 1
    assert isinstance(exc_info.value.__cause__, ValidationError)


def test_strict_mode_accepts_plain_string(hero_payload):
    with pytest.raises(TransformationError):
        migrate_documents(_batch(hero_payload), mode="strict")


def test_progress_reported_after_every_document(hero_payload):
    calls: list[tuple[int, int]] = []

    migrate_documents(_batch(hero_payload), on_progress=lambda done, total: calls.append((done, total)))

    assert calls == [(1, 3), (2, 3), (3, 3)]


def test_progress_logger_is_a_callback(hero_payload):
    result = migrate_documents([hero_payload()], on_progress=progress_logger("test"))

    assert result.summary()["heroes"] == 1


def test_empty_batch_yields_empty_result():
    result = migrate_documents([])

    assert result.summary() == {
        "heroes": 0,
        "artifacts": 0,
        "skins": 0,
        "glyphs": 0,
        "equipment_slots": 0,
        "errors": 0,
    }


def test_row_sets_regroup_rows_per_hero(hero_payload):
    result = migrate_documents([hero_payload(), hero_payload(slug="celeste", name="Celeste")])

    row_sets = result.row_sets()

    assert [rs.hero_id for rs in row_sets] == ["astaroth", "celeste"]
    assert all(g.hero_id == "celeste" for g in row_sets[1].glyphs)
    assert row_sets[0].related_counts() == {"artifacts": 3, "skins": 2, "glyphs": 4, "equipment_slots": 9}


# ─── integrity ───


def test_clean_migration_has_no_findings(hero_payload):
    result = migrate_documents([hero_payload(), hero_payload(slug="celeste", name="Celeste")])

    assert validate_migration_result(result) == []


def test_duplicate_hero_ids_reported(hero_payload):
    result = migrate_documents([hero_payload(), hero_payload(name="Astaroth Again")])

    messages = validate_migration_result(result)

    assert any("Duplicate hero ids found: astaroth" in m for m in messages)
    assert len(result.row_sets()) == 1


def test_orphans_and_bad_positions_reported():
    result = MigrationResult(
        heroes=[HeroRow("astaroth", "Astaroth", "tank", "progress", "strength")],
        skins=[SkinRow("ghost", "Default Skin", "armor")],
        glyphs=[
            GlyphRow("astaroth", 6, "armor"),
            GlyphRow("astaroth", 2, "armor"),
            GlyphRow("astaroth", 2, "dodge"),
        ],
        equipment_slots=[
            EquipmentSlotRow("astaroth", "white", 7, "w7"),
            EquipmentSlotRow("astaroth", "green", 1, "g1"),
            EquipmentSlotRow("astaroth", "green", 1, "g1-dup"),
        ],
    )

    codes = {v.code: v for v in check_integrity(result)}

    assert set(codes) == {
        "orphan_rows",
        "glyph_position",
        "equipment_position",
        "duplicate_glyph_position",
        "duplicate_slot_position",
    }
    assert codes["orphan_rows"].message == "Found 1 skins with missing hero references"
    assert "white" in codes["equipment_position"].message
    assert codes["duplicate_slot_position"].count == 1


def test_one_orphan_finding_per_collection():
    result = MigrationResult(
        skins=[SkinRow("ghost", "Default Skin", "armor")],
        glyphs=[GlyphRow("ghost", 1, "armor")],
    )

    orphan_messages = [v.message for v in check_integrity(result) if v.code == "orphan_rows"]

    assert orphan_messages == [
        "Found 1 skins with missing hero references",
        "Found 1 glyphs with missing hero references",
    ]
