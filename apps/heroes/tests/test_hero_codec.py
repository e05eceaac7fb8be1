# /home/ubuntu/herowars/apps/heroes/tests/test_hero_codec.py
from datetime import UTC, datetime

import pytest

from apps.heroes.errors import ValidationError
from apps.heroes.schemas import (
    ArtifactRow,
    EquipmentSlotRow,
    GlyphRow,
    GlyphSlots,
    HeroDocument,
    HeroRow,
    SkinRow,
)
from apps.heroes.services import EnumSubstitution, denormalize, renormalize, renormalize_row_set


def _hero_row(**overrides) -> HeroRow:
    fields = {
        "hero_id": "astaroth",
        "name": "Astaroth",
        "hero_class": "tank",
        "faction": "progress",
        "main_stat": "strength",
        "attack_types": ("physical",),
        "order_rank": 3,
    }
    fields.update(overrides)
    return HeroRow(**fields)


# ─── denormalize ───


def test_denormalize_emits_one_row_per_group_member(hero_payload):
    row_set = denormalize(hero_payload())

    assert row_set.hero.hero_id == "astaroth"
    assert row_set.hero.attack_types == ("physical",)
    assert row_set.hero.updated_on == datetime(2024, 5, 1, 12, tzinfo=UTC)
    assert row_set.related_counts() == {"artifacts": 3, "skins": 2, "glyphs": 4, "equipment_slots": 9}

    weapon = row_set.artifacts[0]
    assert weapon == ArtifactRow("astaroth", "weapon", "Righteous Maul", "armor", "magic defense")
    assert [a.artifact_type for a in row_set.artifacts] == ["weapon", "book", "ring"]
    assert all(s.stat_value == 0 for s in row_set.skins)


def test_denormalize_keeps_glyph_positions_across_gaps(hero_payload):
    row_set = denormalize(hero_payload())

    assert [(g.position, g.stat_type) for g in row_set.glyphs] == [
        (1, "health"),
        (2, "armor"),
        (4, "strength"),
        (5, "magic defense"),
    ]


def test_sparse_glyphs_round_trip_at_their_positions(hero_payload):
    row_set = denormalize(hero_payload(glyphs=["health", None, "armor", None, "strength"]))

    assert [(g.position, g.stat_type) for g in row_set.glyphs] == [
        (1, "health"),
        (3, "armor"),
        (5, "strength"),
    ]
    assert renormalize_row_set(row_set).to_wire()["glyphs"] == ["health", None, "armor", None, "strength"]


def test_denormalize_orders_equipment_by_tier_then_slot(hero_payload):
    payload = hero_payload(items={"orange+4": ["o1"], "white": ["w1", "w2"], "green": ["g1"]})

    slots = denormalize(payload).equipment_slots

    assert [(s.quality_tier, s.slot_position, s.equipment_id) for s in slots] == [
        ("white", 1, "w1"),
        ("white", 2, "w2"),
        ("green", 1, "g1"),
        ("orange+4", 1, "o1"),
    ]


def test_denormalize_skips_unknown_quality_tier(hero_payload):
    payload = hero_payload(items={"mythic": ["m1"], "blue": ["b1"]})

    slots = denormalize(payload).equipment_slots

    assert [s.quality_tier for s in slots] == ["blue"]


def test_denormalize_stamps_missing_updated_on(hero_payload, fixed_now):
    payload = hero_payload()
    del payload["updated_on"]

    assert denormalize(payload, now=fixed_now).hero.updated_on == fixed_now


def test_denormalize_minimal_document_has_no_related_rows(hero_payload):
    payload = {k: v for k, v in hero_payload().items() if k not in {"artifacts", "skins", "glyphs", "items"}}

    row_set = denormalize(payload)

    assert row_set.related_counts() == {"artifacts": 0, "skins": 0, "glyphs": 0, "equipment_slots": 0}


def test_denormalize_rejects_empty_id(hero_payload):
    with pytest.raises(ValidationError) as exc_info:
        denormalize(hero_payload(slug=""))

    assert exc_info.value.field == "id"


def test_denormalize_names_missing_id_by_field_name(hero_payload):
    payload = hero_payload()
    del payload["slug"]

    with pytest.raises(ValidationError) as exc_info:
        denormalize(payload)

    assert exc_info.value.field == "id"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"name": ""}, "name"),
        ({"order_rank": 0}, "order_rank"),
        ({"order_rank": "first"}, "order_rank"),
    ],
)
def test_denormalize_rejects_invalid_required_fields(hero_payload, overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        denormalize(hero_payload(**overrides))

    assert exc_info.value.field == field
    assert exc_info.value.document_id == "astaroth"


def test_denormalize_rejects_more_than_five_glyphs(hero_payload):
    with pytest.raises(ValidationError) as exc_info:
        denormalize(hero_payload(glyphs=["armor"] * 6))

    assert exc_info.value.field == "glyphs"


def test_denormalize_rejects_non_object_input():
    with pytest.raises(ValidationError):
        denormalize(["not", "a", "hero"])


# ─── renormalize ───


def test_round_trip_reproduces_document(hero_payload):
    document = HeroDocument.model_validate(hero_payload())

    assert renormalize_row_set(denormalize(document)) == document


def test_round_trip_preserves_glyph_gap_positions(hero_payload):
    document = renormalize_row_set(denormalize(hero_payload(glyphs=[None, "armor", None, None, "dodge"])))

    assert document.glyphs == GlyphSlots({2: "armor", 5: "dodge"})
    assert document.to_wire()["glyphs"] == [None, "armor", None, None, "dodge"]


def test_renormalize_empty_groups_come_back_absent():
    document = renormalize(_hero_row())

    assert document.artifacts is None
    assert document.skins is None
    assert document.glyphs is None
    assert document.items is None


def test_renormalize_substitutes_unknown_hero_class():
    audit: list[EnumSubstitution] = []

    document = renormalize(_hero_row(hero_class="wizard"), audit=audit)

    assert document.hero_class == "tank"
    assert audit == [EnumSubstitution("astaroth", "hero_class", "wizard", "tank")]


def test_renormalize_substitutes_every_closed_field():
    audit: list[EnumSubstitution] = []
    hero = _hero_row(faction="void", main_stat="luck")
    artifacts = [
        ArtifactRow("astaroth", "weapon", "Maul", "laser", None),
        ArtifactRow("astaroth", "book", "Necronomicon"),
    ]
    skins = [SkinRow("astaroth", "Default Skin", "charisma")]
    glyphs = [GlyphRow("astaroth", 1, "speed")]

    document = renormalize(hero, artifacts=artifacts, skins=skins, glyphs=glyphs, audit=audit)

    assert document.faction == "honor"
    assert document.main_stat == "strength"
    assert document.artifacts.weapon.team_buff == "armor"
    assert document.artifacts.weapon.team_buff_secondary is None
    assert document.artifacts.book == "Tome of Arcane Knowledge"
    assert document.skins[0].stat == "strength"
    assert document.glyphs[1] == "strength"
    assert {a.field for a in audit} == {
        "faction",
        "main_stat",
        "artifacts.weapon.team_buff",
        "artifacts.book",
        "skins.Default Skin.stat",
        "glyphs.1",
    }


@pytest.mark.parametrize(
    ("stored", "expected", "substituted"),
    [
        (("magic", "laser"), ["magic"], True),
        (("laser",), ["physical"], True),
        ((), [], False),
        (("pure", "magic"), ["pure", "magic"], False),
    ],
)
def test_renormalize_filters_attack_types(stored, expected, substituted):
    audit: list[EnumSubstitution] = []

    document = renormalize(_hero_row(attack_types=stored), audit=audit)

    assert document.attack_types == expected
    assert bool(audit) is substituted


def test_renormalize_round_trips_ring_name():
    artifacts = [ArtifactRow("astaroth", "ring", "Ring of Strength")]

    document = renormalize(_hero_row(), artifacts=artifacts)

    assert document.artifacts.ring == "Ring of Strength"
    assert document.artifacts.weapon is None


def test_renormalize_orders_equipment_and_drops_empty_ids():
    slots = [
        EquipmentSlotRow("astaroth", "orange", 2, "o2"),
        EquipmentSlotRow("astaroth", "white", 2, "w2"),
        EquipmentSlotRow("astaroth", "orange", 1, "o1"),
        EquipmentSlotRow("astaroth", "white", 1, ""),
    ]

    document = renormalize(_hero_row(), equipment_slots=slots)

    assert list(document.items) == ["white", "orange"]
    assert document.items == {"white": ["w2"], "orange": ["o1", "o2"]}


def test_renormalize_ignores_rows_of_other_heroes_and_bad_glyph_positions():
    glyphs = [GlyphRow("astaroth", 3, "armor"), GlyphRow("astaroth", 7, "armor"), GlyphRow("aurora", 1, "dodge")]
    skins = [SkinRow("aurora", "Default Skin", "agility")]

    document = renormalize(_hero_row(), glyphs=glyphs, skins=skins)

    assert document.glyphs == GlyphSlots({3: "armor"})
    assert document.skins is None


def test_renormalize_is_total_over_stored_values():
    document = renormalize(_hero_row(hero_class="", faction="", main_stat="", attack_types=("",)))

    assert (document.hero_class, document.faction, document.main_stat) == ("tank", "honor", "strength")
    assert document.attack_types == ["physical"]


def test_to_wire_uses_export_keys(hero_payload):
    wire = renormalize_row_set(denormalize(hero_payload())).to_wire()

    assert wire["slug"] == "astaroth"
    assert wire["class"] == "tank"
    assert wire["attack_type"] == ["physical"]
    assert "id" not in wire
    assert "team_buff_secondary" in wire["artifacts"]["weapon"]
