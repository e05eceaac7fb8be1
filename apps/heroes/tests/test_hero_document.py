# /home/ubuntu/herowars/apps/heroes/tests/test_hero_document.py
import pytest

from apps.heroes.conf import AttackType, HeroClass
from apps.heroes.schemas import GlyphSlots, HeroDocument, HeroPatch
from apps.heroes.services import coerce_choice, coerce_choices


def test_glyph_slots_reject_out_of_range_position():
    with pytest.raises(ValueError, match="outside 1..5"):
        GlyphSlots({6: "armor"})


def test_glyph_slots_sequence_form_keeps_gaps():
    slots = GlyphSlots.from_sequence([None, "armor", "", "dodge"])

    assert dict(slots) == {2: "armor", 4: "dodge"}
    assert slots.to_sequence() == [None, "armor", None, "dodge", None]


def test_document_collapses_empty_groups(hero_payload):
    document = HeroDocument.model_validate(
        hero_payload(skins=[], glyphs=[None] * 5, items={"white": []}, artifacts={}),
    )

    assert document.skins is None
    assert document.glyphs is None
    assert document.items is None
    assert document.artifacts is None


def test_document_accepts_glyph_position_mapping(hero_payload):
    document = HeroDocument.model_validate(hero_payload(glyphs={"3": "armor"}))

    assert document.glyphs == GlyphSlots({3: "armor"})


def test_patch_row_changes_use_row_names():
    patch = HeroPatch.model_validate({"class": "mage", "attack_type": ["magic", "pure"]})

    assert patch.row_changes() == {"hero_class": "mage", "attack_types": ["magic", "pure"]}


def test_coerce_choice_marks_fallbacks():
    assert coerce_choice(HeroClass, "mage", default=HeroClass.TANK).substituted is False

    result = coerce_choice(HeroClass, None, default=HeroClass.TANK)

    assert result.value is HeroClass.TANK
    assert result.substituted is True


def test_coerce_choices_falls_back_only_when_nothing_survives():
    assert coerce_choices(AttackType, ["laser", "beam"], default=AttackType.PHYSICAL).value == (
        AttackType.PHYSICAL,
    )
    assert coerce_choices(AttackType, [], default=AttackType.PHYSICAL).value == ()
