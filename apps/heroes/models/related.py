# /home/ubuntu/herowars/apps/heroes/models/related.py
# ================================================================================
"""Per-hero child tables: artifacts, skins, glyphs and equipment slots."""

from __future__ import annotations

from typing import Self

from django.db import models

from apps.heroes.conf import DEFAULT_STAT_VALUE, GLYPH_SLOT_COUNT, ArtifactType
from apps.heroes.schemas import ArtifactRow, EquipmentSlotRow, GlyphRow, SkinRow


class HeroArtifact(models.Model):
    hero = models.ForeignKey("Hero", on_delete=models.CASCADE, related_name="artifacts", db_column="hero_slug")
    artifact_type = models.CharField(max_length=16, choices=[(t.value, t.value) for t in ArtifactType])
    name = models.CharField(max_length=128, blank=True, null=True)
    team_buff = models.CharField(max_length=64, blank=True, null=True)
    team_buff_secondary = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        db_table = "hero_artifacts"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["hero", "artifact_type"], name="hero_artifact_unique_type"),
        ]

    @classmethod
    def from_row(cls, row: ArtifactRow) -> Self:
        return cls(
            hero_id=row.hero_id,
            artifact_type=row.artifact_type,
            name=row.name,
            team_buff=row.primary_buff,
            team_buff_secondary=row.secondary_buff,
        )

    def to_row(self) -> ArtifactRow:
        return ArtifactRow(
            hero_id=self.hero_id,
            artifact_type=self.artifact_type,
            name=self.name,
            primary_buff=self.team_buff,
            secondary_buff=self.team_buff_secondary,
        )


class HeroSkin(models.Model):
    hero = models.ForeignKey("Hero", on_delete=models.CASCADE, related_name="skins", db_column="hero_slug")
    name = models.CharField(max_length=128)
    stat_type = models.CharField(max_length=64)
    stat_value = models.IntegerField(default=DEFAULT_STAT_VALUE)
    has_plus = models.BooleanField(default=False)
    source = models.CharField(max_length=128, blank=True, null=True)

    class Meta:
        db_table = "hero_skins"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["hero", "name"], name="hero_skin_unique_name"),
        ]

    @classmethod
    def from_row(cls, row: SkinRow) -> Self:
        return cls(
            hero_id=row.hero_id,
            name=row.name,
            stat_type=row.stat_type,
            stat_value=row.stat_value,
            has_plus=row.has_plus,
            source=row.source,
        )

    def to_row(self) -> SkinRow:
        return SkinRow(
            hero_id=self.hero_id,
            name=self.name,
            stat_type=self.stat_type,
            stat_value=self.stat_value,
            has_plus=self.has_plus,
            source=self.source,
        )


class HeroGlyph(models.Model):
    hero = models.ForeignKey("Hero", on_delete=models.CASCADE, related_name="glyphs", db_column="hero_slug")
    position = models.PositiveSmallIntegerField()
    stat_type = models.CharField(max_length=64)
    stat_value = models.IntegerField(default=DEFAULT_STAT_VALUE)

    class Meta:
        db_table = "hero_glyphs"
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["hero", "position"], name="hero_glyph_unique_position"),
            models.CheckConstraint(
                condition=models.Q(position__gte=1, position__lte=GLYPH_SLOT_COUNT),
                name="hero_glyph_position_range",
            ),
        ]

    @classmethod
    def from_row(cls, row: GlyphRow) -> Self:
        return cls(hero_id=row.hero_id, position=row.position, stat_type=row.stat_type, stat_value=row.stat_value)

    def to_row(self) -> GlyphRow:
        return GlyphRow(
            hero_id=self.hero_id,
            position=self.position,
            stat_type=self.stat_type,
            stat_value=self.stat_value,
        )


class HeroEquipmentSlot(models.Model):
    hero = models.ForeignKey("Hero", on_delete=models.CASCADE, related_name="equipment_slots", db_column="hero_slug")
    quality_tier = models.CharField(max_length=16)
    slot_position = models.PositiveSmallIntegerField()
    equipment_id = models.CharField(max_length=128)

    class Meta:
        db_table = "hero_equipment_slots"
        ordering = ["quality_tier", "slot_position"]
        constraints = [
            models.UniqueConstraint(
                fields=["hero", "quality_tier", "slot_position"],
                name="hero_equipment_unique_slot",
            ),
            models.CheckConstraint(condition=models.Q(slot_position__gte=1), name="hero_equipment_slot_positive"),
        ]

    @classmethod
    def from_row(cls, row: EquipmentSlotRow) -> Self:
        return cls(
            hero_id=row.hero_id,
            quality_tier=row.quality_tier,
            slot_position=row.slot_position,
            equipment_id=row.equipment_id,
        )

    def to_row(self) -> EquipmentSlotRow:
        return EquipmentSlotRow(
            hero_id=self.hero_id,
            quality_tier=self.quality_tier,
            slot_position=self.slot_position,
            equipment_id=self.equipment_id,
        )
