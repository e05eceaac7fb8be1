# /home/ubuntu/herowars/apps/heroes/models/hero.py
# ================================================================================
"""The Hero model and its queryset."""

from __future__ import annotations

from typing import Self

from django.db import models
from django.db.models import Prefetch
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.heroes.schemas import HeroRow, HeroRowSet


class HeroQuerySet(models.QuerySet["Hero"]):
    """Custom QuerySet for the Hero model."""

    def ordered(self) -> Self:
        return self.order_by("name")

    def with_all_data(self) -> Self:
        """Prefetches every related group in the order the decoder expects."""
        from .related import HeroEquipmentSlot, HeroGlyph

        return self.prefetch_related(
            "artifacts",
            "skins",
            Prefetch("glyphs", queryset=HeroGlyph.objects.order_by("position")),
            Prefetch(
                "equipment_slots",
                queryset=HeroEquipmentSlot.objects.order_by("quality_tier", "slot_position"),
            ),
        )


class Hero(models.Model):
    """A hero's scalar fields; one row per hero, keyed by its slug."""

    slug = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=128, unique=True)
    hero_class = models.CharField(max_length=32, db_column="class", db_index=True)
    faction = models.CharField(max_length=32, db_index=True)
    main_stat = models.CharField(max_length=32)
    attack_types = models.JSONField(default=list, blank=True)
    stone_sources = models.JSONField(default=list, blank=True)
    order_rank = models.PositiveIntegerField(default=1)
    updated_on = models.DateTimeField(default=timezone.now)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = HeroQuerySet.as_manager()

    class Meta:
        db_table = "heroes"
        ordering = ["name"]
        verbose_name = _("hero")
        verbose_name_plural = _("heroes")
        constraints = [
            models.CheckConstraint(condition=models.Q(order_rank__gt=0), name="hero_order_rank_positive"),
        ]

    def __str__(self) -> str:
        return self.name or self.slug

    @classmethod
    def from_row(cls, row: HeroRow) -> Self:
        return cls(
            slug=row.hero_id,
            name=row.name,
            hero_class=row.hero_class,
            faction=row.faction,
            main_stat=row.main_stat,
            attack_types=list(row.attack_types),
            stone_sources=list(row.stone_sources),
            order_rank=row.order_rank,
            updated_on=row.updated_on or timezone.now(),
        )

    def to_row(self) -> HeroRow:
        return HeroRow(
            hero_id=self.slug,
            name=self.name,
            hero_class=self.hero_class,
            faction=self.faction,
            main_stat=self.main_stat,
            attack_types=tuple(self.attack_types or ()),
            stone_sources=tuple(self.stone_sources or ()),
            order_rank=self.order_rank,
            updated_on=self.updated_on,
        )

    def to_row_set(self) -> HeroRowSet:
        """Requires the related groups to be prefetched (`with_all_data`)."""
        return HeroRowSet(
            hero=self.to_row(),
            artifacts=tuple(a.to_row() for a in self.artifacts.all()),
            skins=tuple(s.to_row() for s in self.skins.all()),
            glyphs=tuple(g.to_row() for g in self.glyphs.all()),
            equipment_slots=tuple(e.to_row() for e in self.equipment_slots.all()),
        )
