# /home/ubuntu/herowars/apps/heroes/models/__init__.py
# ================================================================================
"""Hero models: one scalar table plus four per-hero child tables."""

from .hero import Hero, HeroQuerySet
from .related import HeroArtifact, HeroEquipmentSlot, HeroGlyph, HeroSkin

__all__ = [
    "Hero",
    "HeroArtifact",
    "HeroEquipmentSlot",
    "HeroGlyph",
    "HeroQuerySet",
    "HeroSkin",
]
