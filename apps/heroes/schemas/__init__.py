"""Document and row shapes for hero data."""

from .document import GlyphSlots, HeroArtifacts, HeroDocument, HeroPatch, HeroSkin, HeroWeapon
from .hero_rows import ArtifactRow, EquipmentSlotRow, GlyphRow, HeroRow, HeroRowSet, SkinRow

__all__ = [
    "ArtifactRow",
    "EquipmentSlotRow",
    "GlyphRow",
    "GlyphSlots",
    "HeroArtifacts",
    "HeroDocument",
    "HeroPatch",
    "HeroRow",
    "HeroRowSet",
    "HeroSkin",
    "HeroWeapon",
    "SkinRow",
]
