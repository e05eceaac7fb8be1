# /home/ubuntu/herowars/apps/heroes/conf.py
# ================================================================================
"""Configuration, constants, and closed value sets for the 'heroes' app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Self

from django.conf import settings

# ─── Closed value sets ─────────────────────────────────────────────────────────
# Every enumerated field of a hero document is restricted to one of these sets.
# Decoding stored rows substitutes the `*_FALLBACK` value for anything unknown.


class HeroClass(StrEnum):
    CONTROL = "control"
    TANK = "tank"
    WARRIOR = "warrior"
    MAGE = "mage"
    SUPPORT = "support"
    MARKSMAN = "marksman"
    HEALER = "healer"


class Faction(StrEnum):
    PROGRESS = "progress"
    NATURE = "nature"
    CHAOS = "chaos"
    HONOR = "honor"
    ETERNITY = "eternity"
    MYSTERY = "mystery"


class MainStat(StrEnum):
    INTELLIGENCE = "intelligence"
    AGILITY = "agility"
    STRENGTH = "strength"


class AttackType(StrEnum):
    PHYSICAL = "physical"
    MAGIC = "magic"
    PURE = "pure"


class TeamBuff(StrEnum):
    PHYSICAL_ATTACK = "physical attack"
    MAGIC_ATTACK = "magic attack"
    ARMOR = "armor"
    MAGIC_DEFENSE = "magic defense"
    DODGE = "dodge"
    MAGIC_PENETRATION = "magic penetration"
    ARMOR_PENETRATION = "armor penetration"
    CRIT_HIT_CHANCE = "crit hit chance"


class BookName(StrEnum):
    ALCHEMISTS_FOLIO = "Alchemist's Folio"
    BOOK_OF_ILLUSIONS = "Book of Illusions"
    DEFENDERS_COVENANT = "Defender's Covenant"
    MANUSCRIPT_OF_THE_VOID = "Manuscript of the Void"
    TOME_OF_ARCANE_KNOWLEDGE = "Tome of Arcane Knowledge"
    WARRIORS_CODE = "Warrior's Code"


class StatType(StrEnum):
    """Stats a skin or a glyph can boost."""

    INTELLIGENCE = "intelligence"
    AGILITY = "agility"
    STRENGTH = "strength"
    HEALTH = "health"
    PHYSICAL_ATTACK = "physical attack"
    MAGIC_ATTACK = "magic attack"
    ARMOR = "armor"
    MAGIC_DEFENSE = "magic defense"
    DODGE = "dodge"
    MAGIC_PENETRATION = "magic penetration"
    VAMPIRISM = "vampirism"
    ARMOR_PENETRATION = "armor penetration"
    CRIT_HIT_CHANCE = "crit hit chance"
    HEALING = "healing"
    MAGIC_CRIT_HIT_CHANCE = "magic crit hit chance"


class ArtifactType(StrEnum):
    WEAPON = "weapon"
    BOOK = "book"
    RING = "ring"


HERO_CLASS_FALLBACK: Final = HeroClass.TANK
FACTION_FALLBACK: Final = Faction.HONOR
MAIN_STAT_FALLBACK: Final = MainStat.STRENGTH
ATTACK_TYPE_FALLBACK: Final = AttackType.PHYSICAL
TEAM_BUFF_FALLBACK: Final = TeamBuff.ARMOR
BOOK_NAME_FALLBACK: Final = BookName.TOME_OF_ARCANE_KNOWLEDGE
STAT_TYPE_FALLBACK: Final = StatType.STRENGTH

# ─── Glyphs & equipment ────────────────────────────────────────────────────────

GLYPH_SLOT_COUNT: Final[int] = 5

# Quality tiers in ascending order; the order drives row emission and export.
QUALITY_TIERS: Final[tuple[str, ...]] = (
    "white",
    "green",
    "green+1",
    "blue",
    "blue+1",
    "blue+2",
    "violet",
    "violet+1",
    "violet+2",
    "violet+3",
    "orange",
    "orange+1",
    "orange+2",
    "orange+3",
    "orange+4",
)

DEFAULT_TIER_SLOT_LIMIT: Final[int] = 6

# Highest valid slot position for each tier.
TIER_SLOT_LIMITS: Final[dict[str, int]] = dict.fromkeys(QUALITY_TIERS, DEFAULT_TIER_SLOT_LIMIT)


def tier_slot_limit(tier: str) -> int:
    return TIER_SLOT_LIMITS.get(tier, DEFAULT_TIER_SLOT_LIMIT)


def tier_sort_key(tier: str) -> tuple[int, str]:
    """Known tiers sort by rank; unknown ones go last, alphabetically."""
    try:
        return QUALITY_TIERS.index(tier), tier
    except ValueError:
        return len(QUALITY_TIERS), tier


# ─── Defaults ──────────────────────────────────────────────────────────────────

# Stat magnitudes are absent from source documents and stored as zero.
DEFAULT_STAT_VALUE: Final[int] = 0

DEFAULT_CACHE_TTL_S: Final[float] = 5 * 60
DEFAULT_CACHE_MAX_ENTRIES: Final[int] = 100
DEFAULT_REPOSITORY_TIMEOUT_S: Final[float] = 10.0

ALL_HEROES_CACHE_KEY: Final[str] = "all-heroes"

IMPORT_PREVIEW_ERROR_LIMIT: Final[int] = 5


# ─── Runtime configuration ─────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True, kw_only=True)
class HeroCacheConfig:
    """Immutable read-through cache configuration."""

    ttl_s: float = DEFAULT_CACHE_TTL_S
    max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    repository_timeout_s: float = DEFAULT_REPOSITORY_TIMEOUT_S
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.ttl_s <= 0:
            msg = "Cache TTL must be positive"
            raise ValueError(msg)
        if self.max_entries < 1:
            msg = "Cache capacity must be at least 1"
            raise ValueError(msg)
        if self.repository_timeout_s <= 0:
            msg = "Repository timeout must be positive"
            raise ValueError(msg)

    @classmethod
    def from_settings(cls) -> Self:
        cfg = settings.HERO_CACHE_CONFIG
        return cls(
            ttl_s=cfg.TTL_S,
            max_entries=cfg.MAX_ENTRIES,
            repository_timeout_s=cfg.REPOSITORY_TIMEOUT_S,
            enabled=cfg.ENABLED,
        )
