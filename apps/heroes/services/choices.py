# /home/ubuntu/herowars/apps/heroes/services/choices.py
# ================================================================================
"""
Coercion of stored strings into the closed value sets of a hero document.

Stored rows may hold values that drifted out of the allowed sets. Decoding
never fails on them: each unknown value is replaced by a fixed fallback and
the substitution is reported so callers can tell real data from defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable
    from enum import StrEnum


@dataclass(slots=True, frozen=True)
class Coerced[T]:
    """Result of coercing one raw value; `substituted` marks a fallback."""

    value: T
    raw: Any
    substituted: bool = False


@dataclass(slots=True, frozen=True)
class EnumSubstitution:
    """Audit record for a fallback applied while decoding a hero."""

    hero_id: str
    field: str
    raw: Any
    fallback: Any

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def coerce_choice[E: StrEnum](choices: type[E], raw: Any, *, default: E) -> Coerced[E]:
    """Returns the member of `choices` whose value is `raw`, else `default`."""
    if isinstance(raw, str):
        try:
            return Coerced(choices(raw), raw)
        except ValueError:
            pass
    return Coerced(default, raw, substituted=True)


def coerce_choices[E: StrEnum](
    choices: type[E],
    raw: Iterable[Any] | None,
    *,
    default: E,
) -> Coerced[tuple[E, ...]]:
    """
    Filters a multi-valued field down to its valid members.

    An empty input stays empty. If every entry is invalid the result is
    `(default,)`; dropping any entry marks the result as substituted.
    """
    values = list(raw or ())
    if not values:
        return Coerced((), values)

    kept = tuple(c.value for v in values if not (c := coerce_choice(choices, v, default=default)).substituted)
    if not kept:
        return Coerced((default,), values, substituted=True)
    return Coerced(kept, values, substituted=len(kept) != len(values))
