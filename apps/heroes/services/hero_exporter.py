# /home/ubuntu/herowars/apps/heroes/services/hero_exporter.py
# ================================================================================
"""JSON encoding and decoding of hero document batches in the export format."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

from apps.heroes.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apps.heroes.schemas import HeroDocument


def strip_empty_arrays(value: Any) -> Any:
    """Recursively drops object keys whose value is an empty list."""
    if isinstance(value, dict):
        return {k: strip_empty_arrays(v) for k, v in value.items() if v != []}
    if isinstance(value, list):
        return [strip_empty_arrays(v) for v in value]
    return value


def export_payload(documents: Iterable[HeroDocument]) -> list[dict[str, Any]]:
    """Wire-format dicts, sorted by hero name, with empty arrays removed."""
    ordered = sorted(documents, key=lambda d: d.name.casefold())
    return [strip_empty_arrays(d.to_wire()) for d in ordered]


def export_documents(documents: Iterable[HeroDocument]) -> bytes:
    return orjson.dumps(export_payload(documents), option=orjson.OPT_INDENT_2)


def load_documents(raw: bytes | str) -> list[Any]:
    """Parses an export file; individual entries are validated later."""
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValidationError("documents", f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        msg = f"expected a JSON array of hero documents, got {type(data).__name__}"
        raise ValidationError("documents", msg)
    return data
