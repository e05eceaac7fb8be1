# /home/ubuntu/herowars/apps/heroes/errors.py
# ================================================================================
"""Exception hierarchy for hero data transforms and the repository boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import ValidationError as PydanticValidationError


class HeroDataError(Exception):
    """Base class for every error raised by the heroes app."""


class ValidationError(HeroDataError):
    """A single hero document is missing or has an invalid required field."""

    def __init__(self, field: str, message: str, *, document_id: str | None = None) -> None:
        self.field = field
        self.message = message
        self.document_id = document_id
        super().__init__(f"{field}: {message}")

    @classmethod
    def from_pydantic(
        cls,
        exc: PydanticValidationError,
        *,
        document_id: str | None = None,
        rename: Callable[[str], str] | None = None,
    ) -> ValidationError:
        """
        Collapses a pydantic error into one naming its first offending field.

        `rename` maps the leading location part (a wire alias such as `slug`)
        back to the attribute name callers know (`id`).
        """
        errors = exc.errors()
        if not errors:
            return cls("document", str(exc), document_id=document_id)
        first = errors[0]
        parts = [str(part) for part in first.get("loc", ())]
        if parts and rename is not None:
            parts[0] = rename(parts[0])
        field = ".".join(parts) or "document"
        return cls(field, first.get("msg", "invalid value"), document_id=document_id)


class TransformationError(HeroDataError):
    """
    A document failed to transform during a bulk migration.

    Lenient runs collect these as data; strict runs raise the first one.
    """

    def __init__(self, document_id: str | None, cause: Exception, *, index: int | None = None) -> None:
        self.document_id = document_id
        self.cause = cause
        self.index = index
        super().__init__(self.message)

    @property
    def message(self) -> str:
        where = self.document_id or f"#{self.index}"
        return f"Error processing hero {where}: {self.cause}"

    def to_dict(self) -> dict[str, str | int | None]:
        return {"document_id": self.document_id, "index": self.index, "message": self.message}


class RepositoryError(HeroDataError):
    """Opaque failure reported by the repository collaborator."""


class HeroNotFoundError(RepositoryError):
    def __init__(self, hero_id: str) -> None:
        self.hero_id = hero_id
        super().__init__(f"Hero {hero_id!r} not found")


class HeroAlreadyExistsError(RepositoryError):
    def __init__(self, hero_id: str) -> None:
        self.hero_id = hero_id
        super().__init__(f"Hero {hero_id!r} already exists")


class RepositoryTimeoutError(RepositoryError):
    def __init__(self, operation: str, timeout_s: float) -> None:
        self.operation = operation
        self.timeout_s = timeout_s
        super().__init__(f"Repository call {operation!r} timed out after {timeout_s:.1f}s")
