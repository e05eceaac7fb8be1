# /home/ubuntu/herowars/apps/heroes/services/hero_importer.py
# ================================================================================
"""
HeroImporter – loads a batch of hero documents into the repository.

Documents are denormalized first; each resulting hero is then created with
all of its rows in one repository call. Heroes that already exist are
skipped, not overwritten. Integrity findings are reported as warnings next
to the writes, never used to undo them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from apps.heroes.conf import IMPORT_PREVIEW_ERROR_LIMIT
from apps.heroes.errors import HeroAlreadyExistsError, RepositoryError

from .integrity import validate_migration_result
from .migration import MigrationMode, migrate_documents

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .denormalizer import DocumentInput
    from .hero_cache import HeroDocumentCache
    from .migration import ProgressCallback
    from .protocols import HeroRepositoryProtocol

log = structlog.get_logger(__name__).bind(component="HeroImporter")


@dataclass(slots=True)
class ImportReport:
    created_total: int = 0
    skipped_existing: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def summary(self) -> dict[str, int]:
        return {
            "created_total": self.created_total,
            "skipped_existing": self.skipped_existing,
            "error_count": self.error_count,
        }

    def to_dict(self) -> dict[str, Any]:
        return {**self.summary(), "errors": self.errors, "warnings": self.warnings}


class HeroImporter:
    def __init__(
        self,
        repository: HeroRepositoryProtocol,
        *,
        cache: HeroDocumentCache | None = None,
        mode: MigrationMode = MigrationMode.LENIENT,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._mode = MigrationMode(mode)

    def preview(self, documents: Sequence[DocumentInput]) -> dict[str, Any]:
        """Dry run: row counts, integrity warnings and the first few errors."""
        result = migrate_documents(documents, mode=MigrationMode.LENIENT)
        return {
            "counts": result.summary(),
            "warnings": validate_migration_result(result),
            "errors": [e.to_dict() for e in result.errors[:IMPORT_PREVIEW_ERROR_LIMIT]],
        }

    async def run(
        self,
        documents: Sequence[DocumentInput],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> ImportReport:
        """
        Imports `documents` and returns what happened.

        In strict mode the first invalid document or failed write is raised.
        """
        result = migrate_documents(documents, mode=self._mode, on_progress=on_progress)
        report = ImportReport(
            errors=[e.to_dict() for e in result.errors],
            warnings=validate_migration_result(result),
        )
        for message in report.warnings:
            log.warning("Integrity check failed", detail=message)

        for row_set in result.row_sets():
            try:
                await self._repository.create_with_all_data(row_set)
            except HeroAlreadyExistsError:
                report.skipped_existing += 1
                log.info("Hero already exists, skipping", hero_id=row_set.hero_id)
            except RepositoryError as exc:
                if self._mode is MigrationMode.STRICT:
                    raise
                log.error("Failed to store hero", hero_id=row_set.hero_id, err=str(exc))
                report.errors.append({"document_id": row_set.hero_id, "index": None, "message": str(exc)})
            else:
                report.created_total += 1

        if report.created_total and self._cache is not None:
            self._cache.clear()

        log.info("Hero import finished", **report.summary())
        return report
