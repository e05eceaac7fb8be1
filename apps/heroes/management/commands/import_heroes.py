# /home/ubuntu/herowars/apps/heroes/management/commands/import_heroes.py
# ================================================================================
"""
Django management command to import hero documents.

Reads a JSON array of hero documents from a file or from the configured
source URL, then loads it through `HeroImporter`. `--dry-run` only reports
what an import would produce.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import orjson
import structlog
from django.apps import apps as django_apps
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.heroes.errors import HeroDataError
from apps.heroes.services import HeroImporter, MigrationMode, load_documents, progress_logger
from apps.heroes.services.hero_repository import DjangoHeroRepository

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger(__name__)


class Command(BaseCommand):
    """Imports hero documents into the normalized hero tables."""

    help = "Imports hero documents from a JSON file or the configured source URL."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("path", nargs="?", help="Path to a JSON array of hero documents.")
        parser.add_argument(
            "--url",
            default=None,
            help="Fetch the documents over HTTP instead (defaults to HERO_IMPORT_SOURCE_URL).",
        )
        parser.add_argument("--strict", action="store_true", help="Abort on the first invalid document.")
        parser.add_argument("--dry-run", action="store_true", help="Validate and report without writing.")
        parser.add_argument(
            "--json",
            action="store_true",
            help="Output the result as raw JSON instead of pretty-printing.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Synchronous entry point that orchestrates the async execution."""
        try:
            asyncio.run(self._handle_async(**options))
        except KeyboardInterrupt:
            self.stderr.write(self.style.WARNING("\nOperation cancelled by user."))
        except CommandError:
            raise
        except HeroDataError as e:
            msg = f"Import failed: {e}"
            raise CommandError(msg) from e
        except Exception as e:
            log.exception("import_heroes command failed unexpectedly.", exc_info=e)
            msg = f"Command failed with an unhandled exception: {e}"
            raise CommandError(msg) from e

    async def _handle_async(self, **options: Any) -> None:
        documents = load_documents(await self._read_source(options["path"], options["url"]))
        self.stdout.write(f"Loaded {len(documents)} hero documents.")

        importer = HeroImporter(
            DjangoHeroRepository(),
            cache=django_apps.get_app_config("heroes").document_cache,
            mode=MigrationMode.STRICT if options["strict"] else MigrationMode.LENIENT,
        )

        if options["dry_run"]:
            result = importer.preview(documents)
            self._write(result, as_json=options["json"], title="IMPORT PREVIEW")
            return

        report = await importer.run(documents, on_progress=progress_logger("import_heroes"))
        self._write(report.to_dict(), as_json=options["json"], title="IMPORT SUMMARY")
        if report.error_count:
            self.stderr.write(self.style.WARNING(f"✗ Import finished with {report.error_count} errors."))
        else:
            self.stdout.write(self.style.SUCCESS("✓ Hero import completed successfully."))

    async def _read_source(self, path: str | None, url: str | None) -> bytes:
        if path and url:
            msg = "Pass either a path or --url, not both."
            raise CommandError(msg)
        if path:
            try:
                return await asyncio.to_thread(Path(path).read_bytes)
            except OSError as e:
                msg = f"Cannot read {path}: {e}"
                raise CommandError(msg) from e

        cfg = settings.HERO_IMPORT_CONFIG
        url = url or cfg.SOURCE_URL
        if not url:
            msg = "No input: pass a path, --url, or set HERO_IMPORT_SOURCE_URL."
            raise CommandError(msg)
        self.stdout.write(f"Fetching data from {url}...")
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=cfg.TIMEOUT_S)
                response.raise_for_status()
        except httpx.HTTPError as e:
            msg = f"Failed to fetch hero data: {e}"
            raise CommandError(msg) from e
        return response.content

    def _write(self, result: Mapping[str, Any], *, as_json: bool, title: str) -> None:
        if as_json:
            self.stdout.write(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode())
            return

        style = self.style
        self.stdout.write(style.MIGRATE_HEADING("\n" + "=" * 26))
        self.stdout.write(style.SUCCESS(f"  {title}"))
        self.stdout.write(style.MIGRATE_HEADING("=" * 26))
        counts = result.get("counts", result)
        for key in ("created_total", "skipped_existing", "error_count", "heroes", "errors"):
            if key in counts and not isinstance(counts[key], list):
                self.stdout.write(f"  {key:<17}: {counts[key]}")
        for warning in result.get("warnings", ()):
            self.stdout.write(f"  {style.WARNING('warning')}: {warning}")
        for error in result.get("errors", ()):
            self.stdout.write(f"  {style.ERROR('error')}  : {error['message']}")
        self.stdout.write(style.MIGRATE_HEADING("=" * 26))
