# /home/ubuntu/herowars/apps/heroes/management/commands/export_heroes.py
# ================================================================================
"""Django management command to dump every hero in the import/export format."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog
from django.apps import apps as django_apps
from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.heroes.errors import HeroDataError
from apps.heroes.services import export_documents

log = structlog.get_logger(__name__)


class Command(BaseCommand):
    help = "Exports all heroes as a JSON array of hero documents."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("-o", "--output", default=None, help="Write to this file instead of stdout.")

    def handle(self, *args: Any, **options: Any) -> None:
        try:
            payload = asyncio.run(self._export())
        except HeroDataError as e:
            msg = f"Export failed: {e}"
            raise CommandError(msg) from e

        if options["output"]:
            Path(options["output"]).write_bytes(payload)
            self.stdout.write(self.style.SUCCESS(f"✓ Heroes exported to {options['output']}"))
        else:
            self.stdout.write(payload.decode())

    async def _export(self) -> bytes:
        cache = django_apps.get_app_config("heroes").document_cache
        heroes = await cache.get_all()
        log.info("Exporting heroes", count=len(heroes))
        return export_documents(heroes)
