# /home/ubuntu/herowars/apps/heroes/apps.py
# ================================================================================
from __future__ import annotations

from typing import TYPE_CHECKING

from django.apps import AppConfig

if TYPE_CHECKING:
    from apps.heroes.services import HeroDocumentCache


class HeroesConfig(AppConfig):
    """
    App configuration for the 'heroes' app.

    Owns the process-wide hero document cache, built once the app registry
    is ready so it can wrap the Django-backed repository.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.heroes"
    verbose_name = "Heroes"

    document_cache: HeroDocumentCache

    def ready(self) -> None:
        from apps.heroes.conf import HeroCacheConfig
        from apps.heroes.services import HeroDocumentCache
        from apps.heroes.services.hero_repository import DjangoHeroRepository

        self.document_cache = HeroDocumentCache(DjangoHeroRepository(), HeroCacheConfig.from_settings())
