# /home/ubuntu/herowars/apps/heroes/services/__init__.py
# ================================================================================
"""
Services for the 'heroes' app.

The codec (denormalize / renormalize) and the bulk migration are pure; the
cache, importer and repository talk to storage.

Example:
    from apps.heroes.services import denormalize, renormalize, HeroDocumentCache
"""

from .choices import Coerced, EnumSubstitution, coerce_choice, coerce_choices
from .denormalizer import denormalize, parse_document
from .hero_cache import CacheEntry, HeroDocumentCache
from .hero_exporter import export_documents, export_payload, load_documents, strip_empty_arrays
from .hero_importer import HeroImporter, ImportReport
from .integrity import IntegrityViolation, check_integrity, validate_migration_result
from .migration import MigrationMode, MigrationResult, migrate_documents, progress_logger
from .protocols import HeroRepositoryProtocol
from .renormalizer import renormalize, renormalize_row_set

__all__ = [
    "CacheEntry",
    "Coerced",
    "EnumSubstitution",
    "HeroDocumentCache",
    "HeroImporter",
    "HeroRepositoryProtocol",
    "ImportReport",
    "IntegrityViolation",
    "MigrationMode",
    "MigrationResult",
    "check_integrity",
    "coerce_choice",
    "coerce_choices",
    "denormalize",
    "export_documents",
    "export_payload",
    "load_documents",
    "migrate_documents",
    "parse_document",
    "progress_logger",
    "renormalize",
    "renormalize_row_set",
    "strip_empty_arrays",
    "validate_migration_result",
]
