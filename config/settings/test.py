"""
Settings for the test suite: in-memory SQLite, no external services.
"""

from .base import *
from .base import HeroCacheSettings

DEBUG = False
SECRET_KEY = "test-only-secret-key-not-for-production"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

HERO_CACHE_CONFIG = HeroCacheSettings(TTL_S=60.0, MAX_ENTRIES=50, REPOSITORY_TIMEOUT_S=5.0, ENABLED=True)
