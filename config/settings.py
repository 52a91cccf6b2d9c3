"""Django settings for the box office project."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-box-office-dev-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "rest_framework",
    "boxoffice.apps.BoxOfficeConfig",
]

# Entities are persisted as delimited text files, not through the ORM.
DATABASES: dict = {}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "boxoffice",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

BOXOFFICE = {
    "DATA_ROOT": os.environ.get("BOXOFFICE_DATA_ROOT", BASE_DIR / "data"),
    "POINTS_PER_TICKET": 1,
    # (minimum loyalty points, discount percent)
    "LOYALTY_TIERS": ((0, 0),),
    "OCCUPANCY_CACHE_TIMEOUT": 300,
    "RECORD_DELIMITER": ";",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "boxoffice": {
            "handlers": ["console"],
            "level": os.environ.get("BOXOFFICE_LOG_LEVEL", "INFO"),
        },
    },
}
