"""Access to the ``BOXOFFICE`` settings dict with defaults.

Values are read on every access so overrides made with
``django.test.override_settings`` take effect immediately.
"""

from pathlib import Path
from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "DATA_ROOT": "data",
    "POINTS_PER_TICKET": 1,
    "LOYALTY_TIERS": ((0, 0),),
    "OCCUPANCY_CACHE_TIMEOUT": 300,
    "RECORD_DELIMITER": ";",
}


class BoxOfficeSettings:
    """Attribute-style view over ``settings.BOXOFFICE``."""

    def __getattr__(self, name: str) -> Any:
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid box office setting: {name!r}")
        user_settings = getattr(settings, "BOXOFFICE", {}) or {}
        return user_settings.get(name, DEFAULTS[name])

    @property
    def data_root(self) -> Path:
        return Path(self.DATA_ROOT)


box_office_settings = BoxOfficeSettings()
