"""Cache keys for occupancy reports.

Reports are keyed by a per-data-root generation number. Bumping the
generation orphans every report of that data root at once.
"""

import hashlib
from pathlib import Path

from django.core.cache import cache


def _namespace(data_root: Path | str) -> str:
    return hashlib.md5(str(data_root).encode("utf-8")).hexdigest()[:12]


def _generation_key(data_root: Path | str) -> str:
    return f"occupancy:{_namespace(data_root)}:generation"


def occupancy_generation(data_root: Path | str) -> int:
    return cache.get_or_set(_generation_key(data_root), 1, timeout=None)


def bump_occupancy_generation(data_root: Path | str) -> None:
    key = _generation_key(data_root)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, timeout=None)


def occupancy_key(data_root: Path | str, room_id: object, grouping: str) -> str:
    generation = occupancy_generation(data_root)
    return f"occupancy:{_namespace(data_root)}:{generation}:{room_id}:{grouping}"
