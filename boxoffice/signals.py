"""Store change notifications and cache invalidation.

``store_changed`` is sent after every successful store write with the store
instance, the action name and the affected entity (None for bulk writes).
"""

from django.dispatch import Signal, receiver

from boxoffice.cache import bump_occupancy_generation

store_changed = Signal()

OCCUPANCY_SOURCES = frozenset({"room", "movie", "session", "ticket"})


@receiver(store_changed)
def invalidate_occupancy_cache(sender, store, **kwargs):
    """Invalidate occupancy reports when rooms, movies, sessions or tickets change."""
    if store.entity_name in OCCUPANCY_SOURCES:
        bump_occupancy_generation(store.data_root)
