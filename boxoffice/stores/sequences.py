"""Monotonic ID allocation, one sequence per entity type."""

import threading
from typing import Generic, TypeVar

from boxoffice.domain.value_objects import EntityId

IdT = TypeVar("IdT", bound=EntityId)


class IdSequence(Generic[IdT]):
    """Hands out increasing IDs and recovers past the highest reloaded one."""

    def __init__(self, id_type: type[IdT], start: int = 1) -> None:
        self._id_type = id_type
        self._next = start
        self._lock = threading.Lock()

    @property
    def peek(self) -> int:
        """Return the value the next ``allocate`` call will use."""
        return self._next

    def allocate(self) -> IdT:
        with self._lock:
            value = self._next
            self._next += 1
        return self._id_type(value)

    def advance_past(self, entity_id: EntityId | int) -> None:
        """Ensure future IDs are greater than ``entity_id``."""
        value = entity_id.value if isinstance(entity_id, EntityId) else entity_id
        with self._lock:
            if value >= self._next:
                self._next = value + 1

    def reset(self) -> None:
        """Restart at 1.

        Only safe when no persisted record still uses an older ID.
        """
        with self._lock:
            self._next = 1
