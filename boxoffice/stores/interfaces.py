"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

import threading
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from boxoffice.domain.value_objects import EntityId

EntityT = TypeVar("EntityT")
IdT = TypeVar("IdT", bound=EntityId)


class EntityStore(ABC, Generic[EntityT, IdT]):
    """Interface for persistence of one entity type."""

    lock: threading.RLock

    @abstractmethod
    def next_id(self) -> IdT:
        """Allocate the next unused ID for this entity type."""
        ...

    @abstractmethod
    def add(self, entity: EntityT) -> EntityT:
        """Insert a new entity and persist the collection.

        Raises:
            DuplicateIdError: If an entity with the same ID is stored.
            PersistenceFailureError: If the collection could not be written.
        """
        ...

    @abstractmethod
    def get_by_id(self, entity_id: IdT) -> EntityT | None:
        """Return an entity by ID, or None if not found."""
        ...

    @abstractmethod
    def update(self, entity: EntityT) -> EntityT:
        """Replace the stored entity with the same ID and persist.

        Raises:
            NotFoundError: If no entity has that ID.
            PersistenceFailureError: If the collection could not be written.
        """
        ...

    @abstractmethod
    def remove_by_id(self, entity_id: IdT) -> bool:
        """Remove an entity, returning whether one was removed."""
        ...

    @abstractmethod
    def get_all(self) -> list[EntityT]:
        """Return all entities in insertion order."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entity and persist the empty collection."""
        ...

    @abstractmethod
    def load(self) -> int:
        """Populate the store from its backing representation.

        Returns the number of records loaded.
        """
        ...
