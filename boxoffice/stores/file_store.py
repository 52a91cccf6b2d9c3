"""Delimited-text implementation of the EntityStore.

The whole collection is rewritten on every mutation. A new collection is
built, written through a temp file and ``os.replace``, and only then swapped
in, so a failed write leaves both the file and memory untouched.
"""

import contextlib
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, ClassVar

from boxoffice.conf import box_office_settings
from boxoffice.domain.errors import (
    DuplicateIdError,
    InvalidIdError,
    InvalidRecordError,
    NotFoundError,
    PersistenceFailureError,
)
from boxoffice.signals import store_changed
from boxoffice.stores.interfaces import EntityStore, EntityT, IdT
from boxoffice.stores.sequences import IdSequence
from boxoffice.stores.serializers import RecordSerializer

logger = logging.getLogger(__name__)


def atomic_write(path: Path, lines: Iterable[str]) -> None:
    """Write ``lines`` to ``path`` so readers see the old or new file, never half."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


class FileStore(EntityStore[EntityT, IdT]):
    """One entity type persisted as one line per record under the data root."""

    entity_name: ClassVar[str]
    file_name: ClassVar[str]
    serializer_class: ClassVar[type[RecordSerializer]]
    id_type: ClassVar[type]
    not_found_error: ClassVar[type[NotFoundError]]

    def __init__(self, data_root: Path | str | None = None) -> None:
        if data_root is None:
            data_root = box_office_settings.data_root
        self.data_root = Path(data_root)
        self.path = self.data_root / self.file_name
        self.lock = threading.RLock()
        self.sequence: IdSequence[IdT] = IdSequence(self.id_type)
        self._items: dict[IdT, EntityT] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path} ({len(self)} records)>"

    def __len__(self) -> int:
        with self.lock:
            return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        try:
            key = self.id_type.coerce(entity_id)
        except InvalidIdError:
            return False
        with self.lock:
            return key in self._items

    def decode_context(self) -> dict[str, Any]:
        """Serializer context used while loading (foreign key lookups)."""
        return {}

    def ensure_file(self) -> None:
        """Create the data root and an empty backing file when missing."""
        try:
            self.data_root.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.touch()
                logger.info("Created empty %s file at %s", self.entity_name, self.path)
        except OSError as exc:
            raise PersistenceFailureError(self.path, str(exc)) from exc

    def load(self) -> int:
        with self.lock:
            self.ensure_file()
            try:
                raw = self.path.read_bytes()
            except OSError as exc:
                raise PersistenceFailureError(self.path, str(exc)) from exc

            context = self.decode_context()
            items: dict[IdT, EntityT] = {}
            for number, raw_line in enumerate(raw.splitlines(), start=1):
                try:
                    line = raw_line.decode("utf-8")
                except UnicodeDecodeError as exc:
                    logger.warning(
                        "Skipping %s record at %s:%d: not valid UTF-8 (%s)",
                        self.entity_name,
                        self.path.name,
                        number,
                        exc.reason,
                    )
                    continue
                if not line.strip():
                    continue
                try:
                    entity = self.serializer_class.decode(line, context=context)
                except InvalidRecordError as exc:
                    logger.warning(
                        "Skipping %s record at %s:%d: %s",
                        self.entity_name,
                        self.path.name,
                        number,
                        exc.message,
                    )
                    continue
                if entity.id in items:
                    logger.warning(
                        "Skipping %s record at %s:%d: duplicate id %s",
                        self.entity_name,
                        self.path.name,
                        number,
                        entity.id,
                    )
                    continue
                items[entity.id] = entity
                self.sequence.advance_past(entity.id)

            self._items = items
            logger.info(
                "Loaded %d %s record(s) from %s",
                len(items),
                self.entity_name,
                self.path,
            )
            return len(items)

    def _commit(
        self, items: dict[IdT, EntityT], action: str, entity: EntityT | None
    ) -> None:
        """Persist ``items`` and make them the live collection."""
        lines = [self.serializer_class.encode(item) for item in items.values()]
        try:
            atomic_write(self.path, lines)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self.path, exc)
            raise PersistenceFailureError(self.path, str(exc)) from exc
        self._items = items
        store_changed.send(
            sender=type(self), store=self, action=action, entity=entity
        )

    def next_id(self) -> IdT:
        return self.sequence.allocate()

    def add(self, entity: EntityT) -> EntityT:
        with self.lock:
            if entity.id in self._items:
                raise DuplicateIdError(entity.id)
            items = dict(self._items)
            items[entity.id] = entity
            self._commit(items, "add", entity)
            self.sequence.advance_past(entity.id)
            return entity

    def get_by_id(self, entity_id: IdT | int | str) -> EntityT | None:
        key = self.id_type.coerce(entity_id)
        with self.lock:
            return self._items.get(key)

    def get(self, entity_id: IdT | int | str) -> EntityT:
        """Like ``get_by_id`` but raises the type's NotFoundError."""
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def update(self, entity: EntityT) -> EntityT:
        self.update_many([entity])
        return entity

    def update_many(self, entities: Iterable[EntityT]) -> None:
        """Replace several records with a single write."""
        entities = list(entities)
        with self.lock:
            items = dict(self._items)
            for entity in entities:
                if entity.id not in items:
                    raise self.not_found_error(entity.id)
                items[entity.id] = entity
            if entities:
                action_entity = entities[0] if len(entities) == 1 else None
                self._commit(items, "update", action_entity)

    def replace_derived(self, entities: Iterable[EntityT]) -> None:
        """Swap in records that differ only in fields the file does not hold.

        Nothing is written and no change signal is sent.
        """
        with self.lock:
            items = dict(self._items)
            for entity in entities:
                if entity.id not in items:
                    raise self.not_found_error(entity.id)
                items[entity.id] = entity
            self._items = items

    def remove_by_id(self, entity_id: IdT | int | str) -> bool:
        key = self.id_type.coerce(entity_id)
        with self.lock:
            if key not in self._items:
                return False
            removed = self._items[key]
            items = {k: v for k, v in self._items.items() if k != key}
            self._commit(items, "remove", removed)
            return True

    def get_all(self) -> list[EntityT]:
        with self.lock:
            return list(self._items.values())

    def filter(self, predicate: Callable[[EntityT], bool]) -> list[EntityT]:
        with self.lock:
            return [item for item in self._items.values() if predicate(item)]

    def clear(self) -> None:
        with self.lock:
            self._commit({}, "clear", None)
