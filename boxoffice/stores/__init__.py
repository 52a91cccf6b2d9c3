from boxoffice.stores.entity_stores import (
    ClientStore,
    MovieStore,
    RoomStore,
    SessionStore,
    TicketStore,
)
from boxoffice.stores.file_store import FileStore, atomic_write
from boxoffice.stores.interfaces import EntityStore
from boxoffice.stores.loader import BoxOffice, load_box_office
from boxoffice.stores.sequences import IdSequence

__all__ = [
    "EntityStore",
    "FileStore",
    "atomic_write",
    "IdSequence",
    "MovieStore",
    "RoomStore",
    "SessionStore",
    "ClientStore",
    "TicketStore",
    "BoxOffice",
    "load_box_office",
]
