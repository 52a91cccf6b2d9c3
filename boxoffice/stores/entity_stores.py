"""Concrete stores, one per entity type."""

from datetime import date
from pathlib import Path
from typing import Any

from boxoffice.domain import (
    Client,
    ClientId,
    Movie,
    MovieId,
    Room,
    RoomId,
    Session,
    SessionId,
    Ticket,
    TicketId,
)
from boxoffice.domain.errors import (
    ClientNotFoundError,
    MovieNotFoundError,
    RoomNotFoundError,
    SessionNotFoundError,
    TicketNotFoundError,
)
from boxoffice.stores.file_store import FileStore
from boxoffice.stores.serializers import (
    ClientRecordSerializer,
    MovieRecordSerializer,
    RoomRecordSerializer,
    SessionRecordSerializer,
    TicketRecordSerializer,
)


class MovieStore(FileStore[Movie, MovieId]):
    entity_name = "movie"
    file_name = "movies.txt"
    serializer_class = MovieRecordSerializer
    id_type = MovieId
    not_found_error = MovieNotFoundError

    def get_by_title(self, title: str) -> Movie | None:
        """Return the movie whose title matches, ignoring case and padding."""
        wanted = title.strip().casefold()
        matches = self.filter(lambda movie: movie.title.strip().casefold() == wanted)
        return matches[0] if matches else None


class RoomStore(FileStore[Room, RoomId]):
    entity_name = "room"
    file_name = "rooms.txt"
    serializer_class = RoomRecordSerializer
    id_type = RoomId
    not_found_error = RoomNotFoundError


class SessionStore(FileStore[Session, SessionId]):
    """Sessions reference rooms and movies by ID.

    A room's sessions are not stored on the room; ``list_for_room`` is the
    query view.
    """

    entity_name = "session"
    file_name = "sessions.txt"
    serializer_class = SessionRecordSerializer
    id_type = SessionId
    not_found_error = SessionNotFoundError

    def __init__(
        self,
        rooms: RoomStore,
        movies: MovieStore,
        data_root: Path | str | None = None,
    ) -> None:
        super().__init__(data_root)
        self.rooms = rooms
        self.movies = movies

    def decode_context(self) -> dict[str, Any]:
        return {"rooms": self.rooms, "movies": self.movies}

    def list_for_room(self, room_id: RoomId | int) -> list[Session]:
        room_id = RoomId.coerce(room_id)
        return self.filter(lambda session: session.room_id == room_id)

    def list_for_movie(self, movie_id: MovieId | int) -> list[Session]:
        movie_id = MovieId.coerce(movie_id)
        return self.filter(lambda session: session.movie_id == movie_id)

    def list_by_date(self, day: date) -> list[Session]:
        return self.filter(lambda session: session.date == day)


class ClientStore(FileStore[Client, ClientId]):
    entity_name = "client"
    file_name = "clients.txt"
    serializer_class = ClientRecordSerializer
    id_type = ClientId
    not_found_error = ClientNotFoundError


class TicketStore(FileStore[Ticket, TicketId]):
    """Tickets reference clients and sessions by ID."""

    entity_name = "ticket"
    file_name = "tickets.txt"
    serializer_class = TicketRecordSerializer
    id_type = TicketId
    not_found_error = TicketNotFoundError

    def __init__(
        self,
        clients: ClientStore,
        sessions: SessionStore,
        data_root: Path | str | None = None,
    ) -> None:
        super().__init__(data_root)
        self.clients = clients
        self.sessions = sessions

    def decode_context(self) -> dict[str, Any]:
        return {"clients": self.clients, "sessions": self.sessions}

    def list_for_session(self, session_id: SessionId | int) -> list[Ticket]:
        session_id = SessionId.coerce(session_id)
        return self.filter(lambda ticket: ticket.session_id == session_id)

    def list_for_client(self, client_id: ClientId | int) -> list[Ticket]:
        client_id = ClientId.coerce(client_id)
        return self.filter(lambda ticket: ticket.client_id == client_id)

    def count_for_session(self, session_id: SessionId | int) -> int:
        return len(self.list_for_session(session_id))
