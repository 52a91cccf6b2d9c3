"""Session scheduling.

Creating a session needs its room (seat inventory) and movie (duration), so it
lives here rather than in the session store.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal

from boxoffice.domain import (
    Capacity,
    Money,
    MovieId,
    Room,
    RoomId,
    Session,
    SessionId,
)
from boxoffice.domain.errors import (
    InvalidValueError,
    MovieNotFoundError,
    RoomNotFoundError,
    SessionHasTicketsError,
    SessionNotFoundError,
)
from boxoffice.stores.entity_stores import (
    MovieStore,
    RoomStore,
    SessionStore,
    TicketStore,
)
from boxoffice.stores.serializers import DATE_FORMAT, TIME_FORMAT

logger = logging.getLogger(__name__)


def parse_date(value: date | str) -> date:
    """Accept a date or a ``dd-MM-yyyy`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except (AttributeError, ValueError):
        raise InvalidValueError(
            f"Invalid date {value!r}, expected dd-MM-yyyy"
        ) from None


def parse_time(value: time | str) -> time:
    """Accept a time or an ``HH:mm`` string."""
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(value.strip(), TIME_FORMAT).time()
    except (AttributeError, ValueError):
        raise InvalidValueError(f"Invalid time {value!r}, expected HH:mm") from None


def parse_price(value: Money | Decimal | int | str) -> Money:
    if isinstance(value, Money):
        return value
    try:
        return Money(Decimal(str(value))).quantized()
    except (ArithmeticError, ValueError):
        raise InvalidValueError(f"Invalid ticket price {value!r}") from None


class ScheduleService:
    """Service for creating, changing and cancelling sessions."""

    def __init__(
        self,
        rooms: RoomStore,
        movies: MovieStore,
        sessions: SessionStore,
        tickets: TicketStore,
    ) -> None:
        self._rooms = rooms
        self._movies = movies
        self._sessions = sessions
        self._tickets = tickets

    def register_room(self, capacity: int) -> Room:
        """Create a room with a fresh ID."""
        if capacity <= 0:
            raise InvalidValueError("Room capacity must be positive")
        room = Room(id=self._rooms.next_id(), capacity=Capacity(capacity))
        return self._rooms.add(room)

    def schedule_session(
        self,
        session_date: date | str,
        session_time: time | str,
        room_id: RoomId | int,
        movie_id: MovieId | int,
        ticket_price: Money | Decimal | int | str,
        duration: int | None = None,
    ) -> Session:
        """Create a session of a movie in a room.

        ``duration`` defaults to the movie's. Every seat of the room is on
        sale; the seat counter is always capacity minus tickets sold.

        Raises:
            RoomNotFoundError: If the room does not exist.
            MovieNotFoundError: If the movie does not exist.
            InvalidValueError: If a value is malformed or out of range.
        """
        room = self._rooms.get_by_id(RoomId.coerce(room_id))
        if room is None:
            raise RoomNotFoundError(room_id)
        movie = self._movies.get_by_id(MovieId.coerce(movie_id))
        if movie is None:
            raise MovieNotFoundError(movie_id)

        if duration is None:
            duration = movie.duration
        if duration <= 0:
            raise InvalidValueError("Session duration must be positive")
        day = parse_date(session_date)
        start = parse_time(session_time)
        price = parse_price(ticket_price)

        session = Session(
            id=self._sessions.next_id(),
            date=day,
            time=start,
            duration=duration,
            room_id=room.id,
            movie_id=movie.id,
            ticket_price=price,
            available_seats=Capacity(room.total_seats),
        )
        self._sessions.add(session)
        logger.info(
            "Scheduled session %s: movie %s in room %s on %s at %s",
            session.id,
            movie.id,
            room.id,
            session.date.strftime(DATE_FORMAT),
            session.time.strftime(TIME_FORMAT),
        )
        return session

    def update_session(
        self,
        session_id: SessionId | int,
        session_date: date | str | None = None,
        session_time: time | str | None = None,
        ticket_price: Money | Decimal | int | str | None = None,
    ) -> Session:
        """Change the schedule or price of a session; seats are untouched."""
        with self._sessions.lock:
            session = self._sessions.get(session_id)
            changes: dict = {}
            if session_date is not None:
                changes["date"] = parse_date(session_date)
            if session_time is not None:
                changes["time"] = parse_time(session_time)
            if ticket_price is not None:
                changes["ticket_price"] = parse_price(ticket_price)
            if not changes:
                return session
            return self._sessions.update(replace(session, **changes))

    def cancel_session(self, session_id: SessionId | int) -> Session:
        """Remove a session that has not sold any ticket.

        Raises:
            SessionNotFoundError: If the session does not exist.
            SessionHasTicketsError: If tickets were sold for it.
        """
        with self._tickets.lock, self._sessions.lock:
            session = self._sessions.get_by_id(SessionId.coerce(session_id))
            if session is None:
                raise SessionNotFoundError(session_id)
            sold = self._tickets.count_for_session(session.id)
            if sold:
                raise SessionHasTicketsError(session.id, sold)
            self._sessions.remove_by_id(session.id)
        logger.info("Cancelled session %s", session.id)
        return session

    def sessions_for_room(self, room_id: RoomId | int) -> list[Session]:
        """Return the room's sessions in scheduling order.

        Raises:
            RoomNotFoundError: If the room does not exist.
        """
        room = self._rooms.get(room_id)
        return self._sessions.list_for_room(room.id)
