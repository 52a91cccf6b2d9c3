"""Read-only occupancy reports over a room's sessions."""

from dataclasses import dataclass
from datetime import date, time

from django.core.cache import cache

from boxoffice.cache import occupancy_key
from boxoffice.conf import box_office_settings
from boxoffice.domain import MovieId, Room, RoomId, Session, SessionId
from boxoffice.stores.entity_stores import MovieStore, RoomStore, SessionStore


@dataclass(frozen=True)
class MovieOccupancy:
    """Average occupancy of one movie's sessions in a room."""

    movie_id: MovieId
    title: str
    session_count: int
    sold_seats: int
    offered_seats: int
    percent: float


@dataclass(frozen=True)
class SessionOccupancy:
    """Occupancy of a single session."""

    session_id: SessionId
    movie_id: MovieId
    title: str
    date: date
    time: time
    sold_seats: int
    capacity: int
    percent: float


def occupancy_percent(sold: int, offered: int) -> float:
    if offered <= 0:
        return 0.0
    return sold / offered * 100


class OccupancyService:
    """Service for occupancy reports, cached until a relevant store changes."""

    def __init__(
        self,
        rooms: RoomStore,
        sessions: SessionStore,
        movies: MovieStore,
    ) -> None:
        self._rooms = rooms
        self._sessions = sessions
        self._movies = movies

    def _room_sessions(self, room_id: RoomId | int) -> tuple[Room, list[Session]]:
        room = self._rooms.get(room_id)
        return room, self._sessions.list_for_room(room.id)

    def _title(self, movie_id: MovieId) -> str:
        movie = self._movies.get_by_id(movie_id)
        return movie.title if movie is not None else f"Movie {movie_id}"

    def _cached(self, room_id: RoomId | int, grouping: str, build):
        key = occupancy_key(self._sessions.data_root, RoomId.coerce(room_id), grouping)
        report = cache.get(key)
        if report is None:
            report = build()
            cache.set(key, report, box_office_settings.OCCUPANCY_CACHE_TIMEOUT)
        return report

    def by_movie(self, room_id: RoomId | int) -> list[MovieOccupancy]:
        """Return one row per movie shown in the room, in first-shown order.

        Raises:
            RoomNotFoundError: If the room does not exist.
        """
        return self._cached(room_id, "movie", lambda: self._build_by_movie(room_id))

    def _build_by_movie(self, room_id: RoomId | int) -> list[MovieOccupancy]:
        room, sessions = self._room_sessions(room_id)
        grouped: dict[MovieId, list[Session]] = {}
        for session in sessions:
            grouped.setdefault(session.movie_id, []).append(session)

        report = []
        for movie_id, movie_sessions in grouped.items():
            sold = sum(
                room.total_seats - session.available_seats.value
                for session in movie_sessions
            )
            offered = len(movie_sessions) * room.total_seats
            report.append(
                MovieOccupancy(
                    movie_id=movie_id,
                    title=self._title(movie_id),
                    session_count=len(movie_sessions),
                    sold_seats=sold,
                    offered_seats=offered,
                    percent=occupancy_percent(sold, offered),
                )
            )
        return report

    def by_session(
        self, room_id: RoomId | int, movie_id: MovieId | int | None = None
    ) -> list[SessionOccupancy]:
        """Return one row per session in the room, optionally for one movie.

        Raises:
            RoomNotFoundError: If the room does not exist.
        """
        if movie_id is not None:
            movie_id = MovieId.coerce(movie_id)
        grouping = f"session:{movie_id or '*'}"
        return self._cached(
            room_id, grouping, lambda: self._build_by_session(room_id, movie_id)
        )

    def _build_by_session(
        self, room_id: RoomId | int, movie_id: MovieId | None
    ) -> list[SessionOccupancy]:
        room, sessions = self._room_sessions(room_id)
        report = []
        for session in sessions:
            if movie_id is not None and session.movie_id != movie_id:
                continue
            sold = room.total_seats - session.available_seats.value
            report.append(
                SessionOccupancy(
                    session_id=session.id,
                    movie_id=session.movie_id,
                    title=self._title(session.movie_id),
                    date=session.date,
                    time=session.time,
                    sold_seats=sold,
                    capacity=room.total_seats,
                    percent=occupancy_percent(sold, room.total_seats),
                )
            )
        return report
