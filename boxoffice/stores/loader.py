"""Ordered bootstrap of all stores.

Load order follows the foreign keys: rooms and movies, then sessions (room and
movie), then clients, then tickets (client and session). Records whose
references do not resolve are skipped with a warning by the store itself.

After tickets are in, derived state is rebuilt from them: client history and
loyalty points, and each session's available seats. The ticket file is the
source of truth for seat inventory.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from boxoffice.conf import box_office_settings
from boxoffice.domain import Capacity, Session
from boxoffice.stores.entity_stores import (
    ClientStore,
    MovieStore,
    RoomStore,
    SessionStore,
    TicketStore,
)

logger = logging.getLogger(__name__)


@dataclass
class BoxOffice:
    """The five stores of one data root, wired together."""

    rooms: RoomStore
    movies: MovieStore
    sessions: SessionStore
    clients: ClientStore
    tickets: TicketStore

    @classmethod
    def create(cls, data_root: Path | str | None = None) -> "BoxOffice":
        """Build empty, unloaded stores for ``data_root``."""
        if data_root is None:
            data_root = box_office_settings.data_root
        rooms = RoomStore(data_root)
        movies = MovieStore(data_root)
        sessions = SessionStore(rooms, movies, data_root)
        clients = ClientStore(data_root)
        tickets = TicketStore(clients, sessions, data_root)
        return cls(
            rooms=rooms,
            movies=movies,
            sessions=sessions,
            clients=clients,
            tickets=tickets,
        )

    @property
    def data_root(self) -> Path:
        return self.rooms.data_root

    def stores(self) -> tuple:
        """Stores in load order."""
        return (self.rooms, self.movies, self.sessions, self.clients, self.tickets)


def load_box_office(
    data_root: Path | str | None = None,
    points_per_ticket: int | None = None,
) -> BoxOffice:
    """Load every store from ``data_root`` and reconcile derived state."""
    box_office = BoxOffice.create(data_root)
    for store in box_office.stores():
        store.load()
    if points_per_ticket is None:
        points_per_ticket = box_office_settings.POINTS_PER_TICKET
    rebuild_client_history(box_office, points_per_ticket)
    reconcile_available_seats(box_office)
    return box_office


def rebuild_client_history(box_office: BoxOffice, points_per_ticket: int) -> None:
    """Rebuild ticket history and points from tickets, in ticket file order.

    Neither is persisted in the client file, so only memory is updated.
    """
    history: dict = {}
    for ticket in box_office.tickets.get_all():
        history.setdefault(ticket.client_id, []).append(ticket.id)

    rebuilt = []
    for client in box_office.clients.get_all():
        tickets = tuple(history.get(client.id, ()))
        rebuilt.append(
            replace(
                client,
                ticket_history=tickets,
                loyalty_points=len(tickets) * points_per_ticket,
            )
        )
    box_office.clients.replace_derived(rebuilt)


def derive_available_seats(box_office: BoxOffice, session: Session) -> int:
    room = box_office.rooms.get_by_id(session.room_id)
    sold = box_office.tickets.count_for_session(session.id)
    return room.total_seats - sold


def reconcile_available_seats(box_office: BoxOffice) -> list[Session]:
    """Make every session's seat counter match its room and sold tickets.

    Corrected sessions are written back in one snapshot and returned.
    """
    corrected: list[Session] = []
    for session in box_office.sessions.get_all():
        expected = derive_available_seats(box_office, session)
        if expected < 0:
            logger.warning(
                "Session %s has %d more ticket(s) than room %s seats; clamping to 0",
                session.id,
                -expected,
                session.room_id,
            )
            expected = 0
        if expected != session.available_seats.value:
            logger.warning(
                "Session %s stored %d available seat(s), tickets say %d; correcting",
                session.id,
                session.available_seats.value,
                expected,
            )
            corrected.append(replace(session, available_seats=Capacity(expected)))
    if corrected:
        box_office.sessions.update_many(corrected)
    return corrected
