"""Domain models representing persisted state.

These are pure domain objects. Records are immutable: mutators return a new
instance and stores replace the previous snapshot by id.
"""

from dataclasses import dataclass, replace
from datetime import date, time

from boxoffice.domain.errors import InvalidValueError
from boxoffice.domain.value_objects import (
    Capacity,
    ClientId,
    Money,
    MovieId,
    PaymentMethod,
    RoomId,
    SessionId,
    TicketId,
)


@dataclass(frozen=True)
class Movie:
    """Domain representation of a Movie."""

    id: MovieId
    title: str
    genre: str
    duration: int
    classification: str
    synopsis: str

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise InvalidValueError("Movie duration must be positive")


@dataclass(frozen=True)
class Room:
    """Domain representation of a Room.

    A room does not hold its sessions; they are queried from the session store
    by room id.
    """

    id: RoomId
    capacity: Capacity

    def __post_init__(self) -> None:
        if self.capacity.value <= 0:
            raise InvalidValueError("Room capacity must be positive")

    @property
    def total_seats(self) -> int:
        return self.capacity.value


@dataclass(frozen=True)
class Session:
    """Domain representation of a single screening."""

    id: SessionId
    date: date
    time: time
    duration: int
    room_id: RoomId
    movie_id: MovieId
    ticket_price: Money
    available_seats: Capacity

    @property
    def is_sold_out(self) -> bool:
        return self.available_seats.value == 0

    def with_available_seats(self, seats: int) -> "Session":
        return replace(self, available_seats=Capacity(seats))

    def with_seat_sold(self) -> "Session":
        """Return a copy with exactly one seat fewer."""
        return self.with_available_seats(self.available_seats.value - 1)


@dataclass(frozen=True)
class Client:
    """Domain representation of a Client.

    ``loyalty_points`` and ``ticket_history`` are rebuilt from the ticket file
    on load.
    """

    id: ClientId
    name: str
    email: str
    cpf: str
    birthday: date
    loyalty_points: int = 0
    ticket_history: tuple[TicketId, ...] = ()

    def with_ticket(self, ticket_id: TicketId, points: int) -> "Client":
        """Return a copy with the ticket appended and points credited."""
        return replace(
            self,
            ticket_history=self.ticket_history + (ticket_id,),
            loyalty_points=self.loyalty_points + points,
        )


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a sold Ticket."""

    id: TicketId
    client_id: ClientId
    session_id: SessionId
    final_price: Money
    payment_method: PaymentMethod
