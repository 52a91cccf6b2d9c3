from boxoffice.domain.models import Client, Movie, Room, Session, Ticket
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

__all__ = [
    "Movie",
    "Room",
    "Session",
    "Client",
    "Ticket",
    "MovieId",
    "RoomId",
    "SessionId",
    "ClientId",
    "TicketId",
    "Money",
    "Capacity",
    "PaymentMethod",
]
