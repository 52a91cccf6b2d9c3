"""Pytest configuration and shared fixtures."""

from datetime import date, time
from decimal import Decimal

import pytest

from boxoffice.domain import (
    Capacity,
    Client,
    Money,
    Movie,
    Room,
    Session,
)
from boxoffice.services import (
    NoDiscountPolicy,
    OccupancyService,
    PurchaseService,
    ScheduleService,
    TieredLoyaltyPolicy,
)
from boxoffice.stores import BoxOffice, load_box_office


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def data_root(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def box_office(data_root) -> BoxOffice:
    return load_box_office(data_root)


@pytest.fixture
def movie(box_office: BoxOffice) -> Movie:
    return box_office.movies.add(
        Movie(
            id=box_office.movies.next_id(),
            title="Central Station",
            genre="Drama",
            duration=113,
            classification="12",
            synopsis="A letter writer helps a boy find his father",
        )
    )


@pytest.fixture
def room(box_office: BoxOffice) -> Room:
    return box_office.rooms.add(
        Room(id=box_office.rooms.next_id(), capacity=Capacity(2))
    )


@pytest.fixture
def session(box_office: BoxOffice, room: Room, movie: Movie) -> Session:
    return box_office.sessions.add(
        Session(
            id=box_office.sessions.next_id(),
            date=date(2025, 6, 11),
            time=time(19, 30),
            duration=movie.duration,
            room_id=room.id,
            movie_id=movie.id,
            ticket_price=Money(Decimal("20.00")),
            available_seats=Capacity(room.total_seats),
        )
    )


@pytest.fixture
def make_client(box_office: BoxOffice):
    def _make(name: str = "Helen", cpf: str = "123.456.789-00") -> Client:
        return box_office.clients.add(
            Client(
                id=box_office.clients.next_id(),
                name=name,
                email=f"{name.lower()}@example.com",
                cpf=cpf,
                birthday=date(1990, 3, 14),
            )
        )

    return _make


@pytest.fixture
def client(make_client) -> Client:
    return make_client()


@pytest.fixture
def purchase_service(box_office: BoxOffice) -> PurchaseService:
    return PurchaseService(
        box_office.tickets,
        box_office.clients,
        box_office.sessions,
        policy=TieredLoyaltyPolicy(tiers=[(0, 0), (1, 10)], points_per_ticket=1),
    )


@pytest.fixture
def flat_purchase_service(box_office: BoxOffice) -> PurchaseService:
    return PurchaseService(
        box_office.tickets,
        box_office.clients,
        box_office.sessions,
        policy=NoDiscountPolicy(),
    )


@pytest.fixture
def schedule_service(box_office: BoxOffice) -> ScheduleService:
    return ScheduleService(
        box_office.rooms, box_office.movies, box_office.sessions, box_office.tickets
    )


@pytest.fixture
def occupancy_service(box_office: BoxOffice) -> OccupancyService:
    return OccupancyService(box_office.rooms, box_office.sessions, box_office.movies)
