"""Unit tests for the delimited-text stores.

Run with: pytest tests/test_stores.py -v
"""

import logging
from datetime import date, time
from decimal import Decimal
from unittest import mock

import pytest

from boxoffice.domain import (
    Capacity,
    Client,
    ClientId,
    Money,
    Movie,
    MovieId,
    PaymentMethod,
    Room,
    RoomId,
    Session,
    SessionId,
    Ticket,
    TicketId,
)
from boxoffice.domain.errors import (
    DuplicateIdError,
    InvalidIdError,
    InvalidRecordError,
    MovieNotFoundError,
    PersistenceFailureError,
)
from boxoffice.signals import store_changed
from boxoffice.stores import (
    ClientStore,
    IdSequence,
    MovieStore,
    RoomStore,
    SessionStore,
    TicketStore,
    atomic_write,
)


def make_movie(movie_id: int, title: str = "Bacurau", duration: int = 131) -> Movie:
    return Movie(
        id=MovieId(movie_id),
        title=title,
        genre="Western",
        duration=duration,
        classification="16",
        synopsis="A village disappears from the map",
    )


@pytest.fixture
def movies(data_root) -> MovieStore:
    store = MovieStore(data_root)
    store.load()
    return store


class TestIdSequence:
    """Tests for ID allocation."""

    def test_starts_at_one_and_increments(self):
        """A fresh sequence hands out 1, 2, 3."""
        sequence = IdSequence(MovieId)
        assert [sequence.allocate() for _ in range(3)] == [MovieId(1), MovieId(2), MovieId(3)]

    def test_advance_past_highest_seen(self):
        """After advancing past reloaded IDs the next one is max + 1."""
        sequence = IdSequence(RoomId)
        for seen in (4, 2, 9, 3):
            sequence.advance_past(seen)
        assert sequence.allocate() == RoomId(10)

    def test_advance_never_moves_backwards(self):
        sequence = IdSequence(RoomId, start=20)
        sequence.advance_past(RoomId(5))
        assert sequence.peek == 20

    def test_reset(self):
        """reset restarts allocation at 1."""
        sequence = IdSequence(TicketId)
        sequence.allocate()
        sequence.allocate()
        sequence.reset()
        assert sequence.allocate() == TicketId(1)


class TestFileStoreContract:
    """Tests for add, lookup, update, remove and clear."""

    def test_load_creates_missing_directory_and_file(self, data_root):
        """A missing data root and file are created empty."""
        store = MovieStore(data_root)
        assert store.load() == 0
        assert (data_root / "movies.txt").read_text() == ""

    def test_add_and_get_by_id(self, movies):
        """Added entities can be fetched by typed or raw ID."""
        movie = movies.add(make_movie(1))
        assert movies.get_by_id(MovieId(1)) == movie
        assert movies.get_by_id(1) == movie
        assert MovieId(1) in movies
        assert 1 in movies
        assert movies.get_by_id(2) is None

    def test_get_by_id_rejects_non_positive(self, movies):
        """Looking up a non-positive ID is invalid input."""
        with pytest.raises(InvalidIdError):
            movies.get_by_id(0)

    def test_add_duplicate_id_fails(self, movies):
        movies.add(make_movie(1))
        with pytest.raises(DuplicateIdError):
            movies.add(make_movie(1, title="Other"))
        assert len(movies) == 1

    def test_add_advances_sequence(self, movies):
        """Adding an explicit ID keeps future IDs above it."""
        movies.add(make_movie(7))
        assert movies.next_id() == MovieId(8)

    def test_get_all_keeps_insertion_order(self, movies):
        for movie_id in (3, 1, 2):
            movies.add(make_movie(movie_id, title=f"Movie {movie_id}"))
        assert [movie.id.value for movie in movies.get_all()] == [3, 1, 2]

    def test_update_replaces_record_in_place(self, movies):
        """update replaces by ID and keeps the position."""
        movies.add(make_movie(1, title="First"))
        movies.add(make_movie(2, title="Second"))
        movies.update(make_movie(1, title="First (restored)"))
        assert [movie.title for movie in movies.get_all()] == ["First (restored)", "Second"]

    def test_update_missing_raises_not_found(self, movies):
        with pytest.raises(MovieNotFoundError):
            movies.update(make_movie(5))

    def test_get_raises_not_found(self, movies):
        with pytest.raises(MovieNotFoundError):
            movies.get(5)

    def test_remove_by_id(self, movies):
        movies.add(make_movie(1))
        assert movies.remove_by_id(1) is True
        assert movies.remove_by_id(1) is False
        assert movies.get_all() == []

    def test_clear(self, movies, data_root):
        movies.add(make_movie(1))
        movies.clear()
        assert len(movies) == 0
        assert (data_root / "movies.txt").read_text() == ""

    def test_get_by_title_ignores_case_and_padding(self, movies):
        movies.add(make_movie(1, title="Aquarius"))
        assert movies.get_by_title("  aquarius ").id == MovieId(1)
        assert movies.get_by_title("Bacurau") is None


class TestSnapshotPersistence:
    """Tests for full-collection writes."""

    def test_every_mutation_rewrites_the_file(self, movies, data_root):
        path = data_root / "movies.txt"
        movies.add(make_movie(1, title="One"))
        movies.add(make_movie(2, title="Two"))
        assert path.read_text().splitlines() == [
            "1;One;Western;131;16;A village disappears from the map",
            "2;Two;Western;131;16;A village disappears from the map",
        ]
        movies.remove_by_id(1)
        assert path.read_text().splitlines() == [
            "2;Two;Western;131;16;A village disappears from the map",
        ]

    def test_reads_never_touch_the_file(self, movies, data_root):
        """Lookups are served from memory."""
        movies.add(make_movie(1))
        (data_root / "movies.txt").unlink()
        assert movies.get_by_id(1) is not None
        assert len(movies.get_all()) == 1
        assert not (data_root / "movies.txt").exists()

    def test_failed_write_raises_and_keeps_state(self, movies, data_root):
        """A write failure is escalated and neither memory nor file change."""
        movies.add(make_movie(1))
        before = (data_root / "movies.txt").read_text()
        with mock.patch(
            "boxoffice.stores.file_store.atomic_write", side_effect=OSError("disk full")
        ):
            with pytest.raises(PersistenceFailureError) as excinfo:
                movies.add(make_movie(2))
        assert isinstance(excinfo.value.__cause__, OSError)
        assert [movie.id for movie in movies.get_all()] == [MovieId(1)]
        assert (data_root / "movies.txt").read_text() == before

    def test_failed_update_keeps_previous_record(self, movies):
        movies.add(make_movie(1, title="Original"))
        with mock.patch(
            "boxoffice.stores.file_store.atomic_write", side_effect=OSError("read-only")
        ):
            with pytest.raises(PersistenceFailureError):
                movies.update(make_movie(1, title="Changed"))
        assert movies.get_by_id(1).title == "Original"

    def test_delimiter_in_text_is_rejected_before_writing(self, movies, data_root):
        movies.add(make_movie(1))
        before = (data_root / "movies.txt").read_text()
        with pytest.raises(InvalidRecordError):
            movies.add(make_movie(2, title="Love; Death"))
        assert len(movies) == 1
        assert (data_root / "movies.txt").read_text() == before

    def test_mutations_send_store_changed(self, movies):
        received = []

        def listener(sender, store, action, entity, **kwargs):
            received.append((sender, action, entity))

        store_changed.connect(listener)
        try:
            movie = movies.add(make_movie(1))
            movies.remove_by_id(1)
        finally:
            store_changed.disconnect(listener)
        assert received == [(MovieStore, "add", movie), (MovieStore, "remove", movie)]


class TestAtomicWrite:
    """Tests for temp-file-and-rename writes."""

    def test_writes_lines_and_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "rooms.txt"
        atomic_write(path, ["1;40", "2;80"])
        assert path.read_text() == "1;40\n2;80\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["rooms.txt"]

    def test_failed_replace_keeps_original(self, tmp_path):
        """A crash before the rename leaves the committed file intact."""
        path = tmp_path / "rooms.txt"
        path.write_text("1;40\n")
        with mock.patch("boxoffice.stores.file_store.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                atomic_write(path, ["1;40", "2;80"])
        assert path.read_text() == "1;40\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["rooms.txt"]


class TestRoundTrip:
    """Persisting a collection and reloading it yields the same collection."""

    def test_movies_round_trip(self, data_root):
        store = MovieStore(data_root)
        store.load()
        originals = [make_movie(1, title="Aquarius"), make_movie(4, title="Bacurau", duration=90)]
        for movie in originals:
            store.add(movie)

        reloaded = MovieStore(data_root)
        reloaded.load()
        assert reloaded.get_all() == originals

    def test_blank_and_padded_text_round_trip(self, data_root):
        """Text columns come back verbatim, including blanks and padding."""
        movies = MovieStore(data_root)
        clients = ClientStore(data_root)
        movies.load()
        clients.load()
        blank = movies.add(
            Movie(
                id=MovieId(1),
                title="Untitled",
                genre="",
                duration=90,
                classification="L",
                synopsis="",
            )
        )
        padded = movies.add(make_movie(2, title=" Padded "))
        client = clients.add(
            Client(
                id=ClientId(1),
                name="  Helen",
                email="",
                cpf="",
                birthday=date(1990, 3, 14),
            )
        )

        reloaded_movies = MovieStore(data_root)
        reloaded_clients = ClientStore(data_root)
        assert reloaded_movies.load() == 2
        assert reloaded_clients.load() == 1
        assert reloaded_movies.get_all() == [blank, padded]
        assert reloaded_clients.get_all() == [client]

    def test_full_graph_round_trip(self, data_root):
        rooms = RoomStore(data_root)
        movies = MovieStore(data_root)
        sessions = SessionStore(rooms, movies, data_root)
        clients = ClientStore(data_root)
        tickets = TicketStore(clients, sessions, data_root)
        for store in (rooms, movies, sessions, clients, tickets):
            store.load()

        room = rooms.add(Room(id=RoomId(1), capacity=Capacity(50)))
        movie = movies.add(make_movie(1))
        session = sessions.add(
            Session(
                id=SessionId(1),
                date=date(2025, 12, 24),
                time=time(9, 5),
                duration=movie.duration,
                room_id=room.id,
                movie_id=movie.id,
                ticket_price=Money(Decimal("32.50")),
                available_seats=Capacity(49),
            )
        )
        client = clients.add(
            Client(
                id=ClientId(1),
                name="Helen Santos",
                email="helen@example.com",
                cpf="111.222.333-44",
                birthday=date(1999, 2, 28),
            )
        )
        ticket = tickets.add(
            Ticket(
                id=TicketId(1),
                client_id=client.id,
                session_id=session.id,
                final_price=Money(Decimal("29.25")),
                payment_method=PaymentMethod.DEBIT_CARD,
            )
        )

        assert (data_root / "sessions.txt").read_text() == "1;24-12-2025;09:05;1;1;32.50;49\n"
        assert (data_root / "clients.txt").read_text() == (
            "1;Helen Santos;helen@example.com;111.222.333-44;28-02-1999\n"
        )
        assert (data_root / "tickets.txt").read_text() == "1;1;1;29.25;debit_card\n"

        new_rooms = RoomStore(data_root)
        new_movies = MovieStore(data_root)
        new_sessions = SessionStore(new_rooms, new_movies, data_root)
        new_clients = ClientStore(data_root)
        new_tickets = TicketStore(new_clients, new_sessions, data_root)
        for store in (new_rooms, new_movies, new_sessions, new_clients, new_tickets):
            store.load()

        assert new_rooms.get_all() == [room]
        assert new_sessions.get_all() == [session]
        assert new_clients.get_all() == [client]
        assert new_tickets.get_all() == [ticket]


class TestPartialLoad:
    """Malformed lines are skipped with a warning."""

    def test_bad_lines_are_skipped(self, data_root, caplog):
        data_root.mkdir(parents=True)
        (data_root / "movies.txt").write_text(
            "\n".join(
                [
                    "1;Aquarius;Drama;146;16;A widow refuses to sell",
                    "2;Bad Duration;Drama;abc;12;x",
                    "3;Too;Few",
                    "0;Zero Id;Drama;90;L;x",
                    "",
                    "1;Duplicate;Drama;90;L;x",
                    "5;Bacurau;Western;131;16;A village disappears",
                ]
            )
            + "\n"
        )
        store = MovieStore(data_root)
        with caplog.at_level(logging.WARNING, logger="boxoffice"):
            loaded = store.load()

        assert loaded == 2
        assert [movie.title for movie in store.get_all()] == ["Aquarius", "Bacurau"]
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 4
        assert "duplicate id 1" in warnings[-1].getMessage()

    def test_reload_then_create_gets_fresh_id(self, data_root):
        """Create N, persist, reload, create one more: its ID exceeds all loaded."""
        store = MovieStore(data_root)
        store.load()
        for _ in range(3):
            store.add(make_movie(store.next_id().value))

        reloaded = MovieStore(data_root)
        reloaded.load()
        new_movie = reloaded.add(make_movie(reloaded.next_id().value, title="Fourth"))
        assert new_movie.id == MovieId(4)
        assert all(new_movie.id > movie.id for movie in reloaded.get_all()[:-1])

    def test_bad_payment_token_skips_ticket(self, box_office, session, client, data_root, caplog):
        (data_root / "tickets.txt").write_text(
            f"1;{client.id};{session.id};20.00;bitcoin\n"
            f"2;{client.id};{session.id};20.00;pix\n"
        )
        with caplog.at_level(logging.WARNING, logger="boxoffice"):
            box_office.tickets.load()
        assert [ticket.id for ticket in box_office.tickets.get_all()] == [TicketId(2)]
        assert "payment_method" in caplog.text

    def test_undecodable_line_is_skipped(self, data_root, caplog):
        """A line that is not UTF-8 is skipped; the rest of the file loads."""
        data_root.mkdir(parents=True)
        (data_root / "movies.txt").write_bytes(
            "1;Aquarius;Drama;146;16;A widow refuses to sell\n".encode("utf-8")
            + b"2;Bad \xff Bytes;Drama;90;L;x\n"
            + "3;Bacurau;Western;131;16;Sertão\n".encode("utf-8")
        )
        store = MovieStore(data_root)
        with caplog.at_level(logging.WARNING, logger="boxoffice"):
            loaded = store.load()

        assert loaded == 2
        assert [movie.id for movie in store.get_all()] == [MovieId(1), MovieId(3)]
        assert store.get_by_id(3).synopsis == "Sertão"
        assert "movies.txt:2: not valid UTF-8" in caplog.text
