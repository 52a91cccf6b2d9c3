"""Purchase service - the ticket sale workflow.

Services:
- Depend only on stores passed in at construction
- Validate cross-entity invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors

A purchase validates and prices without touching any store, then commits
three writes (ticket, client, session) under the locks of all three stores.
If a write fails, the writes already made are undone before the error is
raised.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from boxoffice.domain import (
    Client,
    ClientId,
    Money,
    PaymentMethod,
    Session,
    SessionId,
    Ticket,
    TicketId,
)
from boxoffice.domain.errors import (
    ClientNotFoundError,
    DomainError,
    PersistenceFailureError,
    RoomCrowdedError,
    SessionNotFoundError,
    TicketNotFoundError,
)
from boxoffice.services.loyalty import DiscountPolicy, TieredLoyaltyPolicy
from boxoffice.stores.entity_stores import ClientStore, SessionStore, TicketStore

logger = logging.getLogger(__name__)


class PurchaseState(Enum):
    """Stages of a purchase attempt."""

    VALIDATING = "validating"
    PRICING_COMPUTED = "pricing_computed"
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Quote:
    """Price a client would pay for a session right now."""

    client_id: ClientId
    session_id: SessionId
    base_price: Money
    discount_percent: Decimal
    final_price: Money


class PurchaseService:
    """Service for selling and looking up tickets."""

    def __init__(
        self,
        tickets: TicketStore,
        clients: ClientStore,
        sessions: SessionStore,
        policy: DiscountPolicy | None = None,
    ) -> None:
        self._tickets = tickets
        self._clients = clients
        self._sessions = sessions
        self._policy = policy or TieredLoyaltyPolicy.from_settings()

    @property
    def policy(self) -> DiscountPolicy:
        return self._policy

    def _resolve(
        self, client_id: ClientId | int | str, session_id: SessionId | int | str
    ) -> tuple[Client, Session]:
        client = self._clients.get_by_id(ClientId.coerce(client_id))
        if client is None:
            raise ClientNotFoundError(client_id)
        session = self._sessions.get_by_id(SessionId.coerce(session_id))
        if session is None:
            raise SessionNotFoundError(session_id)
        return client, session

    def _price(self, client: Client, session: Session) -> Quote:
        discount = self._policy.discount_percent(client)
        return Quote(
            client_id=client.id,
            session_id=session.id,
            base_price=session.ticket_price,
            discount_percent=discount,
            final_price=session.ticket_price.discounted(discount),
        )

    def quote(
        self, client_id: ClientId | int | str, session_id: SessionId | int | str
    ) -> Quote:
        """Return the discount and final price without selling anything.

        Raises:
            InvalidIdError: If an ID is not a positive integer.
            ClientNotFoundError: If the client does not exist.
            SessionNotFoundError: If the session does not exist.
        """
        client, session = self._resolve(client_id, session_id)
        return self._price(client, session)

    def purchase_ticket(
        self,
        client_id: ClientId | int | str,
        session_id: SessionId | int | str,
        payment_method: str | PaymentMethod,
    ) -> Ticket:
        """Sell one seat of ``session_id`` to ``client_id``.

        Raises:
            InvalidIdError: If an ID is not a positive integer.
            ClientNotFoundError: If the client does not exist.
            SessionNotFoundError: If the session does not exist.
            RoomCrowdedError: If the session has no seats left.
            PaymentInvalidError: If the payment method is not recognised.
            PersistenceFailureError: If a write failed; prior writes of this
                purchase have been undone.
        """
        state = PurchaseState.VALIDATING
        with self._tickets.lock, self._clients.lock, self._sessions.lock:
            try:
                client, session = self._resolve(client_id, session_id)
                if session.available_seats.value <= 0:
                    raise RoomCrowdedError(session.id)
                method = PaymentMethod.from_text(payment_method)

                quote = self._price(client, session)
                state = PurchaseState.PRICING_COMPUTED

                ticket = Ticket(
                    id=self._tickets.next_id(),
                    client_id=client.id,
                    session_id=session.id,
                    final_price=quote.final_price,
                    payment_method=method,
                )
                self._commit(ticket, client, session)
            except DomainError as exc:
                logger.info(
                    "Purchase rejected (client=%s session=%s stage=%s -> %s): %s",
                    client_id,
                    session_id,
                    state.value,
                    PurchaseState.REJECTED.value,
                    exc,
                )
                raise
            state = PurchaseState.COMMITTED

        logger.info(
            "Ticket %s sold: client=%s session=%s price=%s discount=%s%% method=%s (%s)",
            ticket.id,
            ticket.client_id,
            ticket.session_id,
            ticket.final_price,
            quote.discount_percent,
            ticket.payment_method.value,
            state.value,
        )
        return ticket

    def _commit(self, ticket: Ticket, client: Client, session: Session) -> None:
        """Write ticket, client and session, undoing earlier writes on failure."""
        undo: list = []
        try:
            self._tickets.add(ticket)
            undo.append(lambda: self._tickets.remove_by_id(ticket.id))

            points = self._policy.points_for(ticket)
            self._clients.update(client.with_ticket(ticket.id, points))
            undo.append(lambda: self._clients.update(client))

            self._sessions.update(session.with_seat_sold())
        except PersistenceFailureError:
            for action in reversed(undo):
                try:
                    action()
                except PersistenceFailureError:
                    logger.exception(
                        "Could not undo partial purchase of ticket %s; "
                        "seat counts are re-derived from tickets on next load",
                        ticket.id,
                    )
            raise

    def get_ticket(self, ticket_id: TicketId | int | str) -> Ticket:
        """Return a ticket by ID.

        Raises:
            InvalidIdError: If the ID is not a positive integer.
            TicketNotFoundError: If the ticket does not exist.
        """
        ticket = self._tickets.get_by_id(TicketId.coerce(ticket_id))
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def list_tickets(self) -> list[Ticket]:
        return self._tickets.get_all()

    def correct_payment_method(
        self, ticket_id: TicketId | int | str, payment_method: str | PaymentMethod
    ) -> Ticket:
        """Administrative correction of the payment method recorded on a ticket.

        Price, client and session of a sold ticket never change.
        """
        method = PaymentMethod.from_text(payment_method)
        with self._tickets.lock:
            ticket = self.get_ticket(ticket_id)
            corrected = replace(ticket, payment_method=method)
            self._tickets.update(corrected)
        logger.info(
            "Ticket %s payment method corrected: %s -> %s",
            ticket.id,
            ticket.payment_method.value,
            method.value,
        )
        return corrected
