"""Domain error codes for the box office."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    CLIENT_NOT_FOUND = "CLIENT_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    MOVIE_NOT_FOUND = "MOVIE_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    ROOM_CROWDED = "ROOM_CROWDED"
    PAYMENT_INVALID = "PAYMENT_INVALID"
    INVALID_ID = "INVALID_ID"
    INVALID_RECORD = "INVALID_RECORD"
    INVALID_VALUE = "INVALID_VALUE"
    DUPLICATE_ID = "DUPLICATE_ID"
    SESSION_HAS_TICKETS = "SESSION_HAS_TICKETS"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """A referenced entity is missing. Subclasses name the entity type."""

    entity_name = "Entity"
    error_code = ErrorCode.NOT_FOUND

    def __init__(self, entity_id: object) -> None:
        super().__init__(
            code=self.error_code,
            message=f"{self.entity_name} {entity_id} not found",
        )
        self.entity_id = entity_id


class ClientNotFoundError(NotFoundError):
    entity_name = "Client"
    error_code = ErrorCode.CLIENT_NOT_FOUND


class SessionNotFoundError(NotFoundError):
    entity_name = "Session"
    error_code = ErrorCode.SESSION_NOT_FOUND


class RoomNotFoundError(NotFoundError):
    entity_name = "Room"
    error_code = ErrorCode.ROOM_NOT_FOUND


class MovieNotFoundError(NotFoundError):
    entity_name = "Movie"
    error_code = ErrorCode.MOVIE_NOT_FOUND


class TicketNotFoundError(NotFoundError):
    entity_name = "Ticket"
    error_code = ErrorCode.TICKET_NOT_FOUND


class CapacityExceededError(DomainError):
    """A session has no seats left to sell."""


class RoomCrowdedError(CapacityExceededError):
    """Raised when a purchase targets a sold-out session."""

    def __init__(self, session_id: object) -> None:
        super().__init__(
            code=ErrorCode.ROOM_CROWDED,
            message=f"Session {session_id} is sold out",
        )
        self.session_id = session_id


class InvalidInputError(DomainError):
    """Input could not be parsed or violates a field rule."""


class PaymentInvalidError(InvalidInputError):
    """Raised when the payment method is not one of the accepted tokens."""

    def __init__(self, method: object) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_INVALID,
            message=f"Payment method {method!r} is invalid",
        )
        self.method = method


class InvalidIdError(InvalidInputError):
    """Raised when an ID is not a positive integer."""

    def __init__(self, value: object) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid ID {value!r}: must be a positive integer",
        )
        self.value = value


class InvalidRecordError(InvalidInputError):
    """Raised when a persisted record cannot be decoded or encoded."""

    def __init__(self, detail: str, line: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RECORD,
            message=detail,
        )
        self.line = line


class InvalidValueError(InvalidInputError):
    """Raised when a caller-supplied value is malformed or out of range."""

    def __init__(self, detail: str) -> None:
        super().__init__(code=ErrorCode.INVALID_VALUE, message=detail)


class DuplicateIdError(InvalidInputError):
    """Raised when adding an entity whose ID is already stored."""

    def __init__(self, entity_id: object) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_ID,
            message=f"ID {entity_id} already exists",
        )
        self.entity_id = entity_id


class SessionHasTicketsError(InvalidInputError):
    """Raised when cancelling a session that already sold tickets."""

    def __init__(self, session_id: object, sold: int) -> None:
        super().__init__(
            code=ErrorCode.SESSION_HAS_TICKETS,
            message=f"Session {session_id} has {sold} ticket(s) sold",
        )
        self.session_id = session_id
        self.sold = sold


class PersistenceFailureError(DomainError):
    """Raised when a backing file could not be read or written."""

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(
            code=ErrorCode.PERSISTENCE_FAILURE,
            message=f"Could not access {path}: {reason}",
        )
        self.path = path
