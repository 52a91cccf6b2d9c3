"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Self

from boxoffice.domain.errors import (
    InvalidIdError,
    InvalidValueError,
    PaymentInvalidError,
)

CENT = Decimal("0.01")


@dataclass(frozen=True, order=True)
class EntityId:
    """Positive integer identifier. Subclassed once per entity type."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidIdError(self.value)
        if self.value <= 0:
            raise InvalidIdError(self.value)

    @classmethod
    def from_string(cls, value: str) -> Self:
        try:
            return cls(value=int(value.strip()))
        except (AttributeError, ValueError):
            raise InvalidIdError(value) from None

    @classmethod
    def coerce(cls, value: "EntityId | int | str") -> Self:
        """Accept a typed id, a raw int or a numeric string."""
        if isinstance(value, cls):
            return value
        if isinstance(value, EntityId):
            return cls(value=value.value)
        if isinstance(value, str):
            return cls.from_string(value)
        return cls(value=value)

    def __str__(self) -> str:
        return str(self.value)


class MovieId(EntityId):
    """Unique identifier for a Movie."""


class RoomId(EntityId):
    """Unique identifier for a Room."""


class SessionId(EntityId):
    """Unique identifier for a Session."""


class ClientId(EntityId):
    """Unique identifier for a Client."""


class TicketId(EntityId):
    """Unique identifier for a Ticket."""


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation:
                raise InvalidValueError(
                    f"Invalid money amount: {self.amount!r}"
                ) from None
        if not self.amount.is_finite():
            raise InvalidValueError("Money amount must be finite")
        if self.amount < 0:
            raise InvalidValueError("Money amount cannot be negative")

    def quantized(self) -> "Money":
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    def discounted(self, percent: Decimal) -> "Money":
        """Return this amount reduced by ``percent``, rounded to cents."""
        factor = Decimal(1) - Decimal(percent) / Decimal(100)
        return Money(self.amount * factor).quantized()

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise InvalidValueError("Capacity cannot be negative")


class PaymentMethod(str, Enum):
    """Accepted payment methods. The value is the persisted token."""

    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PIX = "pix"

    @classmethod
    def from_text(cls, text: str | None) -> "PaymentMethod":
        """Parse user text such as ``"Credit Card"`` or ``"pix"``.

        Raises:
            PaymentInvalidError: If the text names no known method.
        """
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise PaymentInvalidError(text)
        token = text.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(token)
        except ValueError:
            raise PaymentInvalidError(text) from None

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()
