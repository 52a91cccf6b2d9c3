"""Serializers for transforming domain models to and from persisted records.

Each record is one delimited line. The declared field order of a serializer is
the column order in its file.
"""

from collections.abc import Mapping
from typing import Any

from rest_framework import serializers

from boxoffice.conf import box_office_settings
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
from boxoffice.domain.errors import InvalidRecordError, InvalidValueError

DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H:%M"


class EntityIdField(serializers.IntegerField):
    """Positive integer column holding a typed entity ID."""

    default_error_messages = {
        "not_positive": "Ensure this value is a positive integer.",
    }

    def __init__(self, id_type: type, **kwargs: Any) -> None:
        self.id_type = id_type
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value <= 0:
            self.fail("not_positive")
        return self.id_type(value)

    def to_representation(self, value):
        return value.value


class CapacityField(serializers.IntegerField):
    default_error_messages = {
        "negative": "Ensure this value is zero or greater.",
    }

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value < 0:
            self.fail("negative")
        return Capacity(value)

    def to_representation(self, value):
        return value.value


class MoneyField(serializers.DecimalField):
    """Two-place decimal written with a dot separator."""

    default_error_messages = {
        "negative": "Ensure this amount is zero or greater.",
    }

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("max_digits", 12)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("coerce_to_string", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        amount = super().to_internal_value(data)
        if amount < 0:
            self.fail("negative")
        return Money(amount)

    def to_representation(self, value):
        return super().to_representation(value.amount)


class TextField(serializers.CharField):
    """Free text column kept exactly as written, blanks and padding included."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("allow_blank", True)
        kwargs.setdefault("trim_whitespace", False)
        super().__init__(**kwargs)


class PaymentMethodField(serializers.ChoiceField):
    def __init__(self, **kwargs: Any) -> None:
        kwargs["choices"] = [(method.value, method.label) for method in PaymentMethod]
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return PaymentMethod(super().to_internal_value(data))

    def to_representation(self, value):
        return value.value


def _format_errors(errors: Mapping[str, Any]) -> str:
    parts = []
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            text = " ".join(str(message) for message in messages)
        else:
            text = str(messages)
        parts.append(f"{field}: {text}")
    return "; ".join(parts)


class RecordSerializer(serializers.Serializer):
    """Base serializer for a single delimited record."""

    @classmethod
    def columns(cls) -> list[str]:
        return list(cls().fields.keys())

    @classmethod
    def encode(cls, entity: Any, delimiter: str | None = None) -> str:
        """Render ``entity`` as one line (without the trailing newline).

        Raises:
            InvalidRecordError: If a value would break the record layout.
        """
        delimiter = delimiter or box_office_settings.RECORD_DELIMITER
        data = cls(entity).data
        values = []
        for column, value in data.items():
            text = str(value)
            if delimiter in text or "\n" in text or "\r" in text:
                raise InvalidRecordError(
                    f"{column} may not contain {delimiter!r} or line breaks"
                )
            values.append(text)
        return delimiter.join(values)

    @classmethod
    def decode(
        cls,
        line: str,
        context: dict[str, Any] | None = None,
        delimiter: str | None = None,
    ) -> Any:
        """Parse one line into a domain entity.

        Raises:
            InvalidRecordError: On a wrong field count, a malformed value or an
                unresolvable reference.
        """
        delimiter = delimiter or box_office_settings.RECORD_DELIMITER
        parts = line.split(delimiter)
        columns = cls.columns()
        if len(parts) != len(columns):
            raise InvalidRecordError(
                f"expected {len(columns)} fields, got {len(parts)}", line=line
            )
        serializer = cls(data=dict(zip(columns, parts)), context=context or {})
        if not serializer.is_valid():
            raise InvalidRecordError(_format_errors(serializer.errors), line=line)
        try:
            return serializer.save()
        except InvalidValueError as exc:
            raise InvalidRecordError(exc.message, line=line) from exc

    def update(self, instance, validated_data):
        raise NotImplementedError("Records are replaced, not patched")


class MovieRecordSerializer(RecordSerializer):
    """id;title;genre;durationMinutes;classification;synopsis"""

    id = EntityIdField(MovieId)
    title = TextField()
    genre = TextField()
    duration = serializers.IntegerField(min_value=1)
    classification = TextField()
    synopsis = TextField()

    def create(self, validated_data):
        return Movie(**validated_data)


class RoomRecordSerializer(RecordSerializer):
    """id;totalSeats"""

    id = EntityIdField(RoomId)
    capacity = CapacityField()

    def validate_capacity(self, value: Capacity) -> Capacity:
        if value.value <= 0:
            raise serializers.ValidationError("Room capacity must be positive.")
        return value

    def create(self, validated_data):
        return Room(**validated_data)


class SessionRecordSerializer(RecordSerializer):
    """id;date;time;roomId;movieId;ticketPrice;availableSeats

    Decoding needs ``rooms`` and ``movies`` stores in the context. The
    duration is not persisted and comes from the resolved movie. The seat
    counter is not checked against the room here; the loader reconciles it
    with the ticket file.
    """

    id = EntityIdField(SessionId)
    date = serializers.DateField(format=DATE_FORMAT, input_formats=[DATE_FORMAT])
    time = serializers.TimeField(format=TIME_FORMAT, input_formats=[TIME_FORMAT])
    room_id = EntityIdField(RoomId)
    movie_id = EntityIdField(MovieId)
    ticket_price = MoneyField()
    available_seats = CapacityField()

    def validate(self, attrs):
        rooms = self.context["rooms"]
        movies = self.context["movies"]
        if rooms.get_by_id(attrs["room_id"]) is None:
            raise serializers.ValidationError(
                {"room_id": f"Room {attrs['room_id']} does not exist."}
            )
        if movies.get_by_id(attrs["movie_id"]) is None:
            raise serializers.ValidationError(
                {"movie_id": f"Movie {attrs['movie_id']} does not exist."}
            )
        return attrs

    def create(self, validated_data):
        movie = self.context["movies"].get_by_id(validated_data["movie_id"])
        return Session(duration=movie.duration, **validated_data)


class ClientRecordSerializer(RecordSerializer):
    """id;name;email;cpf;birthday"""

    id = EntityIdField(ClientId)
    name = TextField()
    email = TextField()
    cpf = TextField()
    birthday = serializers.DateField(format=DATE_FORMAT, input_formats=[DATE_FORMAT])

    def create(self, validated_data):
        return Client(**validated_data)


class TicketRecordSerializer(RecordSerializer):
    """id;clientId;sessionId;finalPrice;paymentMethod

    Decoding needs ``clients`` and ``sessions`` stores in the context.
    """

    id = EntityIdField(TicketId)
    client_id = EntityIdField(ClientId)
    session_id = EntityIdField(SessionId)
    final_price = MoneyField()
    payment_method = PaymentMethodField()

    def validate(self, attrs):
        if self.context["clients"].get_by_id(attrs["client_id"]) is None:
            raise serializers.ValidationError(
                {"client_id": f"Client {attrs['client_id']} does not exist."}
            )
        if self.context["sessions"].get_by_id(attrs["session_id"]) is None:
            raise serializers.ValidationError(
                {"session_id": f"Session {attrs['session_id']} does not exist."}
            )
        return attrs

    def create(self, validated_data):
        return Ticket(**validated_data)
