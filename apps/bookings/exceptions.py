"""Errors raised by the booking service."""

from __future__ import annotations


class BookingError(Exception):
    """Base class for booking submission failures."""

    message = "booking request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def body(self) -> dict:
        """Error body returned to API clients and written to the audit log."""
        return {"status": "error", "message": self.message}


class BookingValidationError(BookingError):
    """Submission failed field validation; carries the field → messages map."""

    message = "bookings fields validation failed"

    def __init__(self, fields: dict[str, list[str]]) -> None:
        super().__init__()
        self.fields = fields

    def body(self) -> dict:
        return {**super().body(), "fields": self.fields}


class PolicyViolation(BookingError):
    """Submission is well formed but breaks a scheduling rule for its date."""

    CAPACITY_EXCEEDED = "capacity_exceeded"
    DURATION_EXCEEDED = "duration_exceeded"
    OVERLAP_DETECTED = "overlap_detected"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason

    @classmethod
    def capacity_exceeded(cls) -> "PolicyViolation":
        return cls(cls.CAPACITY_EXCEEDED, "maximum number of bookings reached for the given date")

    @classmethod
    def duration_exceeded(cls, max_minutes: int) -> "PolicyViolation":
        return cls(
            cls.DURATION_EXCEEDED,
            f"booking duration exceeds maximum allowed duration of {max_minutes} minutes",
        )

    @classmethod
    def overlap_detected(cls) -> "PolicyViolation":
        return cls(cls.OVERLAP_DETECTED, "booking time overlaps with existing bookings")


class PersistenceFailure(BookingError):
    """A store write failed; nothing from the submission was kept."""

    message = "booking could not be saved"
