"""Booking policy configuration read from Django settings."""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings  # type: ignore


@dataclass(frozen=True)
class BookingPolicySettings:
    max_bookings_per_day: int = 12
    bookings_email_threshold: int = 10
    max_booking_duration_minutes: int = 45
    admin_email: str | None = None

    @classmethod
    def from_settings(cls) -> "BookingPolicySettings":
        options = getattr(settings, "BOOKINGS", {})
        defaults = cls()
        return cls(
            max_bookings_per_day=int(options.get("MAX_BOOKINGS_PER_DAY", defaults.max_bookings_per_day)),
            bookings_email_threshold=int(
                options.get("NUMBER_OF_BOOKINGS_EMAIL_THRESHOLD", defaults.bookings_email_threshold)
            ),
            max_booking_duration_minutes=int(
                options.get("MAX_BOOKING_DURATION", defaults.max_booking_duration_minutes)
            ),
            admin_email=options.get("ADMIN_EMAIL") or None,
        )
