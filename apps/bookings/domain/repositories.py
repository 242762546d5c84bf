"""
Repository Interfaces

Storage contracts the booking service depends on. Implementations
live in ``apps.bookings.repositories``.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List

from apps.bookings.domain.entities import Booking, BookingView, Renter


class RenterRepository(ABC):
    """Renter contact records, keyed by email when present"""

    @abstractmethod
    def find_by_email(self, email: str) -> Renter | None:
        """Return the live renter with this email, if any"""

    @abstractmethod
    def upsert(self, renter: Renter) -> Renter:
        """
        Persist a renter

        With an email: overwrite the existing record for that email or
        create one. Without an email: always create a new record.
        Returns the stored renter with its id set.
        """


class BookingRepository(ABC):
    """Booking records linked to a renter"""

    @abstractmethod
    def list_by_date(self, day: date) -> List[Booking]:
        """Bookings for one date, ordered by start time"""

    @abstractmethod
    def list_views_by_date(self, day: date) -> List[BookingView]:
        """Bookings for one date joined with renter contact info, ordered by start time"""

    @abstractmethod
    def insert(self, booking: Booking) -> Booking:
        """Persist a new booking and return it with its id set"""
