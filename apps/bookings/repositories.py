"""Django ORM implementations of the booking repositories."""

from __future__ import annotations

from datetime import date
from typing import List

import structlog
from django.db import DatabaseError, IntegrityError, transaction  # type: ignore

from .domain import entities
from .domain.repositories import BookingRepository, RenterRepository
from .exceptions import PersistenceFailure
from .models import Booking, Renter

logger = structlog.get_logger(__name__)


class DjangoRenterRepository(RenterRepository):
    def find_by_email(self, email: str) -> entities.Renter | None:
        record = self._find_record(email)
        return record.to_entity() if record else None

    def upsert(self, renter: entities.Renter) -> entities.Renter:
        try:
            try:
                record = self._save(renter)
            except IntegrityError:
                # another submission inserted the same email first
                logger.info("renter.upsert_retry", email=renter.email)
                record = self._save(renter)
        except DatabaseError as exc:
            raise PersistenceFailure("renter could not be saved") from exc
        return record.to_entity()

    def _find_record(self, email: str) -> Renter | None:
        return Renter.objects.filter(email__iexact=email).order_by("id").first()

    def _save(self, renter: entities.Renter) -> Renter:
        with transaction.atomic():
            record = self._find_record(renter.email) if renter.email else None
            if record is None:
                record = Renter()
            record.apply_entity(renter)
            record.save()
        return record


class DjangoBookingRepository(BookingRepository):
    def list_by_date(self, day: date) -> List[entities.Booking]:
        queryset = Booking.objects.filter(date=day).order_by("start_time", "id")
        return [booking.to_entity() for booking in queryset]

    def list_views_by_date(self, day: date) -> List[entities.BookingView]:
        queryset = Booking.objects.filter(date=day).select_related("renter").order_by("start_time", "id")
        return [booking.to_view() for booking in queryset]

    def insert(self, booking: entities.Booking) -> entities.Booking:
        try:
            record = Booking.objects.create(
                renter_id=booking.renter_id,
                date=booking.date,
                start_time=booking.start_time,
                end_time=booking.end_time,
                type=booking.type.value,
            )
        except DatabaseError as exc:
            raise PersistenceFailure("booking could not be saved") from exc
        return record.to_entity()
