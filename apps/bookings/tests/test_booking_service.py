"""Tests for the booking service against the database."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from unittest import mock

import pytest
from django.db import IntegrityError, transaction

from apps.bookings import models
from apps.bookings.conf import BookingPolicySettings
from apps.bookings.domain import entities
from apps.bookings.exceptions import (
    BookingValidationError,
    PersistenceFailure,
    PolicyViolation,
)
from apps.bookings.repositories import DjangoBookingRepository, DjangoRenterRepository
from apps.bookings.services import BookingService
from apps.core.audit import BOOKING_API
from apps.notifications.services import (
    APPROACHING_LIMIT,
    CONFIRMATION_TO_ADMIN,
    CONFIRMATION_TO_RENTER,
)
from shared.application import uow

pytestmark = pytest.mark.django_db

LIMITS = BookingPolicySettings(
    max_bookings_per_day=12,
    bookings_email_threshold=10,
    max_booking_duration_minutes=45,
    admin_email="admin@coworking.test",
)


@pytest.fixture
def service(audit_sink, notification_sink, today):
    return BookingService(
        DjangoRenterRepository(),
        DjangoBookingRepository(),
        notification_sink,
        audit=audit_sink,
        policy_settings=LIMITS,
        clock=lambda: today,
    )


def _payload(day: date, start: str = "09:00", end: str = "09:30", **overrides):
    data = {
        "date": day.isoformat(),
        "start_time": start,
        "end_time": end,
        "type": "consultancy",
        "firstname": "Mario",
        "lastname": "Rossi",
        "email": "mario.rossi@example.com",
        "phone": "3331234567",
    }
    data.update(overrides)
    return data


def _fill_day(day: date, count: int) -> None:
    """Create ``count`` back-to-back 30 minute bookings starting at 08:00."""
    renter = models.Renter.objects.create(firstname="Anna", lastname="Bianchi")
    start = datetime.combine(day, time(8, 0))
    for index in range(count):
        slot_start = start + timedelta(minutes=30 * index)
        models.Booking.objects.create(
            renter=renter,
            date=day,
            start_time=slot_start.time(),
            end_time=(slot_start + timedelta(minutes=30)).time(),
            type=models.Booking.Type.ASSISTANCE,
        )


def test_submission_persists_renter_and_booking(service, tomorrow, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        outcome = service.submit_booking(_payload(tomorrow))

    booking = models.Booking.objects.get()
    assert booking.pk == outcome.booking.id
    assert booking.renter.email == "mario.rossi@example.com"
    assert (booking.start_time, booking.end_time) == (time(9, 0), time(9, 30))
    assert models.BookingDay.objects.filter(date=tomorrow).exists()
    assert outcome.threshold_reached is False


def test_notifications_are_sent_after_commit(
    service, notification_sink, tomorrow, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        service.submit_booking(_payload(tomorrow))
        assert notification_sink.sent == []

    assert len(callbacks) == 2
    for callback in callbacks:
        callback()
    assert notification_sink.kinds == [CONFIRMATION_TO_RENTER, CONFIRMATION_TO_ADMIN]
    renter_mail = notification_sink.sent[0]
    assert renter_mail.recipient == "mario.rossi@example.com"
    assert renter_mail.data["start_time"] == "09:00"


def test_renter_without_email_gets_no_confirmation(
    service, notification_sink, tomorrow, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        service.submit_booking(_payload(tomorrow, email=None))

    assert notification_sink.kinds == [CONFIRMATION_TO_ADMIN]


def test_renter_upsert_is_idempotent_per_email(service, tomorrow):
    service.submit_booking(_payload(tomorrow, "09:00", "09:30"))
    service.submit_booking(
        _payload(tomorrow, "10:00", "10:30", firstname="Marco", email="Mario.Rossi@example.com", phone=None)
    )

    renter = models.Renter.objects.get()
    assert renter.firstname == "Marco"
    assert renter.phone is None
    assert renter.bookings.count() == 2
    assert DjangoRenterRepository().find_by_email("MARIO.ROSSI@example.com").firstname == "Marco"


def test_renters_without_email_are_never_merged(service, tomorrow):
    service.submit_booking(_payload(tomorrow, "09:00", "09:30", email=None))
    service.submit_booking(_payload(tomorrow, "10:00", "10:30", email=None))

    assert models.Renter.objects.count() == 2


@pytest.mark.parametrize("existing, accepted", [(11, True), (12, False)])
def test_capacity_limit(service, tomorrow, existing, accepted):
    _fill_day(tomorrow, existing)

    payload = _payload(tomorrow, "18:00", "18:30")
    if accepted:
        service.submit_booking(payload)
        assert models.Booking.objects.filter(date=tomorrow).count() == existing + 1
    else:
        with pytest.raises(PolicyViolation) as excinfo:
            service.submit_booking(payload)
        assert excinfo.value.reason == PolicyViolation.CAPACITY_EXCEEDED
        assert models.Booking.objects.filter(date=tomorrow).count() == existing


def test_threshold_warning_fires_once(
    service, notification_sink, tomorrow, django_capture_on_commit_callbacks
):
    _fill_day(tomorrow, 10)

    with django_capture_on_commit_callbacks(execute=True):
        first = service.submit_booking(_payload(tomorrow, "18:00", "18:30"))
        second = service.submit_booking(_payload(tomorrow, "19:00", "19:30"))

    assert first.threshold_reached is True
    assert second.threshold_reached is False
    assert notification_sink.kinds.count(APPROACHING_LIMIT) == 1
    warning = notification_sink.sent[0]
    assert warning.kind == APPROACHING_LIMIT
    assert warning.recipient == "admin@coworking.test"
    assert warning.data["bookings_threshold"] == 10


def test_day_scenario(service, audit_sink, tomorrow):
    service.submit_booking(_payload(tomorrow, "09:00", "09:30"))

    with pytest.raises(PolicyViolation) as overlap:
        service.submit_booking(_payload(tomorrow, "09:15", "09:45"))
    assert overlap.value.body() == {
        "status": "error",
        "message": "booking time overlaps with existing bookings",
    }

    service.submit_booking(_payload(tomorrow, "09:30", "10:00"))

    with pytest.raises(PolicyViolation) as too_long:
        service.submit_booking(_payload(tomorrow, "10:00", "10:50"))
    assert too_long.value.message == "booking duration exceeds maximum allowed duration of 45 minutes"

    assert models.Booking.objects.filter(date=tomorrow).count() == 2
    assert [event[:2] for event in audit_sink.events] == [
        (BOOKING_API, "bookings"),
        (BOOKING_API, "bookings"),
    ]


def test_invalid_submission_is_audited(service, audit_sink, today):
    with pytest.raises(BookingValidationError) as excinfo:
        service.submit_booking(_payload(today))

    assert excinfo.value.fields == {"date": ["The date must be tomorrow or later."]}
    assert audit_sink.events == [(BOOKING_API, "bookings", excinfo.value.body())]
    assert not models.Renter.objects.exists()


def test_failed_insert_rolls_back_renter(audit_sink, notification_sink, today, tomorrow):
    class BrokenBookings(DjangoBookingRepository):
        def insert(self, booking):
            raise PersistenceFailure()

    service = BookingService(
        DjangoRenterRepository(),
        BrokenBookings(),
        notification_sink,
        audit=audit_sink,
        policy_settings=LIMITS,
        clock=lambda: today,
    )

    with pytest.raises(PersistenceFailure):
        service.submit_booking(_payload(tomorrow))

    assert not models.Renter.objects.exists()
    assert notification_sink.sent == []
    assert audit_sink.events[0][2] == {"status": "error", "message": "booking could not be saved"}


def test_listing_is_ordered_and_joined(service, tomorrow):
    service.submit_booking(_payload(tomorrow, "11:00", "11:30", firstname="Luca", email="luca@example.com"))
    service.submit_booking(_payload(tomorrow, "09:00", "09:30"))

    views = service.list_bookings_for_date({"date": tomorrow.isoformat()})

    assert [view.start_time for view in views] == [time(9, 0), time(11, 0)]
    assert views[1].firstname == "Luca"
    assert views[1].email == "luca@example.com"


def test_listing_hides_soft_deleted_bookings(service, tomorrow):
    service.submit_booking(_payload(tomorrow))
    models.Booking.objects.all().soft_delete()

    assert service.list_bookings_for_date({"date": tomorrow.isoformat()}) == []
    assert models.Booking.all_objects.count() == 1


def test_listing_rejects_malformed_date(service, audit_sink):
    with pytest.raises(BookingValidationError):
        service.list_bookings_for_date({"date": "tomorrow"})

    assert audit_sink.events[0][2]["fields"] == {"date": ["The date format must be Y-m-d."]}


def test_submission_locks_the_booking_day(service, tomorrow):
    with mock.patch.object(uow, "lock_queryset_if_possible", wraps=uow.lock_queryset_if_possible) as lock:
        service.submit_booking(_payload(tomorrow))

    lock.assert_called_once()
    (queryset,), _ = lock.call_args
    assert queryset.model is models.BookingDay
    assert list(queryset.values_list("date", flat=True)) == [tomorrow]


def test_day_lock_uses_select_for_update_inside_a_transaction(tomorrow):
    with transaction.atomic():
        locked = uow.lock_queryset_if_possible(models.BookingDay.objects.filter(date=tomorrow))

    assert locked.query.select_for_update is True


def test_live_email_is_unique_ignoring_case():
    models.Renter.objects.create(firstname="Mario", lastname="Rossi", email="mario.rossi@example.com")

    with pytest.raises(IntegrityError), transaction.atomic():
        models.Renter.objects.create(firstname="Mario", lastname="Rossi", email="Mario.Rossi@Example.com")


def test_upsert_retries_after_concurrent_insert_of_same_email():
    existing = models.Renter.objects.create(firstname="Mario", lastname="Rossi", email="mario.rossi@example.com")
    repository = DjangoRenterRepository()

    # the first lookup misses, as if the other row was committed after it ran
    with mock.patch.object(DjangoRenterRepository, "_find_record", side_effect=[None, existing]):
        renter = repository.upsert(
            entities.Renter(firstname="Marco", lastname="Rossi", email="Mario.Rossi@example.com")
        )

    assert renter.id == existing.pk
    stored = models.Renter.objects.get()
    assert stored.firstname == "Marco"
