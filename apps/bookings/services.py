"""Booking use cases: submit a booking, list a day's bookings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping

import structlog
from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.core.audit import BOOKING_API, AuditSink, default_audit_sink
from apps.notifications.services import (
    APPROACHING_LIMIT,
    CONFIRMATION_TO_ADMIN,
    CONFIRMATION_TO_RENTER,
    Notification,
)
from apps.notifications.sinks import CeleryNotificationSink, NotificationSink
from shared.application.uow import DjangoUnitOfWork

from .conf import BookingPolicySettings
from .domain import policy
from .domain.entities import Booking, BookingRequest, BookingView, Renter
from .domain.repositories import BookingRepository, RenterRepository
from .exceptions import BookingError, BookingValidationError, PersistenceFailure, PolicyViolation

logger = structlog.get_logger(__name__)

AUDIT_OPERATION = "bookings"


@dataclass(frozen=True)
class BookingOutcome:
    booking: Booking
    renter: Renter
    threshold_reached: bool = False


class BookingService:
    """
    Orchestrates one booking submission.

    Validation, the day's capacity / duration / overlap checks and the
    renter + booking writes run inside one transaction that holds the
    lock for the requested date. Notifications are queued only after
    that transaction commits.
    """

    def __init__(
        self,
        renters: RenterRepository,
        bookings: BookingRepository,
        notifications: NotificationSink,
        *,
        audit: AuditSink = default_audit_sink,
        policy_settings: BookingPolicySettings | None = None,
        clock: Callable[[], Any] = timezone.localdate,
        uow_factory: Callable[[], DjangoUnitOfWork] = DjangoUnitOfWork,
    ) -> None:
        self.renters = renters
        self.bookings = bookings
        self.notifications = notifications
        self.audit = audit
        self.policy_settings = policy_settings or BookingPolicySettings.from_settings()
        self.clock = clock
        self.uow_factory = uow_factory

    @classmethod
    def default(cls, **overrides: Any) -> "BookingService":
        from .repositories import DjangoBookingRepository, DjangoRenterRepository

        audit = overrides.pop("audit", default_audit_sink)
        return cls(
            DjangoRenterRepository(),
            DjangoBookingRepository(),
            overrides.pop("notifications", CeleryNotificationSink(audit=audit)),
            audit=audit,
            **overrides,
        )

    # --- Use cases ------------------------------------------------------------
    def submit_booking(self, data: Mapping[str, Any]) -> BookingOutcome:
        """
        Validate, check and persist a booking.

        Raises:
            BookingValidationError: field errors (all of them)
            PolicyViolation: capacity, duration or overlap rule broken
            PersistenceFailure: the store rejected the write
        """
        try:
            result = policy.validate_shape(data, self.clock())
            if not result.is_valid:
                raise BookingValidationError(result.errors)
            return self._submit(result.request)
        except BookingError as exc:
            self.audit.record_event(BOOKING_API, AUDIT_OPERATION, exc.body())
            raise

    def list_bookings_for_date(self, data: Mapping[str, Any]) -> List[BookingView]:
        """Bookings of one date with renter contact info, ordered by start time."""
        result = policy.validate_date_query(data)
        if not result.is_valid:
            error = BookingValidationError(result.errors)
            self.audit.record_event(BOOKING_API, AUDIT_OPERATION, error.body())
            raise error
        return self.bookings.list_views_by_date(result.day)

    # --- Steps ----------------------------------------------------------------
    def _submit(self, request: BookingRequest) -> BookingOutcome:
        limits = self.policy_settings
        try:
            with self.uow_factory() as uow:
                uow.lock_day(request.date)
                existing = self.bookings.list_by_date(request.date)

                if not policy.check_capacity(len(existing), limits.max_bookings_per_day):
                    raise PolicyViolation.capacity_exceeded()

                threshold_reached = policy.should_warn_threshold(
                    len(existing), limits.bookings_email_threshold
                )

                if not policy.check_duration(
                    request.start_time, request.end_time, limits.max_booking_duration_minutes
                ):
                    raise PolicyViolation.duration_exceeded(limits.max_booking_duration_minutes)

                if policy.check_overlap(request, existing):
                    raise PolicyViolation.overlap_detected()

                renter = self.renters.upsert(request.to_renter())
                booking = self.bookings.insert(request.to_booking(renter.id))

                for notification in self._notifications_for(request, threshold_reached):
                    uow.after_commit(self._enqueue_callback(notification))
        except DatabaseError as exc:
            logger.error("booking.persist_failed", date=str(request.date), error=str(exc), exc_info=True)
            raise PersistenceFailure() from exc

        logger.info(
            "booking.created",
            booking_id=booking.id,
            renter_id=renter.id,
            date=str(booking.date),
            slot=str(booking.slot),
            threshold_reached=threshold_reached,
        )
        return BookingOutcome(booking=booking, renter=renter, threshold_reached=threshold_reached)

    def _notifications_for(self, request: BookingRequest, threshold_reached: bool) -> List[Notification]:
        limits = self.policy_settings
        payload = request.as_payload()
        notifications: List[Notification] = []

        if threshold_reached and limits.admin_email:
            notifications.append(
                Notification(
                    kind=APPROACHING_LIMIT,
                    recipient=limits.admin_email,
                    data={
                        **payload,
                        "bookings_threshold": limits.bookings_email_threshold,
                        "max_bookings_per_day": limits.max_bookings_per_day,
                    },
                )
            )
        if request.email:
            notifications.append(Notification(kind=CONFIRMATION_TO_RENTER, recipient=request.email, data=payload))
        if limits.admin_email:
            notifications.append(
                Notification(kind=CONFIRMATION_TO_ADMIN, recipient=limits.admin_email, data=payload)
            )
        else:
            logger.warning("booking.admin_email_missing", date=str(request.date))
        return notifications

    def _enqueue_callback(self, notification: Notification) -> Callable[[], None]:
        def enqueue() -> None:
            self.notifications.enqueue(notification)
        return enqueue
