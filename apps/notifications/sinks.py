"""Notification sinks: where the booking service hands off emails."""

from __future__ import annotations

from typing import Protocol

import structlog

from apps.core.audit import JOBS, AuditSink, default_audit_sink

from .services import Notification

logger = structlog.get_logger(__name__)


class NotificationSink(Protocol):
    def enqueue(self, notification: Notification) -> None:
        ...


class CeleryNotificationSink:
    """
    Queue each notification as a Celery email job.

    Fire-and-forget: a broker failure is logged and audited under
    ``jobs`` and never reaches the caller.
    """

    def __init__(self, audit: AuditSink = default_audit_sink) -> None:
        self.audit = audit

    def enqueue(self, notification: Notification) -> None:
        from .tasks import send_booking_email

        try:
            send_booking_email.delay(notification.kind, notification.recipient, notification.data)
        except Exception as exc:
            logger.error(
                "notification.enqueue_failed",
                kind=notification.kind,
                recipient=notification.recipient,
                error=str(exc),
                exc_info=True,
            )
            self.audit.record_event(
                JOBS,
                "SendEmailQueueJob",
                f"A job of type {notification.kind} could not be queued: {exc}",
            )
            return

        logger.info("notification.queued", kind=notification.kind, recipient=notification.recipient)
