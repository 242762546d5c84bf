"""Celery tasks for booking notifications."""

from __future__ import annotations

import structlog
from celery import Task, shared_task  # type: ignore

from apps.core.audit import JOBS, default_audit_sink

from .services import Notification, deliver_notification

logger = structlog.get_logger(__name__)


class EmailJobTask(Task):
    """Single-attempt email job; failures go to the ``jobs`` audit log."""

    acks_late = True
    max_retries = 0

    def on_failure(self, exc, task_id, args, kwargs, einfo):  # type: ignore
        kind = kwargs.get("kind") if kwargs else None
        if kind is None and args:
            kind = args[0]
        logger.error("email_job.failed", task_id=task_id, kind=kind, error=str(exc))
        default_audit_sink.record_event(
            JOBS,
            "SendEmailQueueJob",
            f"A job of type {kind} failed: {exc}",
        )


@shared_task(base=EmailJobTask, name="notifications.send_booking_email")
def send_booking_email(kind: str, recipient: str, data: dict) -> None:
    """Send one booking email (renter confirmation, admin confirmation or limit warning)."""

    deliver_notification(Notification(kind=kind, recipient=recipient, data=data))
