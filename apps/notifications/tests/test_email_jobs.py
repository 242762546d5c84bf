"""Tests for booking email rendering and the Celery email job."""

from __future__ import annotations

from unittest import mock

import pytest
from django.core import mail

from apps.core.audit import JOBS
from apps.notifications import tasks
from apps.notifications.services import (
    APPROACHING_LIMIT,
    CONFIRMATION_TO_ADMIN,
    CONFIRMATION_TO_RENTER,
    Notification,
    deliver_notification,
)
from apps.notifications.sinks import CeleryNotificationSink

BOOKING_DATA = {
    "date": "2030-06-10",
    "start_time": "09:00",
    "end_time": "09:30",
    "type": "assistance",
    "firstname": "Mario",
    "lastname": "Rossi",
    "email": "mario.rossi@example.com",
    "phone": None,
    "address": None,
}


def test_renter_confirmation_lists_booking_details():
    deliver_notification(Notification(CONFIRMATION_TO_RENTER, "mario.rossi@example.com", BOOKING_DATA))

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["mario.rossi@example.com"]
    assert message.subject == "La tua prenotazione è stata confermata"
    assert "Assistance" in message.body
    assert "None" not in message.body
    html, mimetype = message.alternatives[0]
    assert mimetype == "text/html"
    assert "09:30" in html


def test_admin_confirmation_names_the_renter():
    deliver_notification(Notification(CONFIRMATION_TO_ADMIN, "admin@coworking.test", BOOKING_DATA))

    message = mail.outbox[0]
    assert message.subject == "E' stata inserita una nuova prenotazione"
    assert "Mario Rossi" in message.body


def test_approaching_limit_mentions_the_day():
    data = {**BOOKING_DATA, "bookings_threshold": 10, "max_bookings_per_day": 12}

    deliver_notification(Notification(APPROACHING_LIMIT, "admin@coworking.test", data))

    message = mail.outbox[0]
    assert message.subject == "Limite di prenotazioni quasi raggiunto per il giorno 2030-06-10"
    assert "10 prenotazioni" in message.body


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        deliver_notification(Notification("newsletter", "someone@example.com", {}))


def test_sink_runs_job_and_sends_mail():
    CeleryNotificationSink().enqueue(Notification(CONFIRMATION_TO_RENTER, "mario.rossi@example.com", BOOKING_DATA))

    assert [message.to for message in mail.outbox] == [["mario.rossi@example.com"]]


def test_failed_job_is_audited():
    with mock.patch.object(tasks, "default_audit_sink") as audit, mock.patch.object(
        tasks, "deliver_notification", side_effect=ConnectionError("smtp down")
    ):
        tasks.send_booking_email.delay(CONFIRMATION_TO_ADMIN, "admin@coworking.test", BOOKING_DATA)

    audit.record_event.assert_called_once_with(
        JOBS,
        "SendEmailQueueJob",
        "A job of type confirmation_to_admin failed: smtp down",
    )
    assert mail.outbox == []


def test_queueing_failure_is_audited_not_raised(audit_sink):
    sink = CeleryNotificationSink(audit=audit_sink)

    with mock.patch.object(tasks, "send_booking_email") as job:
        job.delay.side_effect = OSError("broker unreachable")
        sink.enqueue(Notification(CONFIRMATION_TO_RENTER, "mario.rossi@example.com", BOOKING_DATA))

    assert audit_sink.events == [
        (JOBS, "SendEmailQueueJob", "A job of type confirmation_to_renter could not be queued: broker unreachable"),
    ]
