"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

import pytest


class RecordingAuditSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, Any]] = []

    def record_event(self, category: str, operation: str, payload: Any) -> None:
        self.events.append((category, operation, payload))


class RecordingNotificationSink:
    def __init__(self) -> None:
        self.sent = []

    def enqueue(self, notification) -> None:
        self.sent.append(notification)

    @property
    def kinds(self) -> list[str]:
        return [notification.kind for notification in self.sent]


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def notification_sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def today() -> date:
    return date(2030, 6, 9)


@pytest.fixture
def tomorrow(today: date) -> date:
    return today + timedelta(days=1)
