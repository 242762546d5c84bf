"""Categorized audit log for rejected and failed requests.

Each category writes to its own ``audit.<category>`` logger so the
deployment can route them to separate channels (see ``LOGGING``).
"""

from __future__ import annotations

import json
from typing import Any, Protocol

import structlog

AUTH = "auth"
BOOKING_API = "booking_api"
JOBS = "jobs"

CATEGORIES = (AUTH, BOOKING_API, JOBS)


class AuditSink(Protocol):
    def record_event(self, category: str, operation: str, payload: Any) -> None:
        ...


def serialize_payload(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, ensure_ascii=False, default=str)


class StructlogAuditSink:
    """Audit sink backed by one structlog logger per category."""

    def __init__(self, logger_prefix: str = "audit") -> None:
        self.logger_prefix = logger_prefix

    def record_event(self, category: str, operation: str, payload: Any) -> None:
        message = serialize_payload(payload)
        if category in CATEGORIES:
            logger = structlog.get_logger(f"{self.logger_prefix}.{category}")
            logger.error(f"{operation}: {message}", category=category, operation=operation)
            return

        structlog.get_logger(self.logger_prefix).error(
            f"This error message was logged with wrong log type: {operation}: {message}",
            category=category,
            operation=operation,
        )


default_audit_sink = StructlogAuditSink()
