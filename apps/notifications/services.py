"""Booking email notifications: message records, rendering and delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import structlog
from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

logger = structlog.get_logger(__name__)


CONFIRMATION_TO_RENTER = "confirmation_to_renter"
CONFIRMATION_TO_ADMIN = "confirmation_to_admin"
APPROACHING_LIMIT = "approaching_limit"


@dataclass(frozen=True)
class Notification:
    """One email to send: its kind, recipient and the booking data it describes."""

    kind: str
    recipient: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EmailTemplate:
    subject: Callable[[dict[str, Any]], str]
    template_name: str


EMAIL_TEMPLATES: dict[str, EmailTemplate] = {
    CONFIRMATION_TO_RENTER: EmailTemplate(
        subject=lambda data: "La tua prenotazione è stata confermata",
        template_name="notifications/emails/confirmation_to_renter.html",
    ),
    CONFIRMATION_TO_ADMIN: EmailTemplate(
        subject=lambda data: "E' stata inserita una nuova prenotazione",
        template_name="notifications/emails/confirmation_to_admin.html",
    ),
    APPROACHING_LIMIT: EmailTemplate(
        subject=lambda data: f"Limite di prenotazioni quasi raggiunto per il giorno {data.get('date')}",
        template_name="notifications/emails/approaching_limit.html",
    ),
}


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, template_name: str, context: dict) -> None:
    """
    Render an HTML template and send it with a plain-text alternative.

    Args:
        recipient_email: Recipient address
        subject: Email subject
        template_name: Django template path
        context: Template context

    Raises whatever the mail backend raises; callers decide how to recover.
    """
    html_message = render_to_string(template_name, context)
    text_message = strip_tags(html_message)

    send_mail(
        subject=subject,
        message=text_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient_email],
        html_message=html_message,
        fail_silently=False,
    )

    logger.info("email.sent", recipient=recipient_email, subject=subject)


def booking_email_context(data: dict[str, Any]) -> dict[str, Any]:
    """Template context for a booking email; missing values render empty."""
    booking_type = data.get("type")
    return {
        "firstname": data.get("firstname"),
        "lastname": data.get("lastname"),
        "date": data.get("date"),
        "start_time": data.get("start_time"),
        "end_time": data.get("end_time"),
        "type": booking_type.capitalize() if booking_type else None,
        "email": data.get("email"),
        "phone": data.get("phone"),
        "address": data.get("address"),
        "bookings_threshold": data.get("bookings_threshold"),
        "max_bookings_per_day": data.get("max_bookings_per_day"),
    }


def deliver_notification(notification: Notification) -> None:
    """Send the email described by ``notification``."""
    try:
        template = EMAIL_TEMPLATES[notification.kind]
    except KeyError:
        raise ValueError(f"Unknown notification kind: {notification.kind}") from None

    send_email_notification(
        recipient_email=notification.recipient,
        subject=template.subject(notification.data),
        template_name=template.template_name,
        context=booking_email_context(notification.data),
    )
