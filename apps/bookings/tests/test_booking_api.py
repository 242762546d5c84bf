"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import time, timedelta
from unittest import mock

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.exceptions import PersistenceFailure
from apps.bookings.models import Booking, Renter
from apps.bookings.repositories import DjangoBookingRepository
from apps.core.audit import BOOKING_API, StructlogAuditSink
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers submission, rejections and the daily listing."""

    def setUp(self) -> None:
        self.client_user = User.objects.create_user(
            email="frontdesk@example.com",
            name="Front Desk",
            password="secret123",
        )
        self.client.force_authenticate(self.client_user)
        self.url = reverse("bookings")
        self.day = timezone.localdate() + timedelta(days=1)

    def _payload(self, start: str = "09:00", end: str = "09:30", **overrides) -> dict:
        data = {
            "date": self.day.isoformat(),
            "start_time": start,
            "end_time": end,
            "type": "commercial",
            "firstname": "Giulia",
            "lastname": "Verdi",
            "email": "giulia.verdi@example.com",
            "phone": "0612345678",
            "address": "Via Appia 5",
        }
        data.update(overrides)
        return data

    def test_booking_is_created_and_emails_sent(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"status": "success", "message": "Booking made successfully"})
        self.assertEqual(Booking.objects.count(), 1)
        self.assertEqual(Renter.objects.get().email, "giulia.verdi@example.com")

        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["admin@coworking.test", "giulia.verdi@example.com"])
        renter_mail = next(m for m in mail.outbox if m.to == ["giulia.verdi@example.com"])
        self.assertEqual(renter_mail.subject, "La tua prenotazione è stata confermata")
        self.assertIn("09:00", renter_mail.body)

    def test_validation_errors_return_422(self) -> None:
        response = self.client.post(self.url, self._payload(type="party", firstname=""), format="json")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY, response.data)
        self.assertEqual(response.data["status"], "error")
        self.assertEqual(response.data["message"], "bookings fields validation failed")
        self.assertEqual(set(response.data["fields"]), {"type", "firstname"})
        self.assertFalse(Booking.objects.exists())

    def test_overlap_returns_406(self) -> None:
        first = self.client.post(self.url, self._payload("09:00", "09:30"), format="json")
        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)

        response = self.client.post(self.url, self._payload("09:15", "09:45"), format="json")

        self.assertEqual(response.status_code, status.HTTP_406_NOT_ACCEPTABLE, response.data)
        self.assertEqual(
            response.data,
            {"status": "error", "message": "booking time overlaps with existing bookings"},
        )
        self.assertEqual(Booking.objects.count(), 1)

    def test_too_long_booking_returns_406(self) -> None:
        response = self.client.post(self.url, self._payload("09:00", "09:46"), format="json")

        self.assertEqual(response.status_code, status.HTTP_406_NOT_ACCEPTABLE, response.data)
        self.assertEqual(
            response.data["message"],
            "booking duration exceeds maximum allowed duration of 45 minutes",
        )

    def test_listing_returns_bookings_in_start_order(self) -> None:
        self.client.post(self.url, self._payload("11:00", "11:30", firstname="Paolo", email=None), format="json")
        self.client.post(self.url, self._payload("09:00", "09:30"), format="json")

        response = self.client.get(self.url, {"date": self.day.isoformat()})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["start_time"] for item in response.data], ["09:00", "11:00"])
        first = response.data[0]
        self.assertEqual(first["date"], self.day.isoformat())
        self.assertEqual(first["end_time"], "09:30")
        self.assertEqual(first["type"], "commercial")
        self.assertEqual(first["firstname"], "Giulia")
        self.assertEqual(first["phone"], "0612345678")
        self.assertIsNone(response.data[1]["email"])

    def test_listing_of_empty_day(self) -> None:
        response = self.client.get(self.url, {"date": "2001-01-01"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_listing_requires_valid_date(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data["fields"], {"date": ["The date field is required."]})

    def test_anonymous_request_gets_token_invalid_body(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {"status": "error", "message": "Invalid or expired token"})
        self.assertFalse(Booking.objects.exists())

    def test_malformed_type_returns_422(self) -> None:
        with mock.patch.object(StructlogAuditSink, "record_event") as record_event:
            response = self.client.post(self.url, self._payload(type={"a": 1}), format="json")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY, response.data)
        self.assertEqual(
            response.data["fields"],
            {"type": ["The type must be one of consultancy, assistance, commercial."]},
        )
        record_event.assert_called_once_with(BOOKING_API, "bookings", response.data)

    def test_body_that_is_not_an_object_returns_422(self) -> None:
        response = self.client.post(self.url, [1, 2], format="json")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY, response.data)
        self.assertEqual(response.data["message"], "bookings fields validation failed")
        self.assertEqual(response.data["fields"]["date"], ["The date field is required."])

    def test_full_day_returns_406(self) -> None:
        renter = Renter.objects.create(firstname="Anna", lastname="Bianchi")
        for hour in range(8, 20):
            Booking.objects.create(
                renter=renter,
                date=self.day,
                start_time=time(hour, 0),
                end_time=time(hour, 30),
                type=Booking.Type.ASSISTANCE,
            )

        response = self.client.post(self.url, self._payload("20:00", "20:30"), format="json")

        self.assertEqual(response.status_code, status.HTTP_406_NOT_ACCEPTABLE, response.data)
        self.assertEqual(
            response.data,
            {"status": "error", "message": "maximum number of bookings reached for the given date"},
        )
        self.assertEqual(Booking.objects.filter(date=self.day).count(), 12)

    def test_store_failure_returns_500(self) -> None:
        with mock.patch.object(DjangoBookingRepository, "insert", side_effect=PersistenceFailure()):
            response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"status": "error", "message": "booking could not be saved"})
        self.assertFalse(Renter.objects.exists())
