"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BookingsView

urlpatterns = [
    path("bookings", BookingsView.as_view(), name="bookings"),
]
