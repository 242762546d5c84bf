"""Serializers for the booking API responses."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingType, BookingView


class BookingViewSerializer(serializers.Serializer):
    """Booking of the day with its renter's contact details."""

    id = serializers.IntegerField(read_only=True)
    date = serializers.DateField(format="%Y-%m-%d", read_only=True)
    start_time = serializers.TimeField(format="%H:%M", read_only=True)
    end_time = serializers.TimeField(format="%H:%M", read_only=True)
    type = serializers.SerializerMethodField()
    firstname = serializers.CharField(read_only=True)
    lastname = serializers.CharField(read_only=True)
    phone = serializers.CharField(read_only=True, allow_null=True)
    email = serializers.CharField(read_only=True, allow_null=True)
    address = serializers.CharField(read_only=True, allow_null=True)

    def get_type(self, obj: BookingView) -> str:
        return obj.type.value


class BookingSubmissionSerializer(serializers.Serializer):
    """Request body of ``POST /bookings``; validated by the booking policy, listed here for the schema."""

    date = serializers.CharField(help_text="YYYY-MM-DD, tomorrow or later")
    start_time = serializers.CharField(help_text="HH:MM")
    end_time = serializers.CharField(help_text="HH:MM, after start_time")
    type = serializers.ChoiceField(choices=BookingType.values())
    firstname = serializers.CharField(max_length=255)
    lastname = serializers.CharField(max_length=255)
    phone = serializers.CharField(required=False, allow_null=True, help_text="digits only, at least 10")
    email = serializers.EmailField(required=False, allow_null=True, max_length=255)
    address = serializers.CharField(required=False, allow_null=True, max_length=255)
