"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, Renter


@admin.register(Renter)
class RenterAdmin(admin.ModelAdmin):
    list_display = ("firstname", "lastname", "email", "phone", "created_at", "deleted_at")
    search_fields = ("firstname", "lastname", "email", "phone")
    readonly_fields = ("created_at", "updated_at")

    def get_queryset(self, request):  # type: ignore
        return Renter.all_objects.all()


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "date",
        "start_time",
        "end_time",
        "type",
        "renter",
        "created_at",
    )
    list_filter = ("type", "date")
    search_fields = ("renter__firstname", "renter__lastname", "renter__email")
    readonly_fields = ("created_at", "updated_at")
    list_select_related = ("renter",)
