"""Booking storage models for the coworking space."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.db.models.functions import Lower  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import entities


class LiveQuerySet(models.QuerySet):
    """Soft-deleted rows are hidden from every read."""

    def live(self):
        return self.filter(deleted_at__isnull=True)

    def soft_delete(self) -> int:
        return self.update(deleted_at=timezone.now())


class LiveManager(models.Manager.from_queryset(LiveQuerySet)):  # type: ignore
    def get_queryset(self):  # type: ignore
        return super().get_queryset().live()


class Renter(models.Model):
    """Renter contact record: one live record per email when an email is given."""

    firstname = models.CharField(max_length=255)
    lastname = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, null=True, blank=True)
    phone = models.CharField(max_length=32, null=True, blank=True)
    address = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveManager()
    all_objects = LiveQuerySet.as_manager()

    class Meta:
        verbose_name = _("Renter")
        verbose_name_plural = _("Renters")
        ordering = ["lastname", "firstname"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                condition=models.Q(email__isnull=False, deleted_at__isnull=True),
                name="renter_unique_live_email_ci",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.firstname} {self.lastname}"

    def to_entity(self) -> entities.Renter:
        return entities.Renter(
            id=self.pk,
            firstname=self.firstname,
            lastname=self.lastname,
            email=self.email,
            phone=self.phone,
            address=self.address,
        )

    def apply_entity(self, renter: entities.Renter) -> None:
        self.firstname = renter.firstname
        self.lastname = renter.lastname
        self.email = renter.email
        self.phone = renter.phone
        self.address = renter.address


class Booking(models.Model):
    """Reserved slot of the coworking space on one date."""

    class Type(models.TextChoices):
        CONSULTANCY = entities.BookingType.CONSULTANCY.value, _("Consultancy")
        ASSISTANCE = entities.BookingType.ASSISTANCE.value, _("Assistance")
        COMMERCIAL = entities.BookingType.COMMERCIAL.value, _("Commercial")

    renter = models.ForeignKey(
        Renter,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    type = models.CharField(max_length=20, choices=Type.choices)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveManager()
    all_objects = LiveQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["date", "start_time", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_times",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "start_time"], name="booking_date_start_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} on {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def to_entity(self) -> entities.Booking:
        return entities.Booking(
            id=self.pk,
            renter_id=self.renter_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            type=entities.BookingType(self.type),
        )

    def to_view(self) -> entities.BookingView:
        renter = self.renter
        return entities.BookingView(
            id=self.pk,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            type=entities.BookingType(self.type),
            firstname=renter.firstname,
            lastname=renter.lastname,
            phone=renter.phone,
            email=renter.email,
            address=renter.address,
        )


class BookingDay(models.Model):
    """Ledger row per calendar date, locked while a booking for that date is checked and written."""

    date = models.DateField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Booking day")
        verbose_name_plural = _("Booking days")

    def __str__(self) -> str:
        return f"{self.date}"
