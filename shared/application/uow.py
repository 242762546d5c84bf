"""
Unit of Work Pattern

Manages database transactions and ensures that follow-up work
(notifications and other side effects) runs only after a successful commit.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, List

import structlog
from django.db import transaction
from django.db.utils import NotSupportedError

logger = structlog.get_logger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def after_commit(self, callback: Callable[[], None]):
        """Register work to run once the transaction is committed"""
        pass


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps ``transaction.atomic()`` and defers registered callbacks
    to ``transaction.on_commit()``.

    Usage:
        with DjangoUnitOfWork() as uow:
            uow.lock_day(booking_date)
            existing = booking_repo.list_by_date(booking_date)
            ...
            booking_repo.insert(booking)
            uow.after_commit(lambda: sink.enqueue(notification))
        # Callbacks run here, after commit
    """

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def lock_day(self, day: date):
        """
        Serialize writers for one calendar date

        Holds a row lock on the ``BookingDay`` ledger row until the
        transaction ends, so concurrent submissions for the same date
        see each other's bookings.
        """
        from apps.bookings.models import BookingDay

        BookingDay.objects.get_or_create(date=day)
        lock_queryset_if_possible(BookingDay.objects.filter(date=day)).get()

    def commit(self):
        """Schedule the registered callbacks to run after commit"""
        callbacks = self._callbacks.copy()
        self._callbacks.clear()
        logger.debug("uow.commit", callbacks=len(callbacks))

        for callback in callbacks:
            transaction.on_commit(callback)

    def rollback(self):
        """Rollback changes and discard pending callbacks"""
        logger.warning("uow.rollback", discarded_callbacks=len(self._callbacks))
        self._callbacks.clear()

    def after_commit(self, callback: Callable[[], None]):
        self._callbacks.append(callback)
