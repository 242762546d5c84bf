"""Bookings app package.

This app encapsulates the booking domain: renters, bookings and the
per-day ledger used to serialize submissions. The policy engine in
``domain.policy`` decides whether a submission is accepted; the service
in ``services`` runs those checks and the writes under one per-date lock.
"""
