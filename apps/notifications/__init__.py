"""Notifications app package.

Renders and sends the booking emails (renter confirmation, admin
confirmation, approaching-limit warning) as asynchronous Celery jobs.
"""
