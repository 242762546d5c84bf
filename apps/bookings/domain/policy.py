"""
Booking Policy Engine

Pure decision logic for booking submissions. Nothing here touches the
database, the clock or any I/O: callers pass in today's date and the
bookings already scheduled for the requested day.

Checks, in the order the service applies them:
1. validate_shape: field presence, formats and ranges (all fields, all errors)
2. check_capacity: reject once the day holds max_per_day bookings
3. should_warn_threshold: early warning when the day reaches the threshold
4. check_duration: reject slots longer than the allowed minutes
5. check_overlap: reject slots intersecting an existing booking

Each field carries an explicit list of rules. A rule is a pure function
``(value) -> message | None``; the first failing rule of a field produces
that field's message and every field is always checked.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Iterable, Mapping, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from apps.bookings.domain.entities import BookingRequest, BookingType

Rule = Callable[[Any], Optional[str]]

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'
MAX_STRING_LENGTH = 255
MIN_PHONE_DIGITS = 10
MAX_PHONE_LENGTH = 32

_DATE_SHAPE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_DIGITS = re.compile(r'[0-9]+')
_TIME_SHAPE = re.compile(r'^\d{2}:\d{2}$')


@dataclass
class ValidationResult:
    """Field-keyed error messages, plus the parsed request when valid"""
    errors: dict[str, list[str]] = field(default_factory=dict)
    request: BookingRequest | None = None
    day: date | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ===== Value parsing =====

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value: Any) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string, None when malformed"""
    if not isinstance(value, str) or not _DATE_SHAPE.match(value):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def parse_time(value: Any) -> time | None:
    """Parse a strict ``HH:MM`` string, None when malformed"""
    if not isinstance(value, str) or not _TIME_SHAPE.match(value):
        return None
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError:
        return None


# ===== Rule factories =====

def required(message: str) -> Rule:
    return lambda value: message if _is_blank(value) else None


def is_string(message: str) -> Rule:
    return lambda value: None if isinstance(value, str) else message


def max_length(limit: int, message: str) -> Rule:
    return lambda value: message if len(str(value)) > limit else None


def date_format(message: str) -> Rule:
    return lambda value: None if parse_date(value) else message


def time_format(message: str) -> Rule:
    return lambda value: None if parse_time(value) else message


def on_or_after(earliest: date, message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        parsed = parse_date(value)
        return message if parsed is None or parsed < earliest else None
    return rule


def after_time(other: Any, message: str) -> Rule:
    """Strictly after another time field; skipped while that field is malformed"""
    reference = parse_time(other)

    def rule(value: Any) -> Optional[str]:
        parsed = parse_time(value)
        if reference is None or parsed is None:
            return None
        return None if parsed > reference else message
    return rule


def one_of(choices: Iterable[str], message: str) -> Rule:
    allowed = frozenset(choices)
    return lambda value: None if isinstance(value, str) and value in allowed else message


def numeric(message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        if isinstance(value, bool):
            return message
        if isinstance(value, int):
            return None if value >= 0 else message
        return None if isinstance(value, str) and _DIGITS.fullmatch(value) else message
    return rule


def min_digits(count: int, message: str) -> Rule:
    return lambda value: message if len(str(value)) < count else None


def email_address(message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        try:
            validate_email(value)
        except DjangoValidationError:
            return message
        return None
    return rule


# ===== Field rule lists =====

def booking_field_rules(data: Mapping[str, Any], today: date) -> dict[str, tuple[bool, list[Rule]]]:
    """
    Rules for a booking submission, keyed by field

    The boolean marks optional fields: blank optional values skip their rules.
    """
    tomorrow = today + timedelta(days=1)
    return {
        'date': (False, [
            required('The date field is required.'),
            date_format('The date format must be Y-m-d.'),
            on_or_after(tomorrow, 'The date must be tomorrow or later.'),
        ]),
        'start_time': (False, [
            required('The start time field is required.'),
            time_format('The start time format must be H:i.'),
        ]),
        'end_time': (False, [
            required('The end time field is required.'),
            time_format('The end time format must be H:i.'),
            after_time(data.get('start_time'), 'The end time must be after the start time.'),
        ]),
        'type': (False, [
            required('The type field is required.'),
            one_of(BookingType.values(), 'The type must be one of consultancy, assistance, commercial.'),
        ]),
        'firstname': (False, [
            required('The firstname field is required.'),
            is_string('The firstname must be a string.'),
            max_length(MAX_STRING_LENGTH, 'The firstname may not be greater than 255 characters.'),
        ]),
        'lastname': (False, [
            required('The lastname field is required.'),
            is_string('The lastname must be a string.'),
            max_length(MAX_STRING_LENGTH, 'The lastname may not be greater than 255 characters.'),
        ]),
        'phone': (True, [
            numeric('The phone, if present, must be numeric.'),
            min_digits(MIN_PHONE_DIGITS, 'The phone number, if present, must be at least 10 characters.'),
            max_length(MAX_PHONE_LENGTH, 'The phone number, if present, may not be greater than 32 characters.'),
        ]),
        'email': (True, [
            is_string('The email, if present, must be a valid email address.'),
            max_length(MAX_STRING_LENGTH, 'The email, if present, may not be greater than 255 characters.'),
            email_address('The email, if present, must be a valid email address.'),
        ]),
        'address': (True, [
            is_string('The address, if present, must be a string.'),
            max_length(MAX_STRING_LENGTH, 'The address, if present, may not be greater than 255 characters.'),
        ]),
    }


def date_query_rules() -> dict[str, tuple[bool, list[Rule]]]:
    return {
        'date': (False, [
            required('The date field is required.'),
            date_format('The date format must be Y-m-d.'),
        ]),
    }


def run_rules(data: Mapping[str, Any], rules: Mapping[str, tuple[bool, list[Rule]]]) -> dict[str, list[str]]:
    """Apply every field's rule list and collect the first failure per field"""
    errors: dict[str, list[str]] = {}
    for name, (optional, field_rules) in rules.items():
        value = data.get(name)
        if optional and _is_blank(value):
            continue
        for rule in field_rules:
            message = rule(value)
            if message:
                errors[name] = [message]
                break
    return errors


def _as_mapping(data: Any) -> Mapping[str, Any]:
    """A body that is not an object carries no fields"""
    return data if isinstance(data, Mapping) else {}


def _optional_text(value: Any) -> str | None:
    if _is_blank(value):
        return None
    return str(value).strip()


# ===== Policy operations =====

def validate_shape(data: Mapping[str, Any], today: date) -> ValidationResult:
    """
    Validate a booking submission

    Returns every field violation at once. When valid, the result
    carries the parsed BookingRequest.
    """
    data = _as_mapping(data)
    errors = run_rules(data, booking_field_rules(data, today))
    if errors:
        return ValidationResult(errors=errors)

    request = BookingRequest(
        date=parse_date(data['date']),
        start_time=parse_time(data['start_time']),
        end_time=parse_time(data['end_time']),
        type=BookingType(data['type']),
        firstname=data['firstname'].strip(),
        lastname=data['lastname'].strip(),
        email=_optional_text(data.get('email')),
        phone=_optional_text(data.get('phone')),
        address=_optional_text(data.get('address')),
    )
    return ValidationResult(request=request, day=request.date)


def validate_date_query(data: Mapping[str, Any]) -> ValidationResult:
    """Validate the ``date`` parameter of a daily listing (format only)"""
    data = _as_mapping(data)
    errors = run_rules(data, date_query_rules())
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(day=parse_date(data["date"]))


def check_capacity(existing_count: int, max_per_day: int) -> bool:
    """
    True when one more booking fits the day

    Rejects once the day already holds ``max_per_day`` bookings, so the
    max_per_day-th booking is the last one accepted.
    """
    return existing_count < max_per_day


def should_warn_threshold(existing_count: int, threshold: int) -> bool:
    """True exactly when the day's existing count equals the warning threshold"""
    return existing_count == threshold


def booking_duration(start: time, end: time) -> int:
    """Whole minutes between two times of the same day"""
    anchor = date.min
    delta = datetime.combine(anchor, end) - datetime.combine(anchor, start)
    return int(delta.total_seconds() // 60)


def check_duration(start: time, end: time, max_minutes: int) -> bool:
    """True when the slot lasts at most ``max_minutes``"""
    return booking_duration(start, end) <= max_minutes


def slots_collide(start: time, end: time, other_start: time, other_end: time) -> bool:
    """
    Three-clause collision test between a candidate and an existing slot

    The candidate collides when it covers the other slot's start, covers
    its end, or lies inside it.
    """
    return (
        (start <= other_start and end > other_start)
        or (start < other_end and end >= other_end)
        or (start >= other_start and end <= other_end)
    )


def intervals_overlap(start: time, end: time, other_start: time, other_end: time) -> bool:
    """Half-open interval overlap: start1 < end2 AND end1 > start2"""
    return start < other_end and end > other_start


def check_overlap(candidate, existing: Iterable) -> bool:
    """
    True when the candidate slot collides with any existing booking

    ``candidate`` and the items of ``existing`` only need ``start_time``
    and ``end_time`` attributes.
    """
    for booking in existing:
        if slots_collide(candidate.start_time, candidate.end_time, booking.start_time, booking.end_time):
            return True
    return False
