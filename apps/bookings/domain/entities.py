"""
Booking Domain Entities

Plain records for the booking domain, decoupled from storage:
- BookingType: The fixed enumeration of booking kinds
- Renter: The person requesting a slot
- Booking: A reserved slot on a date, owned by one renter
- BookingRequest: A shape-validated submission
- BookingView: A booking joined with its renter's contact details
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum

from shared.domain.base import Entity
from shared.domain.value_objects import TimeRange


class BookingType(str, Enum):
    """Booking kinds accepted by the coworking space"""
    CONSULTANCY = 'consultancy'
    ASSISTANCE = 'assistance'
    COMMERCIAL = 'commercial'

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(eq=False)
class Renter(Entity):
    """
    Renter contact record

    Key invariants:
    - At most one live renter per non-empty email
    - Every field is overwritten when a booking arrives for a known email
    """
    firstname: str
    lastname: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    id: int | None = None

    def overwrite_contact(self, other: 'Renter') -> None:
        """Replace every contact field with the values from ``other``"""
        self.firstname = other.firstname
        self.lastname = other.lastname
        self.email = other.email
        self.phone = other.phone
        self.address = other.address


@dataclass(eq=False)
class Booking(Entity):
    """
    Booking record

    Key invariants:
    - end_time > start_time (same calendar day)
    - date is tomorrow or later at submission time
    - type is one of BookingType
    """
    renter_id: int | None
    date: date
    start_time: time
    end_time: time
    type: BookingType
    id: int | None = None

    @property
    def slot(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)


@dataclass(frozen=True)
class BookingRequest:
    """A submission that passed shape validation"""
    date: date
    start_time: time
    end_time: time
    type: BookingType
    firstname: str
    lastname: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @property
    def slot(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    def to_renter(self) -> Renter:
        return Renter(
            firstname=self.firstname,
            lastname=self.lastname,
            email=self.email,
            phone=self.phone,
            address=self.address,
        )

    def to_booking(self, renter_id: int | None) -> Booking:
        return Booking(
            renter_id=renter_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            type=self.type,
        )

    def as_payload(self) -> dict[str, str | None]:
        """Serializable copy used by notification jobs"""
        return {
            'date': self.date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
            'type': self.type.value,
            'firstname': self.firstname,
            'lastname': self.lastname,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
        }


@dataclass(frozen=True)
class BookingView:
    """Read model returned by the daily listing"""
    id: int
    date: date
    start_time: time
    end_time: time
    type: BookingType
    firstname: str
    lastname: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
