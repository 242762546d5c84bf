"""
Base Domain Classes

Foundational building blocks shared by the domain packages:
- Entity: Records with identity assigned by the store
- ValueObject: Immutable objects compared by value
"""

from abc import ABC
from dataclasses import dataclass


@dataclass
class Entity(ABC):
    """
    Base class for all entities

    The identifier is opaque and assigned by the store on first save,
    so a freshly built entity has ``id=None``.
    Two persisted entities are equal if their IDs are equal.
    """

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self):
        return hash((self.__class__.__name__, self.id))


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass
