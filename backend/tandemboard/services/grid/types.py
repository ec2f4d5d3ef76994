"""Grid records: resources, availability marks, bookings and rendered cells."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class Resource:
    """A pilot. One column of the daily grid."""

    id: int
    display_name: str


@dataclass(frozen=True)
class AvailabilityMark:
    """Existence means the resource is available at (day, time_slot)."""

    resource_id: int
    day: date
    time_slot: str


@dataclass(frozen=True)
class Tag:
    """Cosmetic label; its color is the background of a booking cell."""

    id: int
    name: str
    color: str


@dataclass(frozen=True)
class Booking:
    """A customer booking.

    Invariants consumed by the packer:
        - number_of_people is the contiguous column span in its time row
        - bookings of one row are packed in (created_at, id) order
    """

    id: int
    name: str
    pickup_location: str
    number_of_people: int
    booking_date: date
    time_slot: str
    created_at: str
    resource_id: int | None = None
    tag_id: int | None = None
    phone: str | None = None
    email: str | None = None
    tag_name: str | None = None
    tag_color: str | None = None

    @property
    def sort_key(self) -> tuple[str, int]:
        return self.created_at, self.id

    @property
    def tag(self) -> Tag | None:
        if self.tag_id is None or self.tag_color is None:
            return None
        return Tag(id=self.tag_id, name=self.tag_name or "", color=self.tag_color)


class CellKind(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    BOOKING = "booking"
    HIDDEN = "hidden"
    EMPTY = "empty"


@dataclass(frozen=True)
class SlotCell:
    """One rendered grid cell.

    `width` is the rendered span of a booking cell; 1 for every other kind.
    """

    kind: CellKind
    resource: Resource | None = None
    booking: Booking | None = None
    width: int = 1

    @classmethod
    def available(cls, resource: Resource) -> SlotCell:
        return cls(CellKind.AVAILABLE, resource)

    @classmethod
    def unavailable(cls, resource: Resource) -> SlotCell:
        return cls(CellKind.UNAVAILABLE, resource)

    @classmethod
    def booked(cls, resource: Resource, booking: Booking, width: int) -> SlotCell:
        return cls(CellKind.BOOKING, resource, booking, width)

    @classmethod
    def hidden(cls, resource: Resource) -> SlotCell:
        return cls(CellKind.HIDDEN, resource)

    @classmethod
    def empty(cls) -> SlotCell:
        return cls(CellKind.EMPTY)

    @property
    def is_available(self) -> bool:
        return self.kind is CellKind.AVAILABLE


@dataclass(frozen=True)
class DaySnapshot:
    """Immutable input for one repack of a date.

    `resources` is the column order for the whole day; `available` holds
    (resource_id, time_slot) pairs; `bookings` is in creation order.
    """

    day: date
    resources: tuple[Resource, ...]
    available: frozenset[tuple[int, str]]
    bookings: tuple[Booking, ...] = field(default_factory=tuple)

    def is_available(self, resource_id: int, time_slot: str) -> bool:
        return (resource_id, time_slot) in self.available
