# backend/tandemboard/services/grid/mapper.py
"""
Fetch-boundary mapper: raw store rows → strict grid records.

Rows come from the store queries or from the per-date cache (JSON).
Both go through the same pydantic validation, so the packer never sees
a raw row.

Availability row: (resource_id, day, time_slot, resource_display_name)
Booking row:      (id, name, pickup_location, number_of_people, resource_id,
                   booking_date, time_slot, tag_id, created_at, tag_color,
                   tag_name, phone, email)
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import SnapshotMappingError
from .shaping import available_set, derive_resources
from .types import AvailabilityMark, Booking, DaySnapshot


class AvailabilityRow(BaseModel):
    resource_id: int
    day: date
    time_slot: str
    resource_display_name: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingRow(BaseModel):
    id: int
    name: str
    pickup_location: str
    number_of_people: int
    booking_date: date
    time_slot: str
    created_at: str
    resource_id: Optional[int] = None
    tag_id: Optional[int] = None
    tag_color: Optional[str] = None
    tag_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("phone", "email", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


def build_snapshot(
    day: date,
    availability_rows: list[dict[str, Any]],
    booking_rows: list[dict[str, Any]],
    order: str = "first_seen",
) -> DaySnapshot:
    """
    Validate raw rows and build the immutable snapshot for one date.

    Raises:
        SnapshotMappingError: a row is malformed or belongs to another date
    """
    avail = [_validate(AvailabilityRow, row) for row in availability_rows]
    books = [_validate(BookingRow, row) for row in booking_rows]

    for row in avail:
        if row.day != day:
            raise SnapshotMappingError(f"Availability row for {row.day} in snapshot of {day}")
    for row in books:
        if row.booking_date != day:
            raise SnapshotMappingError(f"Booking {row.id} dated {row.booking_date} in snapshot of {day}")

    resources = derive_resources(
        ((row.resource_id, row.resource_display_name or f"Pilot {row.resource_id}") for row in avail),
        order,
    )
    marks = [
        AvailabilityMark(resource_id=row.resource_id, day=row.day, time_slot=row.time_slot)
        for row in avail
    ]
    bookings = sorted((to_booking(row) for row in books), key=lambda b: b.sort_key)

    return DaySnapshot(
        day=day,
        resources=resources,
        available=available_set(marks),
        bookings=tuple(bookings),
    )


def to_booking(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        name=row.name,
        pickup_location=row.pickup_location,
        number_of_people=row.number_of_people,
        booking_date=row.booking_date,
        time_slot=row.time_slot,
        created_at=row.created_at,
        resource_id=row.resource_id,
        tag_id=row.tag_id,
        phone=row.phone,
        email=row.email,
        tag_name=row.tag_name,
        tag_color=row.tag_color,
    )


def _validate(model: type[BaseModel], row: dict[str, Any]):
    try:
        return model.model_validate(row)
    except ValidationError as e:
        raise SnapshotMappingError(f"Malformed {model.__name__}: {e.error_count()} error(s)") from e
