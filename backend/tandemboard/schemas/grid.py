# backend/tandemboard/schemas/grid.py
"""
Pydantic schemas for the daily grid API.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ResourceRead(BaseModel):
    id: int
    display_name: str

    model_config = {"from_attributes": True}


class BookingSummary(BaseModel):
    """What a booking cell shows."""
    id: int
    name: str
    pickup_location: str
    number_of_people: int
    tag_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class GridCell(BaseModel):
    kind: Literal["available", "unavailable", "booking", "hidden", "empty"]
    resource_id: Optional[int] = None
    width: int = 1
    color: Optional[str] = None
    booking: Optional[BookingSummary] = None
    action: Optional[Literal["create", "edit"]] = Field(
        None, description="Click routing: 'create' for available cells, 'edit' for booking cells"
    )


class GridRowRead(BaseModel):
    time_slot: str
    cells: list[GridCell]
    capacity: int = Field(description="Columns available before bookings")
    free_columns: int = Field(description="Columns still available; max party size for a new booking")
    unplaced_booking_ids: list[int] = []


class DayGridResponse(BaseModel):
    date: date
    resources: list[ResourceRead]
    rows: list[GridRowRead]
    unplaced_booking_ids: list[int] = Field(
        default_factory=list,
        description="Bookings that did not fit their row and are not rendered",
    )


class GridClickResponse(BaseModel):
    action: Optional[Literal["create", "edit"]] = None
    date: date
    time_slot: str
    resource_id: Optional[int] = None
    max_people: Optional[int] = None
    booking_id: Optional[int] = None
