# backend/tandemboard/schemas/bookings.py

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..services.grid.config import TIME_SLOTS

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_time_slot(v: str) -> str:
    if v not in TIME_SLOTS:
        raise ValueError(f"time_slot must be one of {', '.join(TIME_SLOTS)}")
    return v


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


class BookingCreate(BaseModel):
    name: str = Field(min_length=1, description="Name is required")
    pickup_location: str = Field(min_length=1, description="Pickup location is required")
    number_of_people: int = Field(1, ge=1, le=100)

    booking_date: date
    time_slot: str

    pilot_id: Optional[int] = None
    tag_id: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("name", "pickup_location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v: str) -> str:
        return _check_time_slot(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class BookingUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    pickup_location: Optional[str] = Field(None, min_length=1)
    number_of_people: Optional[int] = Field(None, ge=1, le=100)

    booking_date: Optional[date] = None
    time_slot: Optional[str] = None

    pilot_id: Optional[int] = None
    tag_id: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_time_slot(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class BookingRead(BaseModel):
    id: int

    name: str
    pickup_location: str
    number_of_people: int

    booking_date: date
    time_slot: str

    pilot_id: Optional[int] = None
    tag_id: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}
