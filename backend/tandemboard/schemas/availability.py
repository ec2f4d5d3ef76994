# backend/tandemboard/schemas/availability.py

from datetime import date

from pydantic import BaseModel, field_validator

from ..services.grid.config import TIME_SLOTS


class AvailabilityMarkWrite(BaseModel):
    pilot_id: int
    day: date
    time_slot: str

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v: str) -> str:
        if v not in TIME_SLOTS:
            raise ValueError(f"time_slot must be one of {', '.join(TIME_SLOTS)}")
        return v


class AvailabilityDayToggle(BaseModel):
    pilot_id: int
    day: date


class AvailabilityDayRead(BaseModel):
    date: date
    slots: dict[str, bool]


class AvailabilityWeekResponse(BaseModel):
    pilot_id: int
    week_start: date
    time_slots: list[str]
    days: list[AvailabilityDayRead]
