# backend/tandemboard/routers/availability.py
"""
Weekly availability endpoints (pilots edit their own marks).

GET    /availability/week        - 7 days × time slots for a pilot
PUT    /availability             - Mark available
DELETE /availability             - Mark unavailable
POST   /availability/toggle      - Flip one mark
POST   /availability/toggle-day  - Fill or clear a whole day
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.availability import (
    AvailabilityDayRead,
    AvailabilityDayToggle,
    AvailabilityMarkWrite,
    AvailabilityWeekResponse,
)
from ..services.availability_cache import AvailabilityCache, get_availability_cache
from ..services.availability_editor import AvailabilityEditor
from ..services.grid import TIME_SLOTS

router = APIRouter(prefix="/availability", tags=["availability"])


def get_editor(
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
    cache: AvailabilityCache = Depends(get_availability_cache),
) -> AvailabilityEditor:
    return AvailabilityEditor(db, redis, cache)


@router.get("/week", response_model=AvailabilityWeekResponse)
def get_week(
    pilot_id: int,
    target_date: date = Query(..., alias="date"),
    editor: AvailabilityEditor = Depends(get_editor),
):
    week = editor.week(pilot_id, target_date)
    return AvailabilityWeekResponse(
        pilot_id=pilot_id,
        week_start=week["week_start"],
        time_slots=list(TIME_SLOTS),
        days=[AvailabilityDayRead(**d) for d in week["days"]],
    )


@router.put("/")
def mark_available(
    data: AvailabilityMarkWrite,
    editor: AvailabilityEditor = Depends(get_editor),
):
    available = editor.set_mark(data.pilot_id, data.day, data.time_slot, True)
    return {"pilot_id": data.pilot_id, "day": data.day, "time_slot": data.time_slot, "available": available}


@router.delete("/")
def mark_unavailable(
    data: AvailabilityMarkWrite,
    editor: AvailabilityEditor = Depends(get_editor),
):
    available = editor.set_mark(data.pilot_id, data.day, data.time_slot, False)
    return {"pilot_id": data.pilot_id, "day": data.day, "time_slot": data.time_slot, "available": available}


@router.post("/toggle")
def toggle_mark(
    data: AvailabilityMarkWrite,
    editor: AvailabilityEditor = Depends(get_editor),
):
    available = editor.toggle_slot(data.pilot_id, data.day, data.time_slot)
    return {"pilot_id": data.pilot_id, "day": data.day, "time_slot": data.time_slot, "available": available}


@router.post("/toggle-day")
def toggle_day(
    data: AvailabilityDayToggle,
    editor: AvailabilityEditor = Depends(get_editor),
):
    available = editor.toggle_day(data.pilot_id, data.day)
    return {"pilot_id": data.pilot_id, "day": data.day, "available": available}
