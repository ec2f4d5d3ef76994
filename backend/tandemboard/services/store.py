# backend/tandemboard/services/store.py
"""
Store queries feeding the daily grid and the weekly availability editor.

Rows are returned as plain dicts: they are cached in Redis as JSON and
validated by the grid mapper, never handed to the packer directly.
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from ..models.generated import Bookings, PilotAvailability, Pilots, Tags


def fetch_availability_rows(db: Session, day: date) -> list[dict]:
    """
    All availability marks for a day, with the pilot display name.

    Ordered by insertion id: this listing order is the "first seen"
    column order of the grid.
    """
    rows = (
        db.query(
            PilotAvailability.pilot_id,
            PilotAvailability.day,
            PilotAvailability.time_slot,
            Pilots.display_name,
        )
        .join(Pilots, Pilots.id == PilotAvailability.pilot_id)
        .filter(PilotAvailability.day == day.isoformat())
        .order_by(PilotAvailability.id)
        .all()
    )
    return [
        {
            "resource_id": pilot_id,
            "day": day_str,
            "time_slot": time_slot,
            "resource_display_name": display_name,
        }
        for pilot_id, day_str, time_slot, display_name in rows
    ]


def fetch_booking_rows(db: Session, day: date) -> list[dict]:
    """All bookings for a day with tag name/color, in creation order."""
    rows = (
        db.query(Bookings, Tags.name, Tags.color)
        .outerjoin(Tags, Tags.id == Bookings.tag_id)
        .filter(Bookings.booking_date == day.isoformat())
        .order_by(Bookings.created_at, Bookings.id)
        .all()
    )
    return [
        {
            "id": b.id,
            "name": b.name,
            "pickup_location": b.pickup_location,
            "number_of_people": b.number_of_people,
            "resource_id": b.pilot_id,
            "booking_date": b.booking_date,
            "time_slot": b.time_slot,
            "tag_id": b.tag_id,
            "created_at": b.created_at,
            "tag_color": tag_color,
            "tag_name": tag_name,
            "phone": b.phone,
            "email": b.email,
        }
        for b, tag_name, tag_color in rows
    ]


def week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def week_dates(start: date) -> list[date]:
    """Seven dates starting at `start`."""
    return [start + timedelta(days=i) for i in range(7)]


def fetch_week_availability_rows(db: Session, pilot_id: int, start: date) -> list[dict]:
    """A pilot's marks over the 7-day week starting at `start`."""
    end = start + timedelta(days=6)
    pilot = db.get(Pilots, pilot_id)
    display_name = pilot.display_name if pilot else None

    rows = (
        db.query(PilotAvailability.day, PilotAvailability.time_slot)
        .filter(
            PilotAvailability.pilot_id == pilot_id,
            PilotAvailability.day >= start.isoformat(),
            PilotAvailability.day <= end.isoformat(),
        )
        .order_by(PilotAvailability.id)
        .all()
    )
    return [
        {
            "resource_id": pilot_id,
            "day": day_str,
            "time_slot": time_slot,
            "resource_display_name": display_name,
        }
        for day_str, time_slot in rows
    ]
