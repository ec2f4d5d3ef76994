# backend/tandemboard/services/booking_mutations.py
"""
Booking writes.

Every successful write:
  1. commits
  2. invalidates the cached grid rows of the affected date(s)
  3. publishes a ChangeEvent

Nothing is applied before the commit succeeds. A failed commit is rolled
back and raised as PersistenceError.
"""

import logging
from datetime import date

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.generated import Bookings, Pilots, Tags, utc_now
from ..schemas.bookings import BookingCreate, BookingUpdate
from .changes import ChangeEvent, publish_change
from .errors import BookingNotFoundError, PersistenceError, UnknownReferenceError
from .grid.snapshot_cache import SnapshotRedisStore

logger = logging.getLogger(__name__)

# Columns that may not be cleared by a PATCH
_REQUIRED_FIELDS = {"name", "pickup_location", "number_of_people", "booking_date", "time_slot"}


def _as_date(value) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def create_booking(db: Session, redis: Redis, data: BookingCreate) -> Bookings:
    _check_references(db, data.pilot_id, data.tag_id)

    fields = data.model_dump()
    fields["booking_date"] = data.booking_date.isoformat()
    now = utc_now()

    obj = Bookings(**fields, created_at=now, updated_at=now)
    _commit(db, "create booking", obj)

    logger.info(f"Booking created: id={obj.id} date={obj.booking_date} slot={obj.time_slot}")
    _after_write(redis, "insert", [data.booking_date])
    return obj


def update_booking(db: Session, redis: Redis, booking_id: int, data: BookingUpdate) -> Bookings:
    obj = get_booking(db, booking_id)
    old_date = _as_date(obj.booking_date)

    changes = data.model_dump(exclude_unset=True)
    _check_references(db, changes.get("pilot_id"), changes.get("tag_id"))

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        if field == "booking_date":
            value = value.isoformat()
        setattr(obj, field, value)
    obj.updated_at = utc_now()

    _commit(db, "update booking")

    new_date = _as_date(obj.booking_date)
    dates = [old_date] if new_date == old_date else [old_date, new_date]
    logger.info(f"Booking updated: id={obj.id} dates={[d.isoformat() for d in dates]}")
    _after_write(redis, "update", dates)
    return obj


def delete_booking(db: Session, redis: Redis, booking_id: int) -> None:
    obj = get_booking(db, booking_id)
    booking_date = _as_date(obj.booking_date)

    db.delete(obj)
    _commit(db, "delete booking")

    logger.info(f"Booking deleted: id={booking_id} date={booking_date}")
    _after_write(redis, "delete", [booking_date])


def get_booking(db: Session, booking_id: int) -> Bookings:
    obj = db.get(Bookings, booking_id)
    if not obj:
        raise BookingNotFoundError()
    return obj


def _check_references(db: Session, pilot_id: int | None, tag_id: int | None) -> None:
    if pilot_id is not None and db.get(Pilots, pilot_id) is None:
        raise UnknownReferenceError(f"Pilot {pilot_id} does not exist.")
    if tag_id is not None and db.get(Tags, tag_id) is None:
        raise UnknownReferenceError(f"Tag {tag_id} does not exist.")


def _commit(db: Session, what: str, obj: Bookings | None = None) -> None:
    try:
        if obj is not None:
            db.add(obj)
        db.commit()
        if obj is not None:
            db.refresh(obj)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s", what)
        raise PersistenceError("Failed to save booking. Please try again.") from e


def _after_write(redis: Redis, action: str, dates: list[date]) -> None:
    try:
        SnapshotRedisStore(redis).invalidate(dates)
    except RedisError as e:
        logger.error(f"Failed to invalidate grid cache for {dates}: {e}")
    publish_change(redis, ChangeEvent(table="bookings", action=action, dates=tuple(dates)))
