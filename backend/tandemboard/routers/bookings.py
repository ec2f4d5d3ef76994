# backend/tandemboard/routers/bookings.py
# PATCH = ALLOWED (including date/time moves), DELETE = ALLOWED (hard)

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Bookings as DBBookings
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingUpdate,
)
from ..services import booking_mutations

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    target_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings)
    if target_date is not None:
        query = query.filter(DBBookings.booking_date == target_date.isoformat())
    return query.order_by(DBBookings.created_at, DBBookings.id).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    return booking_mutations.get_booking(db, id)


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    return booking_mutations.create_booking(db, redis, data)


@router.patch("/{id}", response_model=BookingRead)
def update_booking(
    id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    return booking_mutations.update_booking(db, redis, id, data)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    booking_mutations.delete_booking(db, redis, id)
