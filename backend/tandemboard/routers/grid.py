# backend/tandemboard/routers/grid.py
"""
Daily grid endpoints.

GET /grid/day       - Packed grid for a date (all time slots)
GET /grid/day/click - Resolve a click on (time_slot, column) to an intent
POST /grid/invalidate - Drop cached rows (admin endpoint)
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.grid import (
    BookingSummary,
    DayGridResponse,
    GridCell,
    GridClickResponse,
    GridRowRead,
    ResourceRead,
)
from ..services.availability_cache import AvailabilityCache, get_availability_cache
from ..services.grid import (
    CreateBookingIntent,
    DayGrid,
    EditBookingIntent,
    SnapshotRedisStore,
    build_day_grid,
    get_grid_config,
    load_day_snapshot,
    resolve_click,
)
from ..services.grid.renderer import cell_color
from ..services.grid.types import CellKind, SlotCell

router = APIRouter(prefix="/grid", tags=["grid"])


def _load_grid(db: Session, redis: Redis, cache: AvailabilityCache, target_date: date) -> DayGrid:
    config = get_grid_config()
    snapshot = load_day_snapshot(db, redis, target_date, cache, config)
    return build_day_grid(snapshot, config)


def _cell(cell: SlotCell) -> GridCell:
    booking = None
    action = None
    if cell.kind is CellKind.BOOKING:
        b = cell.booking
        booking = BookingSummary(
            id=b.id,
            name=b.name,
            pickup_location=b.pickup_location,
            number_of_people=b.number_of_people,
            tag_name=b.tag_name,
            phone=b.phone,
            email=b.email,
        )
        action = "edit"
    elif cell.kind is CellKind.AVAILABLE:
        action = "create"

    return GridCell(
        kind=cell.kind.value,
        resource_id=cell.resource.id if cell.resource else None,
        width=cell.width,
        color=cell_color(cell),
        booking=booking,
        action=action,
    )


@router.get("/day", response_model=DayGridResponse)
def get_day_grid(
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
    cache: AvailabilityCache = Depends(get_availability_cache),
):
    """Get the packed daily grid for a date."""
    grid = _load_grid(db, redis, cache, target_date)

    return DayGridResponse(
        date=grid.day,
        resources=[ResourceRead(id=r.id, display_name=r.display_name) for r in grid.resources],
        rows=[
            GridRowRead(
                time_slot=row.time_slot,
                cells=[_cell(c) for c in row.cells],
                capacity=row.capacity,
                free_columns=row.free_columns,
                unplaced_booking_ids=[b.id for b in row.unplaced],
            )
            for row in grid.rows
        ],
        unplaced_booking_ids=[b.id for b in grid.unplaced],
    )


@router.get("/day/click", response_model=GridClickResponse)
def click_day_grid(
    time_slot: str,
    column: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
    cache: AvailabilityCache = Depends(get_availability_cache),
):
    """Resolve a click on a grid cell to a booking create/edit intent."""
    grid = _load_grid(db, redis, cache, target_date)

    try:
        intent = resolve_click(grid, time_slot, column)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if isinstance(intent, CreateBookingIntent):
        return GridClickResponse(
            action="create",
            date=intent.day,
            time_slot=intent.time_slot,
            resource_id=intent.resource_id,
            max_people=intent.max_people,
        )
    if isinstance(intent, EditBookingIntent):
        return GridClickResponse(
            action="edit",
            date=target_date,
            time_slot=time_slot,
            booking_id=intent.booking_id,
        )
    return GridClickResponse(date=target_date, time_slot=time_slot)


@router.post("/invalidate")
def invalidate_grid_cache(
    dates: list[date] | None = None,
    redis: Redis = Depends(get_redis),
):
    """Manually invalidate cached grid rows (admin endpoint)."""
    deleted = SnapshotRedisStore(redis).invalidate(dates)

    return {
        "deleted_keys": deleted,
        "dates": [d.isoformat() for d in dates] if dates is not None else "all",
    }
