# backend/tandemboard/services/grid/loader.py
"""
Day snapshot loading: cache read-through → optimistic overlay → mapper.

The cached rows are the confirmed store state. Pending availability ops
from the optimistic cache are overlaid on top, so the packer sees local
edits exactly like confirmed ones.
"""

import logging
from datetime import date

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..availability_cache import AvailabilityCache, overlay
from ..errors import FetchError
from ..store import fetch_availability_rows, fetch_booking_rows
from .config import GridConfig, get_grid_config
from .mapper import build_snapshot
from .snapshot_cache import SnapshotRedisStore
from .types import DaySnapshot

logger = logging.getLogger(__name__)


def load_day_rows(
    db: Session,
    redis: Redis | None,
    day: date,
    config: GridConfig | None = None,
) -> dict:
    """Get the raw rows for a date, using the Redis cache when available."""
    config = config or get_grid_config()

    store = None
    generation = 0
    if redis is not None:
        store = SnapshotRedisStore(redis, config)
        try:
            cached = store.get(day)
            if cached is not None:
                return cached
            generation = store.generation(day)
        except RedisError as e:
            logger.warning(f"Grid cache unavailable for {day}, reading store: {e}")
            store = None

    try:
        rows = {
            "availability": fetch_availability_rows(db, day),
            "bookings": fetch_booking_rows(db, day),
        }
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch grid rows for %s", day)
        raise FetchError() from e

    if store is not None:
        try:
            store.put(day, rows, generation)
        except RedisError as e:
            logger.warning(f"Failed to cache grid rows for {day}: {e}")

    return rows


def load_day_snapshot(
    db: Session,
    redis: Redis | None,
    day: date,
    availability_cache: AvailabilityCache | None = None,
    config: GridConfig | None = None,
) -> DaySnapshot:
    """Build the immutable snapshot one repack of `day` works on."""
    config = config or get_grid_config()
    rows = load_day_rows(db, redis, day, config)

    availability = rows["availability"]
    if availability_cache is not None:
        pending = availability_cache.pending_for_day(day)
        if pending:
            availability = overlay(availability, pending)

    return build_snapshot(day, availability, rows["bookings"], config.column_order)
