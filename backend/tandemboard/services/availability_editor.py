# backend/tandemboard/services/availability_editor.py
"""
Weekly availability editing for pilots.

Edits are optimistic: the op is applied to the AvailabilityCache first,
then persisted. On success the op is confirmed; on failure it is dropped
(restoring the previous view) and PersistenceError is raised.

Toggling a whole day:
  fewer than all time slots marked → mark the missing ones
  all time slots marked           → clear the day
"""

import logging
from datetime import date

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.generated import PilotAvailability, Pilots
from .availability_cache import AvailabilityCache, AvailabilityOp
from .changes import ChangeEvent, publish_change
from .errors import FetchError, NotAPilotError, PersistenceError, PilotNotFoundError
from .grid.config import GridConfig, get_grid_config
from .grid.snapshot_cache import SnapshotRedisStore
from .store import fetch_week_availability_rows, week_dates, week_start

logger = logging.getLogger(__name__)


class AvailabilityEditor:
    def __init__(
        self,
        db: Session,
        redis: Redis,
        cache: AvailabilityCache,
        config: GridConfig | None = None,
    ):
        self.db = db
        self.redis = redis
        self.cache = cache
        self.config = config or get_grid_config()

    # ── Read ─────────────────────────────────────────────────────────────

    def week(self, pilot_id: int, any_day: date) -> dict:
        """
        Refetch a pilot's week and return the (optimistic) view.

        Returns:
            {"week_start": date, "days": [{"date": date, "slots": {time_slot: bool}}]}
        """
        pilot = self._get_pilot(pilot_id)
        start = week_start(any_day)
        scope = self.cache.scope_for(pilot.id, start)

        try:
            rows = fetch_week_availability_rows(self.db, pilot.id, start)
        except SQLAlchemyError as e:
            logger.exception("Failed to fetch availability week %s for pilot %s", start, pilot_id)
            raise FetchError() from e
        self.cache.load(scope, rows)

        marked = {(row["day"], row["time_slot"]) for row in self.cache.view(scope)}
        return {
            "week_start": start,
            "days": [
                {
                    "date": d,
                    "slots": {t: (d.isoformat(), t) in marked for t in self.config.time_slots},
                }
                for d in week_dates(start)
            ],
        }

    def is_marked(self, pilot_id: int, day: date, time_slot: str) -> bool:
        scope = self.cache.scope_for(pilot_id, day)
        key = (day.isoformat(), time_slot)
        return any((row["day"], row["time_slot"]) == key for row in self.cache.view(scope))

    # ── Write ────────────────────────────────────────────────────────────

    def set_mark(self, pilot_id: int, day: date, time_slot: str, available: bool) -> bool:
        """Add or remove one mark. Returns the resulting availability."""
        pilot = self._get_editor(pilot_id)
        self._ensure_loaded(pilot.id, day)
        return self._set(pilot, day, time_slot, available)

    def toggle_slot(self, pilot_id: int, day: date, time_slot: str) -> bool:
        """Flip one mark. Returns the new availability."""
        pilot = self._get_editor(pilot_id)
        self._ensure_loaded(pilot.id, day)
        return self._set(pilot, day, time_slot, not self.is_marked(pilot.id, day, time_slot))

    def toggle_day(self, pilot_id: int, day: date) -> bool:
        """Fill or clear a whole day. Returns True when the day is now fully available."""
        pilot = self._get_editor(pilot_id)
        self._ensure_loaded(pilot.id, day)

        marked = [t for t in self.config.time_slots if self.is_marked(pilot.id, day, t)]
        make_available = len(marked) < self.config.slots_per_day

        if make_available:
            slots = [t for t in self.config.time_slots if t not in marked]
            action = "add"
        else:
            slots = marked
            action = "remove"

        ops = [
            AvailabilityOp(action, pilot.id, day, t, pilot.display_name)
            for t in slots
        ]
        self._apply(ops)
        return make_available

    # ── Helpers ──────────────────────────────────────────────────────────

    def _set(self, pilot: Pilots, day: date, time_slot: str, available: bool) -> bool:
        if self.is_marked(pilot.id, day, time_slot) == available:
            return available

        op = AvailabilityOp(
            action="add" if available else "remove",
            resource_id=pilot.id,
            day=day,
            time_slot=time_slot,
            display_name=pilot.display_name,
        )
        self._apply([op])
        return available

    def _apply(self, ops: list[AvailabilityOp]) -> None:
        if not ops:
            return

        op_ids = [self.cache.begin(op) for op in ops]
        try:
            for op in ops:
                self._persist(op)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            for op_id in op_ids:
                self.cache.fail(op_id)
            logger.exception("Failed to update availability for pilot %s", ops[0].resource_id)
            raise PersistenceError("Failed to update availability. Please try again.") from e

        for op_id in op_ids:
            self.cache.confirm(op_id)

        days = sorted({op.day for op in ops})
        action = "insert" if ops[0].action == "add" else "delete"
        logger.info(f"Availability {action}: pilot={ops[0].resource_id} marks={len(ops)}")

        try:
            SnapshotRedisStore(self.redis, self.config).invalidate(days)
        except RedisError as e:
            logger.error(f"Failed to invalidate grid cache for {days}: {e}")
        publish_change(
            self.redis,
            ChangeEvent(table="pilot_availability", action=action, dates=tuple(days)),
        )

    def _persist(self, op: AvailabilityOp) -> None:
        if op.action == "add":
            self.db.add(PilotAvailability(
                pilot_id=op.resource_id,
                day=op.day.isoformat(),
                time_slot=op.time_slot,
            ))
            self.db.flush()
        else:
            (
                self.db.query(PilotAvailability)
                .filter(
                    PilotAvailability.pilot_id == op.resource_id,
                    PilotAvailability.day == op.day.isoformat(),
                    PilotAvailability.time_slot == op.time_slot,
                )
                .delete(synchronize_session=False)
            )

    def _ensure_loaded(self, pilot_id: int, day: date) -> None:
        scope = self.cache.scope_for(pilot_id, day)
        try:
            rows = fetch_week_availability_rows(self.db, pilot_id, scope[1])
        except SQLAlchemyError as e:
            logger.exception("Failed to fetch availability week %s for pilot %s", scope[1], pilot_id)
            raise FetchError() from e
        self.cache.load(scope, rows)

    def _get_pilot(self, pilot_id: int) -> Pilots:
        pilot = self.db.get(Pilots, pilot_id)
        if not pilot:
            raise PilotNotFoundError()
        return pilot

    def _get_editor(self, pilot_id: int) -> Pilots:
        pilot = self._get_pilot(pilot_id)
        if pilot.role != "pilot":
            raise NotAPilotError()
        return pilot
