# backend/tandemboard/services/availability_cache.py
"""
Optimistic availability cache.

One entry per scope = (pilot_id, Monday of the week):
  confirmed rows: last rows loaded from / confirmed by the store
  pending log:    operations applied locally but not yet confirmed

Entries of past weeks with nothing pending are dropped on the next load.

The visible state is always overlay(confirmed, pending), a pure function.
Confirming an op folds it into the confirmed rows; failing an op just
drops it from the log, which restores the pre-op view.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from .store import week_start

Scope = tuple[int, date]


@dataclass(frozen=True)
class AvailabilityOp:
    action: Literal["add", "remove"]
    resource_id: int
    day: date
    time_slot: str
    display_name: str | None = None

    @property
    def mark_key(self) -> tuple[int, str, str]:
        return self.resource_id, self.day.isoformat(), self.time_slot


@dataclass
class _Entry:
    confirmed: list[dict] = field(default_factory=list)
    pending: dict[int, AvailabilityOp] = field(default_factory=dict)


def _row_key(row: dict) -> tuple[int, str, str]:
    day = row["day"]
    return row["resource_id"], day.isoformat() if isinstance(day, date) else day, row["time_slot"]


def overlay(rows: list[dict], ops: list[AvailabilityOp]) -> list[dict]:
    """Apply ops in order over availability rows. Does not mutate its inputs."""
    result = list(rows)
    for op in ops:
        key = op.mark_key
        if op.action == "add":
            if not any(_row_key(r) == key for r in result):
                result.append({
                    "resource_id": op.resource_id,
                    "day": op.day.isoformat(),
                    "time_slot": op.time_slot,
                    "resource_display_name": op.display_name,
                })
        else:
            result = [r for r in result if _row_key(r) != key]
    return result


class AvailabilityCache:
    """Thread-safe cache of weekly availability with a pending-operations log."""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self._entries: dict[Scope, _Entry] = {}
        self._op_scope: dict[int, Scope] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @staticmethod
    def scope_for(pilot_id: int, day: date) -> Scope:
        return pilot_id, week_start(day)

    def load(self, scope: Scope, rows: list[dict]) -> None:
        """Replace the confirmed rows of a scope (last write wins). Pending ops survive."""
        with self._lock:
            self._prune(keep=scope)
            self._entries.setdefault(scope, _Entry()).confirmed = list(rows)

    def begin(self, op: AvailabilityOp) -> int:
        """Apply an op locally. Returns its id for confirm/fail."""
        scope = self.scope_for(op.resource_id, op.day)
        with self._lock:
            op_id = next(self._ids)
            self._entries.setdefault(scope, _Entry()).pending[op_id] = op
            self._op_scope[op_id] = scope
            return op_id

    def confirm(self, op_id: int) -> None:
        """The store accepted the op: fold it into the confirmed rows."""
        with self._lock:
            scope = self._op_scope.pop(op_id, None)
            if scope is None:
                return
            entry = self._entries[scope]
            op = entry.pending.pop(op_id)
            entry.confirmed = overlay(entry.confirmed, [op])

    def fail(self, op_id: int) -> None:
        """The store rejected the op: drop it, restoring the pre-op view."""
        with self._lock:
            scope = self._op_scope.pop(op_id, None)
            if scope is None:
                return
            self._entries[scope].pending.pop(op_id, None)

    def scopes(self) -> list[Scope]:
        with self._lock:
            return list(self._entries)

    def view(self, scope: Scope) -> list[dict]:
        with self._lock:
            entry = self._entries.get(scope)
            if entry is None:
                return []
            return overlay(entry.confirmed, list(entry.pending.values()))

    def pending_for_day(self, day: date) -> list[AvailabilityOp]:
        """Unconfirmed ops of every pilot touching `day`, in the order they were begun."""
        monday = week_start(day)
        with self._lock:
            ops = [
                (op_id, op)
                for (_, scope_week), entry in self._entries.items()
                if scope_week == monday
                for op_id, op in entry.pending.items()
                if op.day == day
            ]
        return [op for _, op in sorted(ops, key=lambda item: item[0])]

    def _prune(self, keep: Scope) -> None:
        # Past weeks are dropped once nothing is pending for them
        current_week = week_start(self._today())
        stale = [
            scope for scope, entry in self._entries.items()
            if scope != keep and scope[1] < current_week and not entry.pending
        ]
        for scope in stale:
            del self._entries[scope]


availability_cache = AvailabilityCache()


# Dependency for FastAPI
def get_availability_cache() -> AvailabilityCache:
    return availability_cache
