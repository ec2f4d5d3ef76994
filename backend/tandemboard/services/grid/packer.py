# backend/tandemboard/services/grid/packer.py
"""
Slot packer: places variable-width bookings onto pilot columns, one time row at a time.

Per row:
  1. One base cell per resource: available / unavailable
  2. Stable partition: available cells first (relative order kept), so
     multi-person bookings find contiguous runs
  3. Bookings in creation order, first-fit over the current cells:
     leftmost cell becomes the booking, the rest of its span becomes hidden
  4. A booking with no contiguous run of available cells is dropped from
     the row (recorded in `unplaced`, never raised)

Pure function over an immutable snapshot; no state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .types import Booking, CellKind, Resource, SlotCell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackedRow:
    """Packer output for one time slot."""

    time_slot: str
    cells: tuple[SlotCell, ...]
    unplaced: tuple[Booking, ...] = ()

    @property
    def free_columns(self) -> int:
        """Available cells left after packing: the largest party a new booking could still seat."""
        return sum(1 for c in self.cells if c.kind is CellKind.AVAILABLE)

    @property
    def placed(self) -> tuple[Booking, ...]:
        return tuple(c.booking for c in self.cells if c.kind is CellKind.BOOKING)


def pack_row(
    resources: Sequence[Resource],
    is_available: Callable[[int, str], bool],
    bookings: Iterable[Booking],
    time_slot: str,
    max_width: int | None = None,
) -> PackedRow:
    """
    Pack the bookings of one time slot onto the resource columns.

    Args:
        resources: Column order for the whole day
        is_available: (resource_id, time_slot) -> bool
        bookings: Bookings of this time slot, in creation order
        time_slot: Row key
        max_width: Optional clamp for a booking's span

    Returns:
        PackedRow covering every resource exactly once.
    """
    base = [
        SlotCell.available(r) if is_available(r.id, time_slot) else SlotCell.unavailable(r)
        for r in resources
    ]
    # sorted() is stable: order within each group is kept
    cells = sorted(base, key=lambda c: 0 if c.is_available else 1)

    unplaced: list[Booking] = []
    for booking in bookings:
        width = booking_width(booking, max_width)
        start = find_first_fit(cells, width)
        if start is None:
            unplaced.append(booking)
            continue

        cells[start] = SlotCell.booked(cells[start].resource, booking, width)
        for i in range(start + 1, start + width):
            cells[i] = SlotCell.hidden(cells[i].resource)

    if unplaced:
        logger.info(
            "Row %s: %d booking(s) not placed (ids=%s)",
            time_slot, len(unplaced), [b.id for b in unplaced],
        )

    return PackedRow(time_slot=time_slot, cells=tuple(cells), unplaced=tuple(unplaced))


def booking_width(booking: Booking, max_width: int | None = None) -> int:
    """Column span a booking needs."""
    width = booking.number_of_people
    if max_width is not None:
        width = min(width, max_width)
    return width


def find_first_fit(cells: Sequence[SlotCell], width: int) -> int | None:
    """
    Find the first index i where cells[i:i+width] are all available.

    Returns None for width < 1 or when no run fits before the end.
    """
    if width < 1:
        return None

    run = 0
    for i, cell in enumerate(cells):
        if cell.is_available:
            run += 1
            if run == width:
                return i - width + 1
        else:
            run = 0
    return None


def pad_row(cells: Sequence[SlotCell], column_count: int) -> tuple[SlotCell, ...]:
    """Append empty cells up to a fixed column count. Never truncates."""
    missing = column_count - len(cells)
    if missing <= 0:
        return tuple(cells)
    return tuple(cells) + tuple(SlotCell.empty() for _ in range(missing))
