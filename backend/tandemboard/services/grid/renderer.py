# backend/tandemboard/services/grid/renderer.py
"""
Daily grid renderer: time slots × packer output.

Emits no side effects. Clicks are resolved to intents:
  available cell → CreateBookingIntent (booking form, max_people = free columns)
  booking cell   → EditBookingIntent
  anything else  → None
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .config import DEFAULT_BOOKING_COLOR, GridConfig, get_grid_config
from .packer import pack_row, pad_row
from .shaping import count_capacity, group_bookings_by_slot
from .types import Booking, CellKind, DaySnapshot, Resource, SlotCell


@dataclass(frozen=True)
class GridRow:
    time_slot: str
    cells: tuple[SlotCell, ...]
    capacity: int
    free_columns: int
    unplaced: tuple[Booking, ...] = ()


@dataclass(frozen=True)
class DayGrid:
    day: date
    resources: tuple[Resource, ...]
    rows: tuple[GridRow, ...]

    def row(self, time_slot: str) -> GridRow:
        for r in self.rows:
            if r.time_slot == time_slot:
                return r
        raise LookupError(f"No row for time slot {time_slot!r}")

    @property
    def unplaced(self) -> tuple[Booking, ...]:
        return tuple(b for r in self.rows for b in r.unplaced)


@dataclass(frozen=True)
class CreateBookingIntent:
    day: date
    time_slot: str
    resource_id: int
    max_people: int


@dataclass(frozen=True)
class EditBookingIntent:
    booking_id: int


def build_day_grid(snapshot: DaySnapshot, config: GridConfig | None = None) -> DayGrid:
    """Pack every configured time slot of the snapshot's day."""
    config = config or get_grid_config()
    by_slot = group_bookings_by_slot(snapshot.bookings)

    rows = []
    for time_slot in config.time_slots:
        packed = pack_row(
            snapshot.resources,
            snapshot.is_available,
            by_slot.get(time_slot, []),
            time_slot,
            max_width=config.max_booking_width,
        )
        cells = packed.cells
        if config.fixed_columns is not None:
            cells = pad_row(cells, config.fixed_columns)

        rows.append(GridRow(
            time_slot=time_slot,
            cells=cells,
            capacity=count_capacity(snapshot.resources, snapshot.available, time_slot),
            free_columns=packed.free_columns,
            unplaced=packed.unplaced,
        ))

    return DayGrid(day=snapshot.day, resources=snapshot.resources, rows=tuple(rows))


def resolve_click(
    grid: DayGrid,
    time_slot: str,
    column: int,
) -> CreateBookingIntent | EditBookingIntent | None:
    """
    Map a click on (time_slot, column) to an intent.

    Raises:
        LookupError: unknown time slot or column out of range
    """
    row = grid.row(time_slot)
    if column < 0 or column >= len(row.cells):
        raise LookupError(f"Column {column} out of range for time slot {time_slot!r}")

    cell = row.cells[column]
    if cell.kind is CellKind.AVAILABLE:
        return CreateBookingIntent(
            day=grid.day,
            time_slot=time_slot,
            resource_id=cell.resource.id,
            max_people=row.free_columns,
        )
    if cell.kind is CellKind.BOOKING:
        return EditBookingIntent(booking_id=cell.booking.id)
    return None


def cell_color(cell: SlotCell) -> str | None:
    """Background color of a booking cell (tag color or default)."""
    if cell.kind is not CellKind.BOOKING:
        return None
    tag = cell.booking.tag
    return tag.color if tag else DEFAULT_BOOKING_COLOR
