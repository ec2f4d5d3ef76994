# backend/tandemboard/services/grid/__init__.py
"""
Daily scheduling grid.

Rows: fixed take-off time slots
Columns: pilots with any availability that day
Cells: packed per row by first-fit over available columns
"""

from .config import GridConfig, TIME_SLOTS, get_grid_config
from .packer import PackedRow, pack_row, pad_row
from .renderer import (
    CreateBookingIntent,
    DayGrid,
    EditBookingIntent,
    GridRow,
    build_day_grid,
    resolve_click,
)
from .snapshot_cache import SnapshotRedisStore
from .loader import load_day_snapshot

__all__ = [
    "GridConfig",
    "TIME_SLOTS",
    "get_grid_config",
    "PackedRow",
    "pack_row",
    "pad_row",
    "CreateBookingIntent",
    "DayGrid",
    "EditBookingIntent",
    "GridRow",
    "build_day_grid",
    "resolve_click",
    "SnapshotRedisStore",
    "load_day_snapshot",
]
