# backend/tandemboard/services/grid/config.py
"""
Daily grid configuration.
"""

from dataclasses import dataclass
from functools import lru_cache


TIME_SLOTS: tuple[str, ...] = (
    "7:30", "8:30", "9:45", "11:00", "12:30", "14:00", "15:30", "16:45",
)

COLUMN_ORDERS = ("first_seen", "display_name")

DEFAULT_BOOKING_COLOR = "#94a3b8"


@dataclass(frozen=True)
class GridConfig:
    """
    Configuration for the daily scheduling grid.

    Attributes:
        time_slots: Fixed take-off times, in display order
        column_order: How pilot columns are ordered ("first_seen" / "display_name")
        max_booking_width: Clamp for a booking's column span (None = no clamp)
        fixed_columns: Pad every row with empty cells up to this count (None = no padding)
        snapshot_ttl_seconds: Redis TTL for cached per-date query results
    """
    time_slots: tuple[str, ...] = TIME_SLOTS
    column_order: str = "first_seen"
    max_booking_width: int | None = None
    fixed_columns: int | None = None
    snapshot_ttl_seconds: int = 3600

    def __post_init__(self):
        """Validate configuration."""
        if self.column_order not in COLUMN_ORDERS:
            raise ValueError(f"column_order must be one of {COLUMN_ORDERS}, got {self.column_order!r}")
        if self.max_booking_width is not None and self.max_booking_width < 1:
            raise ValueError(f"max_booking_width must be >= 1, got {self.max_booking_width}")
        if self.fixed_columns is not None and self.fixed_columns < 0:
            raise ValueError(f"fixed_columns must be >= 0, got {self.fixed_columns}")
        if len(set(self.time_slots)) != len(self.time_slots):
            raise ValueError("time_slots must be unique")

    @property
    def slots_per_day(self) -> int:
        return len(self.time_slots)


@lru_cache
def get_grid_config() -> GridConfig:
    """Get grid configuration (singleton), built from application settings."""
    from ...config import settings

    return GridConfig(
        column_order=settings.grid_column_order,
        max_booking_width=settings.grid_max_booking_width,
        fixed_columns=settings.grid_fixed_columns,
        snapshot_ttl_seconds=settings.snapshot_ttl_seconds,
    )
