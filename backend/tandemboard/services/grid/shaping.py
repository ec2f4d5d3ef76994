# backend/tandemboard/services/grid/shaping.py
"""
Row/column data shaping for the daily grid.

Columns: distinct pilots with any availability that day.
Rows: bookings grouped by time slot, each group in creation order.
"""

from collections.abc import Iterable

from .types import AvailabilityMark, Booking, Resource


def derive_resources(
    listing: Iterable[tuple[int, str]],
    order: str = "first_seen",
) -> tuple[Resource, ...]:
    """
    Derive the day's column list from the availability listing.

    Args:
        listing: (resource_id, display_name) pairs in listing order
        order: "first_seen" keeps first appearance in the listing,
               "display_name" sorts by name (then id)

    Returns:
        Distinct resources in column order
    """
    seen: dict[int, Resource] = {}
    for resource_id, display_name in listing:
        if resource_id not in seen:
            seen[resource_id] = Resource(id=resource_id, display_name=display_name)

    resources = list(seen.values())
    if order == "display_name":
        resources.sort(key=lambda r: (r.display_name.casefold(), r.id))
    elif order != "first_seen":
        raise ValueError(f"Unknown column order: {order!r}")

    return tuple(resources)


def available_set(marks: Iterable[AvailabilityMark]) -> frozenset[tuple[int, str]]:
    """(resource_id, time_slot) pairs that are marked available."""
    return frozenset((m.resource_id, m.time_slot) for m in marks)


def group_bookings_by_slot(bookings: Iterable[Booking]) -> dict[str, list[Booking]]:
    """Bookings keyed by time slot; each list sorted by (created_at, id)."""
    grouped: dict[str, list[Booking]] = {}
    for booking in sorted(bookings, key=lambda b: b.sort_key):
        grouped.setdefault(booking.time_slot, []).append(booking)
    return grouped


def count_capacity(
    resources: Iterable[Resource],
    available: frozenset[tuple[int, str]],
    time_slot: str,
) -> int:
    """Number of columns available at a time slot before any booking is placed."""
    return sum(1 for r in resources if (r.id, time_slot) in available)
