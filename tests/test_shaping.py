"""Tests for column/row shaping and the fetch-boundary mapper."""

from __future__ import annotations

import pytest

from conftest import DAY, NEXT_DAY, A, B, C, availability_row, booking_row, make_booking
from tandemboard.services.errors import FetchError, SnapshotMappingError
from tandemboard.services.grid.mapper import build_snapshot
from tandemboard.services.grid.shaping import (
    count_capacity,
    derive_resources,
    group_bookings_by_slot,
)


class TestDeriveResources:

    def test_first_seen_order_kept(self):
        listing = [(3, "Carla"), (1, "Ana"), (3, "Carla"), (2, "Bea"), (1, "Ana")]
        resources = derive_resources(listing)
        assert [r.id for r in resources] == [3, 1, 2]

    def test_display_name_order(self):
        listing = [(3, "carla"), (1, "Bea"), (2, "ana")]
        resources = derive_resources(listing, order="display_name")
        assert [r.display_name for r in resources] == ["ana", "Bea", "carla"]

    def test_unknown_order_rejected(self):
        with pytest.raises(ValueError):
            derive_resources([(1, "A")], order="random")


class TestGrouping:

    def test_grouped_by_slot_in_creation_order(self):
        late = make_booking(1, created_at="2026-10-02 08:00:00.000000", time_slot="9:45")
        early = make_booking(2, created_at="2026-10-01 08:00:00.000000", time_slot="9:45")
        other = make_booking(3, time_slot="14:00")

        grouped = group_bookings_by_slot([late, other, early])

        assert list(grouped["9:45"]) == [early, late]
        assert grouped["14:00"] == [other]

    def test_same_created_at_tie_broken_by_id(self):
        b5 = make_booking(5, created_at="2026-10-01 08:00:00")
        b2 = make_booking(2, created_at="2026-10-01 08:00:00")
        assert group_bookings_by_slot([b5, b2])["9:45"] == [b2, b5]

    def test_capacity(self):
        available = frozenset({(A.id, "9:45"), (C.id, "9:45"), (B.id, "11:00")})
        assert count_capacity((A, B, C), available, "9:45") == 2
        assert count_capacity((A, B, C), available, "11:00") == 1
        assert count_capacity((A, B, C), available, "7:30") == 0


class TestMapper:

    def test_resources_cover_whole_day(self):
        rows = [availability_row(2, "7:30", "B"), availability_row(1, "16:45", "A")]
        snapshot = build_snapshot(DAY, rows, [])

        assert [r.display_name for r in snapshot.resources] == ["B", "A"]
        assert snapshot.is_available(2, "7:30")
        assert not snapshot.is_available(2, "16:45")

    def test_bookings_sorted_and_tag_fields_kept(self):
        rows = [
            booking_row(2, created_at="2026-10-01 10:00:00.000000", tag_color="#ff0000", tag_name="Paid"),
            booking_row(1, created_at="2026-10-01 11:00:00.000000"),
        ]
        snapshot = build_snapshot(DAY, [], rows)

        assert [b.id for b in snapshot.bookings] == [2, 1]
        assert snapshot.bookings[0].tag_color == "#ff0000"
        assert snapshot.bookings[0].booking_date == DAY

    def test_blank_contact_fields_become_none(self):
        snapshot = build_snapshot(DAY, [], [booking_row(1, phone="  ", email="")])
        assert snapshot.bookings[0].phone is None
        assert snapshot.bookings[0].email is None

    def test_missing_display_name_gets_placeholder(self):
        row = availability_row(7, "9:45")
        row["resource_display_name"] = None
        snapshot = build_snapshot(DAY, [row], [])
        assert snapshot.resources[0].display_name == "Pilot 7"

    def test_malformed_row_raises(self):
        bad = booking_row(1)
        del bad["number_of_people"]
        with pytest.raises(SnapshotMappingError):
            build_snapshot(DAY, [], [bad])

    def test_row_from_other_day_raises(self):
        with pytest.raises(SnapshotMappingError):
            build_snapshot(DAY, [availability_row(1, "9:45", day=NEXT_DAY)], [])

    def test_mapping_error_is_fetch_error(self):
        assert issubclass(SnapshotMappingError, FetchError)
