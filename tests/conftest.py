"""Shared test fixtures and record builders for tandem-board.

Reference day: Mon 2026-10-19.
Resources are named A, B, C, D with ids 1..4 in that column order.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REALTIME_ENABLED", "false")

from datetime import date

import fakeredis
from fakeredis import aioredis as fake_aioredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tandemboard.database import get_db
from tandemboard.main import app
from tandemboard.models.generated import Base, PilotAvailability, Pilots, Tags
from tandemboard.redis_client import get_async_redis, get_redis
from tandemboard.services.availability_cache import AvailabilityCache, get_availability_cache
from tandemboard.services.grid.config import GridConfig
from tandemboard.services.grid.types import Booking, DaySnapshot, Resource

# ---------------------------------------------------------------------------
# Reference constants
# ---------------------------------------------------------------------------
DAY = date(2026, 10, 19)
NEXT_DAY = date(2026, 10, 20)

A = Resource(1, "A")
B = Resource(2, "B")
C = Resource(3, "C")
D = Resource(4, "D")
ABCD = (A, B, C, D)


# ---------------------------------------------------------------------------
# Record builders (importable by test modules)
# ---------------------------------------------------------------------------
def make_booking(
    id: int,
    people: int = 1,
    created_at: str | None = None,
    time_slot: str = "9:45",
    day: date = DAY,
    **extra,
) -> Booking:
    """Booking with created_at derived from id unless given: t1 < t2 < ..."""
    return Booking(
        id=id,
        name=f"Booking {id}",
        pickup_location="Main square",
        number_of_people=people,
        booking_date=day,
        time_slot=time_slot,
        created_at=created_at or f"2026-10-01 09:00:{id:02d}.000000",
        **extra,
    )


def availability_fn(marks: set[tuple[int, str]]):
    """is_available callable over (resource_id, time_slot) pairs."""
    return lambda resource_id, time_slot: (resource_id, time_slot) in marks


def all_available(resources, time_slot: str) -> set[tuple[int, str]]:
    return {(r.id, time_slot) for r in resources}


def make_snapshot(resources, marks, bookings=(), day: date = DAY) -> DaySnapshot:
    return DaySnapshot(
        day=day,
        resources=tuple(resources),
        available=frozenset(marks),
        bookings=tuple(sorted(bookings, key=lambda b: b.sort_key)),
    )


def availability_row(resource_id: int, time_slot: str, name: str | None = None, day: date = DAY) -> dict:
    return {
        "resource_id": resource_id,
        "day": day.isoformat(),
        "time_slot": time_slot,
        "resource_display_name": name or f"Pilot {resource_id}",
    }


def booking_row(id: int, people: int = 1, time_slot: str = "9:45", day: date = DAY, **extra) -> dict:
    row = {
        "id": id,
        "name": f"Booking {id}",
        "pickup_location": "Main square",
        "number_of_people": people,
        "resource_id": None,
        "booking_date": day.isoformat(),
        "time_slot": time_slot,
        "tag_id": None,
        "created_at": f"2026-10-01 09:00:{id:02d}.000000",
        "tag_color": None,
        "tag_name": None,
        "phone": None,
        "email": None,
    }
    row.update(extra)
    return row


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def config() -> GridConfig:
    return GridConfig()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis_server():
    """One in-memory Redis shared by the sync and asyncio clients of a test."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis(redis_server):
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def async_redis_factory(redis_server):
    """Build asyncio clients inside the event loop that uses them."""
    return lambda: fake_aioredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def availability_cache() -> AvailabilityCache:
    return AvailabilityCache()


@pytest.fixture
def client(session_factory, redis, async_redis_factory, availability_cache):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis
    app.dependency_overrides[get_async_redis] = async_redis_factory
    app.dependency_overrides[get_availability_cache] = lambda: availability_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def pilots(db) -> list[Pilots]:
    """Four pilots A..D plus one staff member."""
    rows = [Pilots(display_name=name) for name in ("A", "B", "C", "D")]
    rows.append(Pilots(display_name="Office", role="staff"))
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@pytest.fixture
def tag(db) -> Tags:
    obj = Tags(name="Paid", color="#22c55e")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def add_marks(db, pilots_and_slots, day: date = DAY) -> None:
    """Insert availability marks in the given order."""
    for pilot, time_slot in pilots_and_slots:
        db.add(PilotAvailability(pilot_id=pilot.id, day=day.isoformat(), time_slot=time_slot))
    db.commit()
