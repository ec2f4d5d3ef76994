"""
backend/tandemboard/services/changes.py

Change notifications: every committed write to bookings or availability is
published on the Redis pub/sub channel `changes` as a ChangeEvent.

Consumers:
- invalidation_consumer_loop: marks the per-date grid cache stale
  (covers writes made by other app instances)
- /ws/changes: forwards events to UI clients, which refetch their date

Publishing never fails the write that triggered it: the writer already
invalidated its own dates directly.
"""

import asyncio
import json
import logging
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import date

import redis.asyncio as aioredis
from redis import Redis
from redis.exceptions import RedisError

from .grid.snapshot_cache import SnapshotRedisStore

logger = logging.getLogger(__name__)

CHANGES_CHANNEL = "changes"
RETRY_DELAY = 2.0  # seconds


@dataclass(frozen=True)
class ChangeEvent:
    table: str          # "bookings" | "pilot_availability"
    action: str         # "insert" | "update" | "delete"
    dates: tuple[date, ...]
    ts: int = field(default_factory=lambda: int(time.time()))

    def to_json(self) -> str:
        return json.dumps({
            "table": self.table,
            "action": self.action,
            "dates": [d.isoformat() for d in self.dates],
            "ts": self.ts,
        })

    @classmethod
    def from_json(cls, raw: str) -> "ChangeEvent":
        data = json.loads(raw)
        return cls(
            table=data["table"],
            action=data["action"],
            dates=tuple(date.fromisoformat(d) for d in data.get("dates", [])),
            ts=int(data.get("ts", 0)),
        )

    def touches(self, day: date) -> bool:
        return day in self.dates


def publish_change(redis: Redis, event: ChangeEvent) -> None:
    """Publish a change event. Failures are logged, not raised."""
    try:
        redis.publish(CHANGES_CHANNEL, event.to_json())
        logger.info(f"Change published: {event.table}/{event.action} → {CHANGES_CHANNEL}")
    except RedisError as e:
        logger.error(f"Failed to publish change {event.table}/{event.action}: {e}")


def apply_change_event(store: SnapshotRedisStore, event: ChangeEvent) -> int:
    """Mark the cached grid rows of every affected date stale."""
    if not event.dates:
        return 0
    return store.invalidate(list(event.dates))


async def subscribe(redis: aioredis.Redis, scope: date | None = None) -> AsyncIterator[ChangeEvent]:
    """
    Async iterator of change events, optionally filtered to one date.

    Malformed messages are logged and skipped. Close it with aclosing()
    so the pub/sub connection is released as soon as the caller stops.
    """
    pubsub = redis.pubsub()
    await pubsub.subscribe(CHANGES_CHANNEL)
    try:
        while True:
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=5.0)
            if message is None:
                continue
            try:
                event = ChangeEvent.from_json(message["data"])
            except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                logger.error(f"Invalid change event: {str(message.get('data'))[:200]}")
                continue
            if scope is None or event.touches(scope):
                yield event
    finally:
        await pubsub.unsubscribe(CHANGES_CHANNEL)
        await pubsub.aclose()


async def consume_changes(
    redis: aioredis.Redis,
    store: SnapshotRedisStore,
    retry_delay: float = RETRY_DELAY,
) -> None:
    """Invalidate cached grid rows for every change event, resubscribing after errors."""
    while True:
        try:
            async with aclosing(subscribe(redis)) as events:
                async for event in events:
                    deleted = await asyncio.to_thread(apply_change_event, store, event)
                    logger.debug(f"Invalidated {deleted} key(s) for {event.table}/{event.action}")

        except asyncio.CancelledError:
            logger.info("invalidation_consumer_loop cancelled")
            raise
        except Exception:
            logger.exception(f"invalidation_consumer_loop error, retrying in {retry_delay}s")
            await asyncio.sleep(retry_delay)


async def invalidation_consumer_loop(redis_url: str) -> None:
    """
    Invalidate cached grid rows for every change event.

    Started as asyncio task in app lifespan.
    """
    r = aioredis.from_url(redis_url, decode_responses=True)
    store = SnapshotRedisStore(Redis.from_url(redis_url, decode_responses=True))
    logger.info("invalidation_consumer_loop started")

    try:
        await consume_changes(r, store)
    finally:
        await r.aclose()
