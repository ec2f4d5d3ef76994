# backend/tandemboard/services/grid/snapshot_cache.py
"""
Redis cache of the raw per-date query results feeding the daily grid.

Key format: grid:day:{date} → JSON {"availability": [...], "bookings": [...]}
            grid:gen:{date} → integer generation, bumped on every invalidation

A fetch reads the generation before querying the store and writes back
only if the generation is unchanged (WATCH/MULTI). A fetch superseded by
an invalidation therefore never overwrites newer data.
"""

import json
import logging
from datetime import date

from redis import Redis
from redis.exceptions import WatchError

from .config import GridConfig, get_grid_config

logger = logging.getLogger(__name__)


class SnapshotRedisStore:
    """Redis storage wrapper for per-date grid query results."""

    KEY_PREFIX = "grid:day"
    GEN_PREFIX = "grid:gen"

    def __init__(self, redis: Redis, config: GridConfig | None = None):
        self.redis = redis
        self.config = config or get_grid_config()

    def _key(self, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{dt.isoformat()}"

    def _gen_key(self, dt: date) -> str:
        return f"{self.GEN_PREFIX}:{dt.isoformat()}"

    # ── Read ─────────────────────────────────────────────────────────────

    def generation(self, dt: date) -> int:
        raw = self.redis.get(self._gen_key(dt))
        return int(raw) if raw else 0

    def get(self, dt: date) -> dict | None:
        """
        Get cached rows for a date.

        Returns:
            {"availability": [...], "bookings": [...]} or None on cache miss.
        """
        raw = self.redis.get(self._key(dt))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON in grid cache: {self._key(dt)}")
            self.redis.delete(self._key(dt))
            return None

    # ── Write ────────────────────────────────────────────────────────────

    def put(self, dt: date, rows: dict, generation: int) -> bool:
        """
        Store rows fetched while `generation` was current.

        Returns:
            False when an invalidation happened in between (nothing stored).
        """
        key = self._key(dt)
        gen_key = self._gen_key(dt)
        payload = json.dumps(rows)

        with self.redis.pipeline() as pipe:
            try:
                pipe.watch(gen_key)
                raw = pipe.get(gen_key)
                current = int(raw) if raw else 0
                if current != generation:
                    pipe.unwatch()
                    logger.debug(f"Superseded fetch for {dt}: gen {generation} → {current}")
                    return False
                pipe.multi()
                pipe.setex(key, self.config.snapshot_ttl_seconds, payload)
                pipe.execute()
                return True
            except WatchError:
                logger.debug(f"Concurrent invalidation for {dt}, fetch result dropped")
                return False

    # ── Delete ───────────────────────────────────────────────────────────

    def invalidate(self, dates: list[date] | None = None) -> int:
        """
        Mark cached rows stale.

        Args:
            dates: Specific dates, or None for every cached date.

        Returns:
            Number of deleted cache keys.
        """
        if dates is not None:
            keys = [self._key(dt) for dt in dates]
            gen_keys = [self._gen_key(dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"))
            gen_keys = set(self.redis.scan_iter(match=f"{self.GEN_PREFIX}:*"))
            gen_keys |= {self.GEN_PREFIX + k[len(self.KEY_PREFIX):] for k in keys}

        if not keys and not gen_keys:
            return 0

        pipe = self.redis.pipeline()
        for gen_key in gen_keys:
            pipe.incr(gen_key)
        if keys:
            pipe.delete(*keys)
        results = pipe.execute()
        return results[-1] if keys else 0
