# backend/tandemboard/routers/changes.py
"""
Realtime change feed for UI clients.

WS /ws/changes?date=YYYY-MM-DD → one JSON ChangeEvent per message.
On every message the client marks its grid for that date stale and refetches.

The feed ends as soon as the client disconnects: a receive loop watches the
socket while events are forwarded, and whichever finishes first cancels the
other, closing the pub/sub subscription.
"""

import asyncio
import logging
from contextlib import aclosing
from datetime import date
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from ..redis_client import get_async_redis
from ..services.changes import subscribe

logger = logging.getLogger(__name__)

router = APIRouter(tags=["changes"])


async def _forward_events(websocket: WebSocket, redis: aioredis.Redis, scope: Optional[date]) -> None:
    async with aclosing(subscribe(redis, scope)) as events:
        async for event in events:
            await websocket.send_text(event.to_json())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/ws/changes")
async def changes_feed(
    websocket: WebSocket,
    target_date: Optional[date] = Query(None, alias="date"),
    redis: aioredis.Redis = Depends(get_async_redis),
):
    await websocket.accept()
    logger.info(f"Change feed opened (scope={target_date})")

    forwarder = asyncio.create_task(_forward_events(websocket, redis, target_date))
    watcher = asyncio.create_task(_wait_for_disconnect(websocket))
    done, pending = await asyncio.wait({forwarder, watcher}, return_when=asyncio.FIRST_COMPLETED)

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    if forwarder in done and forwarder.exception() is not None:
        logger.error(f"Change feed failed (scope={target_date}): {forwarder.exception()!r}")
        if watcher not in done:
            await websocket.close(code=1011)
    logger.info(f"Change feed closed (scope={target_date})")
