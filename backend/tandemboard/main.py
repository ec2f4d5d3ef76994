import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db, init_db
from .middleware.audit import audit_middleware
from .redis_client import async_redis_client, get_redis
from .routers import availability, bookings, changes, grid, pilots, tags
from .services.changes import invalidation_consumer_loop
from .services.errors import BoardError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    consumer = None
    if settings.realtime_enabled:
        consumer = asyncio.create_task(invalidation_consumer_loop(settings.redis_url))

    yield

    if consumer is not None:
        consumer.cancel()
        try:
            await consumer
        except asyncio.CancelledError:
            pass

    await async_redis_client.aclose()


app = FastAPI(title="Tandem Board API", lifespan=lifespan)

app.middleware("http")(audit_middleware)

app.include_router(grid.router)
app.include_router(bookings.router)
app.include_router(availability.router)
app.include_router(tags.router)
app.include_router(pilots.router)
app.include_router(changes.router)


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.get("/health")
def health(db: Session = Depends(get_db), redis: Redis = Depends(get_redis)):
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    try:
        redis_ok = bool(redis.ping())
    except RedisError:
        redis_ok = False
    return {"database": db_ok, "redis": redis_ok}
