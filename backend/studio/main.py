# backend/studio/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from redis import RedisError

from .config import get_settings
from .database import init_db
from .errors import DiscountCodeError, StudioError
from .redis_client import get_redis
from .routers import (
    date_overrides,
    discount_codes,
    occupied_slots,
    pricing,
    reservations,
    slots,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Studio Booking API started")
    yield


app = FastAPI(title="Studio Booking API", lifespan=lifespan)

app.include_router(pricing.router)
app.include_router(slots.router)
app.include_router(reservations.router)
app.include_router(date_overrides.router)
app.include_router(occupied_slots.router)
app.include_router(discount_codes.router)


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    """Engine input errors → 400 (unknown discount code → 404)."""
    content = {"detail": str(exc), "error": type(exc).__name__}
    status_code = status.HTTP_400_BAD_REQUEST

    if isinstance(exc, DiscountCodeError):
        content["reason"] = exc.reason
        if exc.reason == "not_found":
            status_code = status.HTTP_404_NOT_FOUND

    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content=content)


@app.get("/health")
def health():
    redis = get_redis()
    if redis is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis.ping()}
    except RedisError as e:
        logger.error(f"Redis ping failed: {e}")
        return {"status": "degraded", "redis": False}
