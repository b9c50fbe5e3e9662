"""
Hybrid in-memory + Redis rate limiting utilities
Counters live in memory and are periodically synced to Redis when configured
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request

from .config import RATE_LIMIT_ENABLED, REDIS_URL

logger = logging.getLogger(__name__)

REDIS_SYNC_SECONDS = 10
PURGE_INTERVAL_SECONDS = 60

redis_client: Optional[redis.Redis] = None
_redis_initialized = False

# key -> {"count", "reset_time", "last_redis_sync"}, all ints
counters: dict[str, dict] = {}
counters_lock = Lock()
_last_purge = 0


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create Redis client.
    Returns None when Redis is not configured or unreachable (memory-only mode).
    """
    global redis_client, _redis_initialized

    if _redis_initialized:
        return redis_client
    _redis_initialized = True

    if not REDIS_URL:
        logger.info("ℹ️ REDIS_URL not set - rate limiting runs in memory-only mode")
        return None

    # Mask password in URL for logging
    if "@" in REDIS_URL:
        url_parts = REDIS_URL.split("@")
        protocol = url_parts[0].split(":")[0]
        masked_url = f"{protocol}:****@{url_parts[1]}"
    else:
        masked_url = "****"
    logger.info(f"📡 Using Redis URL connection: {masked_url}")

    try:
        client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        client.ping()
        redis_client = client
        logger.info("Redis connected successfully via URL")
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis via URL: {str(e)}")
        logger.warning("⚠️ Rate limiting falls back to memory-only mode")
        redis_client = None

    return redis_client


def reset_rate_limits():
    """Drop all in-memory counters"""
    global _last_purge
    with counters_lock:
        counters.clear()
    _last_purge = 0


def _purge_expired_counters(now: int) -> None:
    global _last_purge
    if now - _last_purge < PURGE_INTERVAL_SECONDS:
        return

    with counters_lock:
        stale = [key for key, entry in counters.items() if now >= entry["reset_time"]]
        for key in stale:
            del counters[key]
    _last_purge = now

    if stale:
        logger.debug(f"🧹 Dropped {len(stale)} expired rate limit counters")


def _new_entry(client: Optional[redis.Redis], key: str, current_time: int, window_seconds: int) -> dict:
    if client is not None:
        try:
            redis_count = client.get(key)
            redis_ttl = client.ttl(key)
            if redis_count and redis_ttl > 0:
                return {
                    "count": int(redis_count),
                    "reset_time": current_time + redis_ttl,
                    "last_redis_sync": current_time,
                }
        except Exception as e:
            logger.warning(f"⚠️ Failed to load from Redis, using memory only: {e}")

    return {
        "count": 0,
        "reset_time": current_time + window_seconds,
        "last_redis_sync": current_time,
    }


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis] = None
) -> tuple[bool, int, int]:
    """Check if rate limit is exceeded

    Args:
        key: Cache key for this rate limit
        limit: Maximum number of requests allowed
        window_seconds: Time window in seconds
        client: Redis client instance, None for memory-only

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_time = int(time.time())

    _purge_expired_counters(current_time)

    with counters_lock:
        if key not in counters:
            counters[key] = _new_entry(client, key, current_time, window_seconds)

        entry = counters[key]

        if current_time >= entry["reset_time"]:
            entry["count"] = 0
            entry["reset_time"] = current_time + window_seconds
            entry["last_redis_sync"] = 0

        current_count = entry["count"]
        is_allowed = current_count < limit

        if is_allowed:
            entry["count"] += 1

        since_sync = current_time - entry.get("last_redis_sync", 0)
        if client is not None and since_sync >= REDIS_SYNC_SECONDS:
            try:
                client.set(key, entry["count"], ex=window_seconds)
                entry["last_redis_sync"] = current_time
                logger.debug(f"📡 Synced {key} to Redis: {entry['count']}/{limit}")
            except Exception as e:
                logger.warning(f"⚠️ Failed to sync to Redis: {e}")

        ttl = entry["reset_time"] - current_time
        return is_allowed, entry["count"], max(0, ttl)


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
):
    """
    FastAPI dependency for per-IP rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
        key_prefix: Prefix for the cache key
    """
    if not RATE_LIMIT_ENABLED:
        return

    client_ip = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()

    key = f"{key_prefix}:{client_ip}"
    is_allowed, current_count, ttl = check_rate_limit(
        key, limit, window_seconds, get_redis_client()
    )

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Maximum {limit} requests per {window_seconds} seconds.",
            headers={"Retry-After": str(ttl)},
        )


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        login_rate_limit = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

        @router.post("/login")
        async def login(data: LoginRequest, _: None = Depends(login_rate_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix)

    return rate_limiter
