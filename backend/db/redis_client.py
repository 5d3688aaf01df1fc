"""
db/redis_client.py
-------------------
redis-py client — singleton plus the per-tour save lock.

Key schema:

  savelock:{tour_id}
       Type : String (random owner token)
       TTL  : SAVE_LOCK_TTL (default 60 s)
       Set with NX while a travel-plan save for the tour is in flight, so
       two API workers never push the same tour's plan concurrently.

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
    SAVE_LOCK_TTL     default: 60
"""

from __future__ import annotations

import uuid
from typing import Any

import redis

import config

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


# ── Save lock ──────────────────────────────────────────────────────────────────

# Delete the key only if it still holds the caller's token.
_RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


def _lock_key(tour_id: str) -> str:
    return f"savelock:{tour_id}"


def acquire_save_lock(tour_id: str) -> str | None:
    """
    Take the tour's save lock.  Returns the owner token on success, None if a
    save is already in flight.
    """
    token = uuid.uuid4().hex
    if get_redis().set(_lock_key(tour_id), token, nx=True, ex=config.SAVE_LOCK_TTL):
        return token
    return None


def release_save_lock(tour_id: str, token: str) -> bool:
    """
    Release the lock if *token* still owns it.  False when the lock expired
    and was taken by another worker (that worker's lock is left alone).
    """
    return bool(get_redis().eval(_RELEASE_SCRIPT, 1, _lock_key(tour_id), token))


def is_save_locked(tour_id: str) -> bool:
    return bool(get_redis().exists(_lock_key(tour_id)))
