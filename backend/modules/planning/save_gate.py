"""
modules/planning/save_gate.py
------------------------------
Per-tour "save in flight" flag.  A simple mutual-exclusion gate, not a
queue: a second save attempt while one is running is refused, never waited on.

Backends (config.SAVE_GATE_BACKEND):
  "in_memory" → InMemorySaveGate (one process)
  "redis"     → RedisSaveGate    (shared across API workers, SET NX + TTL)
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

import config

logger = logging.getLogger(__name__)


class SaveGate(Protocol):
    def acquire(self, tour_id: str) -> bool: ...

    def release(self, tour_id: str) -> None: ...

    def is_locked(self, tour_id: str) -> bool: ...


class InMemorySaveGate:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def acquire(self, tour_id: str) -> bool:
        with self._lock:
            if tour_id in self._in_flight:
                return False
            self._in_flight.add(tour_id)
            return True

    def release(self, tour_id: str) -> None:
        with self._lock:
            self._in_flight.discard(tour_id)

    def is_locked(self, tour_id: str) -> bool:
        with self._lock:
            return tour_id in self._in_flight


class RedisSaveGate:
    """
    Cross-worker gate.  Each acquire stores a fresh owner token; release only
    deletes the key while it still holds that token, so a lock that expired
    and was re-taken by another worker is never removed by this one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[str, str] = {}  # tour_id -> owner token

    def acquire(self, tour_id: str) -> bool:
        from db.redis_client import acquire_save_lock
        token = acquire_save_lock(tour_id)
        if token is None:
            return False
        with self._lock:
            self._tokens[tour_id] = token
        return True

    def release(self, tour_id: str) -> None:
        from db.redis_client import release_save_lock
        with self._lock:
            token = self._tokens.pop(tour_id, None)
        if token is None:
            return
        if not release_save_lock(tour_id, token):
            logger.warning("save lock for tour %s expired before release", tour_id)

    def is_locked(self, tour_id: str) -> bool:
        from db.redis_client import is_save_locked
        return is_save_locked(tour_id)


_default_gate: SaveGate | None = None


def get_save_gate() -> SaveGate:
    """Process-wide gate for config.SAVE_GATE_BACKEND, created on first call."""
    global _default_gate
    if _default_gate is None:
        if config.SAVE_GATE_BACKEND == "redis":
            _default_gate = RedisSaveGate()
        elif config.SAVE_GATE_BACKEND == "in_memory":
            _default_gate = InMemorySaveGate()
        else:
            raise ValueError(f"unknown SAVE_GATE_BACKEND {config.SAVE_GATE_BACKEND!r}")
    return _default_gate
