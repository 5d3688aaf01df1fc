"""
modules/planning/plan_store.py
-------------------------------
Persistence collaborator for travel plans.

Contract (TravelPlanStore):
  save_travel_plan(tour_id, segments)  — full overwrite; raises on failure
  load_travel_plan(tour_id)            — last saved list, or None
  load_tour(tour_id)                   — settings + dates, or None

Backends (config.PLAN_STORE_BACKEND):
  "in_memory" → InMemoryTravelPlanStore (process-local dict)
  "postgres"  → db.travel_plan_store.PostgresTravelPlanStore
"""

from __future__ import annotations

import copy
import threading
from typing import Optional, Protocol

import config
from schemas.travel import TourContext, TravelSegment


class TravelPlanStore(Protocol):
    def save_travel_plan(self, tour_id: str, segments: list[TravelSegment]) -> None: ...

    def load_travel_plan(self, tour_id: str) -> Optional[list[TravelSegment]]: ...

    def load_tour(self, tour_id: str) -> Optional[TourContext]: ...


class InMemoryTravelPlanStore:
    """Thread-safe dict-backed store.  Saved plans are deep-copied."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._plans: dict[str, list[TravelSegment]] = {}
        self._tours: dict[str, TourContext] = {}

    def register_tour(self, context: TourContext) -> None:
        with self._lock:
            self._tours[context.tour_id] = context

    def load_tour(self, tour_id: str) -> Optional[TourContext]:
        with self._lock:
            return self._tours.get(tour_id)

    def save_travel_plan(self, tour_id: str, segments: list[TravelSegment]) -> None:
        snapshot = copy.deepcopy(list(segments))
        with self._lock:
            self._plans[tour_id] = snapshot

    def load_travel_plan(self, tour_id: str) -> Optional[list[TravelSegment]]:
        with self._lock:
            plan = self._plans.get(tour_id)
        return copy.deepcopy(plan) if plan is not None else None


def build_plan_store(backend: str | None = None) -> TravelPlanStore:
    """Instantiate the store selected by *backend* (default: config)."""
    backend = backend or config.PLAN_STORE_BACKEND
    if backend == "in_memory":
        return InMemoryTravelPlanStore()
    if backend == "postgres":
        from db.travel_plan_store import PostgresTravelPlanStore
        return PostgresTravelPlanStore()
    raise ValueError(f"unknown PLAN_STORE_BACKEND {backend!r}")
