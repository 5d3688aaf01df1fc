"""
api/routes/travel_plan.py
--------------------------
Travel-plan endpoints for one tour.

Flow:
  1. POST  /v1/tours/{tour_id}/travel-plan/open      → load tour + persisted plan
     or
     POST  /v1/tours/{tour_id}/travel-plan/generate  → plan from the request body
  2. PATCH /v1/tours/{tour_id}/travel-plan/segments/{segment_id}  → edit a field
  3. POST  /v1/tours/{tour_id}/travel-plan/save      → full overwrite in the store
  4. GET   /v1/tours/{tour_id}/travel-plan           → current plan + summary

Sessions live in-process, one per tour; opening or generating again replaces
the tour's session.
"""

from __future__ import annotations

from datetime import date as date_type
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from schemas.travel import HomeBase, LocationSnapshot, TimeOfDay, TourDate, TourSettings
from modules.planning import (
    ConfigurationError,
    EditNotAllowedError,
    InvalidSegmentFieldError,
    PersistenceError,
    SaveInProgressError,
    TravelPlanSession,
)
from modules.planning.plan_store import TravelPlanStore, build_plan_store

router = APIRouter()

# key: tour_id  value: TravelPlanSession
_sessions: dict[str, TravelPlanSession] = {}
_plan_store: TravelPlanStore | None = None


def get_plan_store() -> TravelPlanStore:
    global _plan_store
    if _plan_store is None:
        _plan_store = build_plan_store()
    return _plan_store


def reset_state(plan_store: TravelPlanStore | None = None) -> None:
    """Drop all sessions and swap the plan store (used by tests and shutdown)."""
    global _plan_store
    for session in _sessions.values():
        session.close()
    _sessions.clear()
    _plan_store = plan_store


# ── Request schemas ────────────────────────────────────────────────────────────

class HomeBaseIn(BaseModel):
    name: str = ""
    address: str = ""
    latitude: float
    longitude: float


class LocationIn(BaseModel):
    name: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class TourDateIn(BaseModel):
    id: str
    date: date_type
    location: Optional[LocationIn] = None


class GenerateRequest(BaseModel):
    home_base: Optional[HomeBaseIn] = None
    tour_dates: list[TourDateIn] = Field(default_factory=list)
    default_departure_time: Optional[str] = Field(None, description="HH:mm")
    default_return_time:    Optional[str] = Field(None, description="HH:mm")
    can_edit: bool = False


class OpenRequest(BaseModel):
    can_edit: bool = False


class SegmentUpdateRequest(BaseModel):
    field: str
    value: Any = None


# ── Converters / serialisers ───────────────────────────────────────────────────

def _tour_date(d: TourDateIn) -> TourDate:
    location = None
    if d.location and d.location.latitude is not None and d.location.longitude is not None:
        location = LocationSnapshot(d.location.name, d.location.latitude, d.location.longitude)
    return TourDate(id=d.id, date=d.date, location=location)


def _settings(req: GenerateRequest) -> TourSettings:
    home_base = None
    if req.home_base is not None:
        home_base = HomeBase(**req.home_base.model_dump())
    try:
        return TourSettings(
            home_base=home_base,
            default_departure_time=TimeOfDay.coerce(req.default_departure_time),
            default_return_time=TimeOfDay.coerce(req.default_return_time),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _ser_session(session: TravelPlanSession) -> dict:
    return {
        "tour_id":   session.tour_id,
        "state":     session.state.value,
        "can_edit":  session.can_edit,
        "is_saving": session.is_saving,
        "save_locked": session.save_locked,
        "is_dirty":  session.store.is_dirty,
        "summary":   session.summaries().to_dict(),
        "segments":  [s.to_dict() for s in session.segments],
        "warnings": [
            {
                "date_id": w.date_id,
                "date":    w.date.isoformat(),
                "reason":  w.reason,
                "detail":  w.detail,
            }
            for w in session.warnings
        ],
    }


def _install(tour_id: str, session: TravelPlanSession) -> None:
    previous = _sessions.get(tour_id)
    if previous is not None:
        previous.close()
    _sessions[tour_id] = session


def get_session(tour_id: str) -> TravelPlanSession:
    """Retrieve the tour's session or raise 404."""
    session = _sessions.get(tour_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail=f"No travel plan session for tour '{tour_id}'. Call open or generate first.",
        )
    return session


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/{tour_id}/travel-plan/open", summary="Open the tour's travel planner")
def open_travel_plan(tour_id: str, req: OpenRequest) -> dict:
    store = get_plan_store()
    context = store.load_tour(tour_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Tour '{tour_id}' not found.")
    session = TravelPlanSession.from_context(context, store, can_edit=req.can_edit)
    try:
        session.open()
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    _install(tour_id, session)
    return _ser_session(session)


@router.post("/{tour_id}/travel-plan/generate", summary="Regenerate the travel plan")
def generate(tour_id: str, req: GenerateRequest) -> dict:
    session = TravelPlanSession(
        tour_id=tour_id,
        settings=_settings(req),
        tour_dates=[_tour_date(d) for d in req.tour_dates],
        plan_store=get_plan_store(),
        can_edit=req.can_edit,
    )
    try:
        session.regenerate()
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    _install(tour_id, session)
    return _ser_session(session)


@router.get("/{tour_id}/travel-plan", summary="Current travel plan")
def get_travel_plan(tour_id: str) -> dict:
    return _ser_session(get_session(tour_id))


@router.patch("/{tour_id}/travel-plan/segments/{segment_id}", summary="Edit one segment field")
def update_segment(tour_id: str, segment_id: str, req: SegmentUpdateRequest) -> dict:
    session = get_session(tour_id)
    try:
        updated = session.update_field(segment_id, req.field, req.value)
    except EditNotAllowedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except InvalidSegmentFieldError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    segment = session.store.get(segment_id)
    return {
        "updated": updated,
        "segment": segment.to_dict() if segment else None,
        "summary": session.summaries().to_dict(),
    }


@router.post("/{tour_id}/travel-plan/save", summary="Persist the travel plan")
async def save(tour_id: str) -> dict:
    session = get_session(tour_id)
    try:
        await session.save()
    except EditNotAllowedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except SaveInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"saved": True, "segment_count": len(session.segments)}
