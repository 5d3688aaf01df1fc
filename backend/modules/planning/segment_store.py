"""
modules/planning/segment_store.py
----------------------------------
SegmentStore — the in-memory, user-editable travel plan of one tour.

Plan states (every change is recorded in ``transitions``):

    EMPTY ──replace_all──▶ GENERATED | LOADED
    GENERATED | LOADED ──update_field──▶ USER_EDITED
    any ──replace_all(GENERATED)──▶ GENERATED      (regenerate discards edits)

update_field never recomputes distance_km / duration_minutes; those stay
the values fixed at generation time even when the transport type changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from schemas.travel import TimeOfDay, TransportType, TravelSegment
from modules.planning.errors import InvalidSegmentFieldError
from modules.tool_usage.distance_tool import round_half_up


class PlanState(Enum):
    EMPTY       = "empty"
    GENERATED   = "generated"
    LOADED      = "loaded"
    USER_EDITED = "user_edited"


# ── Field coercion ────────────────────────────────────────────────────────────

def _to_transport(value: Any) -> TransportType:
    return value if isinstance(value, TransportType) else TransportType(str(value))


def _to_time(value: Any) -> Optional[TimeOfDay]:
    return TimeOfDay.coerce(value)


def _to_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    return date.fromisoformat(text) if text else None


def _to_notes(value: Any) -> str:
    return "" if value is None else str(value)


def _to_non_negative_int(value: Any) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(f"{number} must be >= 0")
    return number


EDITABLE_FIELDS: dict[str, Callable[[Any], Any]] = {
    "transport_type":   _to_transport,
    "departure_date":   _to_date,
    "departure_time":   _to_time,
    "arrival_date":     _to_date,
    "arrival_time":     _to_time,
    "notes":            _to_notes,
    "distance_km":      _to_non_negative_int,
    "duration_minutes": _to_non_negative_int,
}


# ── Summary ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlanSummary:
    segment_count:          int
    total_distance_km:      int
    total_duration_minutes: int
    gap_return_count:       int

    @property
    def total_duration_hours(self) -> int:
        return round_half_up(self.total_duration_minutes / 60)

    @property
    def duration_label(self) -> str:
        hours, minutes = divmod(self.total_duration_minutes, 60)
        return f"{hours}h {minutes}m"

    def to_dict(self) -> dict:
        return {
            "segment_count":          self.segment_count,
            "total_distance_km":      self.total_distance_km,
            "total_duration_minutes": self.total_duration_minutes,
            "total_duration_hours":   self.total_duration_hours,
            "duration_label":         self.duration_label,
            "gap_return_count":       self.gap_return_count,
        }


# ── Store ─────────────────────────────────────────────────────────────────────

class SegmentStore:
    """Ordered, editable list of TravelSegment for a single tour."""

    def __init__(self) -> None:
        self._segments: list[TravelSegment] = []
        self.state: PlanState = PlanState.EMPTY
        self.transitions: list[tuple[PlanState, PlanState]] = []
        self.is_dirty: bool = False
        # Bumped by every successful edit or replacement.
        self.revision: int = 0

    # ── Read ──────────────────────────────────────────────────────────────────

    @property
    def segments(self) -> list[TravelSegment]:
        return list(self._segments)

    def get(self, segment_id: str) -> Optional[TravelSegment]:
        return next((s for s in self._segments if s.id == segment_id), None)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[TravelSegment]:
        return iter(list(self._segments))

    def summaries(self) -> PlanSummary:
        return PlanSummary(
            segment_count=len(self._segments),
            total_distance_km=sum(s.distance_km for s in self._segments),
            total_duration_minutes=sum(s.duration_minutes for s in self._segments),
            gap_return_count=sum(1 for s in self._segments if s.is_gap_return),
        )

    # ── Write ─────────────────────────────────────────────────────────────────

    def replace_all(
        self,
        segments: list[TravelSegment],
        origin: PlanState = PlanState.GENERATED,
    ) -> None:
        """Full replacement, no merge.  *origin* is GENERATED or LOADED."""
        if origin not in (PlanState.GENERATED, PlanState.LOADED):
            raise ValueError(f"replace_all origin must be GENERATED or LOADED, got {origin}")
        self._segments = list(segments)
        self.revision += 1
        self._transition(origin)
        # A freshly loaded plan matches what is persisted.
        self.is_dirty = origin is PlanState.GENERATED

    def update_field(self, segment_id: str, field_name: str, value: Any) -> bool:
        """
        Set one field on one segment.

        Returns False (and changes nothing) when *segment_id* is unknown.
        Raises InvalidSegmentFieldError for a non-editable field or a value
        that cannot be coerced.
        """
        segment = self.get(segment_id)
        if segment is None:
            return False

        coerce = EDITABLE_FIELDS.get(field_name)
        if coerce is None:
            raise InvalidSegmentFieldError(f"field {field_name!r} is not editable")

        try:
            coerced = coerce(value)
        except (TypeError, ValueError) as exc:
            raise InvalidSegmentFieldError(
                f"invalid value {value!r} for {field_name}: {exc}"
            ) from exc

        setattr(segment, field_name, coerced)
        self.is_dirty = True
        self.revision += 1
        if self.state is not PlanState.USER_EDITED:
            self._transition(PlanState.USER_EDITED)
        return True

    def mark_saved(self, revision: int | None = None) -> bool:
        """
        Clear ``is_dirty``.  With *revision*, only when no edit or replacement
        happened since that revision was read; returns whether it was cleared.
        """
        if revision is not None and revision != self.revision:
            return False
        self.is_dirty = False
        return True

    # ── Internals ─────────────────────────────────────────────────────────────

    def _transition(self, new_state: PlanState) -> None:
        self.transitions.append((self.state, new_state))
        self.state = new_state
