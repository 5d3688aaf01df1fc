"""
schemas/travel.py
-----------------
Dataclass definitions for tour travel planning.

  HomeBase        — the tour's fixed logistics origin/destination
  TourDate        — one show date, optionally geolocated
  TourSettings    — home base + default departure/return times for a tour
  TravelSegment   — one leg of the travel plan (the unit the user edits)

Times of day are TimeOfDay values, never raw strings; the JSON form of a
segment (to_dict / from_dict) is what gets persisted in tours.travel_plan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


# ── Enums ─────────────────────────────────────────────────────────────────────

class SegmentType(str, Enum):
    HOME_TO_VENUE  = "home_to_venue"
    VENUE_TO_HOME  = "venue_to_home"
    VENUE_TO_VENUE = "venue_to_venue"


class EndpointType(str, Enum):
    HOME  = "home"
    VENUE = "venue"


class TransportType(str, Enum):
    BUS      = "bus"
    VAN      = "van"
    PERSONAL = "personal"
    PLANE    = "plane"
    TRAIN    = "train"


# ── Time of day ───────────────────────────────────────────────────────────────

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time with minute precision, rendered as ``HH:mm``."""
    hour:   int
    minute: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise ValueError(f"invalid time of day {self.hour:02d}:{self.minute:02d}")

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """
        Parse ``H:mm`` / ``HH:mm``.  A trailing ``:ss`` part (as rendered by
        Postgres ``time`` columns) is accepted and dropped.
        """
        match = _TIME_RE.match(str(text).strip())
        if not match:
            raise ValueError(f"invalid time of day {text!r}; expected HH:mm")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def coerce(cls, value: "TimeOfDay | str | None") -> Optional["TimeOfDay"]:
        """None / empty string → None; strings are parsed."""
        if value is None or isinstance(value, TimeOfDay):
            return value
        if not str(value).strip():
            return None
        return cls.parse(value)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


# ── Places ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LocationSnapshot:
    """Name + coordinates copied onto a segment at generation time."""
    name:      str
    latitude:  float
    longitude: float

    def to_dict(self) -> dict:
        return {"name": self.name, "latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationSnapshot":
        return cls(
            name=data.get("name") or "",
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
        )


@dataclass(frozen=True)
class HomeBase:
    name:      str
    address:   str
    latitude:  float
    longitude: float

    def snapshot(self) -> LocationSnapshot:
        return LocationSnapshot(
            name=self.name or "Base",
            latitude=self.latitude,
            longitude=self.longitude,
        )


@dataclass(frozen=True)
class TourDate:
    id:       str
    date:     date
    location: Optional[LocationSnapshot] = None


@dataclass(frozen=True)
class TourSettings:
    """
    Per-tour travel settings.

    Mirrors the ``tours.tour_settings`` JSON column:
        home_base_name, home_base_address,
        home_base_coordinates {lat, lng},
        default_departure_time, default_return_time
    """
    home_base:              Optional[HomeBase] = None
    default_departure_time: Optional[TimeOfDay] = None
    default_return_time:    Optional[TimeOfDay] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TourSettings":
        data = data or {}
        coords = data.get("home_base_coordinates") or {}
        home_base = None
        if coords.get("lat") is not None and coords.get("lng") is not None:
            home_base = HomeBase(
                name=data.get("home_base_name") or "",
                address=data.get("home_base_address") or "",
                latitude=float(coords["lat"]),
                longitude=float(coords["lng"]),
            )
        return cls(
            home_base=home_base,
            default_departure_time=TimeOfDay.coerce(data.get("default_departure_time")),
            default_return_time=TimeOfDay.coerce(data.get("default_return_time")),
        )


# ── Travel segment ────────────────────────────────────────────────────────────

def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _opt_str(t: Optional[TimeOfDay]) -> Optional[str]:
    return str(t) if t else None


@dataclass
class TravelSegment:
    """
    One leg of a tour's travel plan.

    distance_km / duration_minutes are facts fixed at generation time
    (great-circle km, minutes at the configured average speed); editing the
    transport fields afterwards never recomputes them.

    is_gap_return marks the venue → home leg synthesized because of a rest
    gap; gap_days is set only on those segments.
    """
    id:   str
    type: SegmentType
    from_type: EndpointType
    to_type:   EndpointType
    from_date_id:  Optional[str] = None
    to_date_id:    Optional[str] = None
    from_location: Optional[LocationSnapshot] = None
    to_location:   Optional[LocationSnapshot] = None
    transport_type: TransportType = TransportType.BUS
    departure_date: Optional[date] = None
    departure_time: Optional[TimeOfDay] = None
    arrival_date:   Optional[date] = None
    arrival_time:   Optional[TimeOfDay] = None
    distance_km:      int = 0
    duration_minutes: int = 0
    notes: str = ""
    is_gap_return: bool = False
    gap_days: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id":               self.id,
            "type":             self.type.value,
            "from_type":        self.from_type.value,
            "to_type":          self.to_type.value,
            "from_date_id":     self.from_date_id,
            "to_date_id":       self.to_date_id,
            "from_location":    self.from_location.to_dict() if self.from_location else None,
            "to_location":      self.to_location.to_dict() if self.to_location else None,
            "transport_type":   self.transport_type.value,
            "departure_date":   _iso(self.departure_date),
            "departure_time":   _opt_str(self.departure_time),
            "arrival_date":     _iso(self.arrival_date),
            "arrival_time":     _opt_str(self.arrival_time),
            "distance_km":      self.distance_km,
            "duration_minutes": self.duration_minutes,
            "notes":            self.notes,
            "is_gap_return":    self.is_gap_return,
            "gap_days":         self.gap_days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TravelSegment":
        def _loc(key: str) -> Optional[LocationSnapshot]:
            raw = data.get(key)
            return LocationSnapshot.from_dict(raw) if raw else None

        def _date(key: str) -> Optional[date]:
            raw = data.get(key)
            return date.fromisoformat(raw) if raw else None

        return cls(
            id=data["id"],
            type=SegmentType(data["type"]),
            from_type=EndpointType(data["from_type"]),
            to_type=EndpointType(data["to_type"]),
            from_date_id=data.get("from_date_id"),
            to_date_id=data.get("to_date_id"),
            from_location=_loc("from_location"),
            to_location=_loc("to_location"),
            transport_type=TransportType(data.get("transport_type") or TransportType.BUS.value),
            departure_date=_date("departure_date"),
            departure_time=TimeOfDay.coerce(data.get("departure_time")),
            arrival_date=_date("arrival_date"),
            arrival_time=TimeOfDay.coerce(data.get("arrival_time")),
            distance_km=int(data.get("distance_km") or 0),
            duration_minutes=int(data.get("duration_minutes") or 0),
            notes=data.get("notes") or "",
            is_gap_return=bool(data.get("is_gap_return", False)),
            gap_days=data.get("gap_days"),
        )


@dataclass
class TourContext:
    """Everything needed to open a tour's travel planner."""
    tour_id:  str
    settings: TourSettings = field(default_factory=TourSettings)
    dates:    list[TourDate] = field(default_factory=list)
