"""
modules/planning/travel_planner.py
-----------------------------------
Tour travel plan generator.

Given a home base and tour dates sorted by date, emits the ordered list of
travel segments the crew needs:

  1. Opening leg:   home → first date that has a location.
  2. Pairwise legs: for each adjacent pair (i, i+1) where BOTH have a location
       day_gap >= GAP_THRESHOLD_DAYS → venue → home (gap return)
                                        + home → venue (resumption)
       otherwise (0 or 1 day)         → venue → venue (direct travel)
     Pairs where either date lacks a location are skipped; no segment
     bridges across the missing point.
  3. Closing leg:   last date that has a location → home.

Distances are Haversine km rounded to the nearest integer; durations are
minutes at the fixed average speed (config.AVERAGE_SPEED_KMH).

Segment ids are derived from the endpoint ids ("home" or TourDate.id), so
generating twice from unchanged inputs yields equal segment lists.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Iterable, Optional

import config
from schemas.travel import (
    EndpointType,
    HomeBase,
    LocationSnapshot,
    SegmentType,
    TimeOfDay,
    TourDate,
    TravelSegment,
)
from modules.planning.errors import ConfigurationError, MissingConfigurationError
from modules.planning.segment_notes import SUPPORTED_LOCALES, note
from modules.tool_usage.distance_tool import DistanceTool
from modules.validation import validate_coordinates, validate_home_base

logger = logging.getLogger(__name__)

_HOME = "home"


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DataQualityWarning:
    """A tour date left out of distance-bearing segments."""
    date_id: str
    date:    date
    reason:  str          # "missing_location" | "invalid_coordinates"
    detail:  str = ""


@dataclass
class GenerationResult:
    """
    Output of one generator run.

    An empty ``segments`` list means "nothing could be planned" (no dates, or
    no date with a usable location); a missing home base raises instead.
    """
    segments: list[TravelSegment] = field(default_factory=list)
    warnings: list[DataQualityWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.segments)


# ── Helpers ───────────────────────────────────────────────────────────────────

def segment_id(from_key: str, to_key: str) -> str:
    """Deterministic id from the two endpoint keys ("home" or a date id)."""
    return f"{from_key}-to-{to_key}"


def calendar_days_between(later: date, earlier: date) -> int:
    return (later - earlier).days


def sort_tour_dates(tour_dates: Iterable[TourDate]) -> list[TourDate]:
    """Stable sort by calendar date."""
    return sorted(tour_dates, key=lambda d: d.date)


# ── Generator ─────────────────────────────────────────────────────────────────

class TravelPlanGenerator:
    """
    Pure segment synthesis.  Holds no state between calls; the same
    generator can serve any number of tours.
    """

    def __init__(
        self,
        distance_tool: DistanceTool | None = None,
        gap_threshold_days: int | None = None,
        locale: str | None = None,
    ) -> None:
        self.distance_tool      = distance_tool or DistanceTool()
        if gap_threshold_days is None:
            gap_threshold_days = config.GAP_THRESHOLD_DAYS
        locale = locale or config.PLAN_LOCALE
        if locale not in SUPPORTED_LOCALES:
            raise ConfigurationError(
                f"unsupported note locale {locale!r}; expected one of {SUPPORTED_LOCALES}"
            )
        self.gap_threshold_days = gap_threshold_days
        self.locale             = locale

    # ── Public entry point ────────────────────────────────────────────────────

    def generate(
        self,
        home_base: Optional[HomeBase],
        sorted_dates: list[TourDate],
        default_departure_time: TimeOfDay,
        default_return_time: TimeOfDay,
    ) -> GenerationResult:
        """
        Build the travel plan for *sorted_dates* (already ordered by date).

        Raises:
            MissingConfigurationError: no home base.
            ConfigurationError:        home base coordinates are unusable.
        """
        if home_base is None:
            raise MissingConfigurationError()
        home_check = validate_home_base(asdict(home_base))
        if not home_check.valid:
            raise ConfigurationError(
                "home base coordinates are invalid: " + "; ".join(home_check.errors)
            )

        result = GenerationResult()
        if not sorted_dates:
            return result

        home = home_base.snapshot()
        located = [self._locate(d, result.warnings) for d in sorted_dates]

        # ── 1. Opening leg ────────────────────────────────────────────────
        first = next((i for i, loc in enumerate(located) if loc), None)
        if first is None:
            logger.info("no tour date has a usable location; plan is empty")
            return result
        first_date = sorted_dates[first]
        result.segments.append(self._leave_home(
            home, first_date, located[first], default_departure_time,
            note("departure", self.locale),
        ))

        # ── 2. Pairwise legs ──────────────────────────────────────────────
        for i in range(len(sorted_dates) - 1):
            current, nxt = sorted_dates[i], sorted_dates[i + 1]
            cur_loc, next_loc = located[i], located[i + 1]
            if cur_loc is None or next_loc is None:
                continue

            day_gap = calendar_days_between(nxt.date, current.date)
            if day_gap >= self.gap_threshold_days:
                result.segments.append(self._return_home(
                    current, cur_loc, home, default_return_time,
                    note("gap_return", self.locale, days=day_gap),
                    gap_days=day_gap,
                ))
                result.segments.append(self._leave_home(
                    home, nxt, next_loc, default_departure_time,
                    note("gap_resume", self.locale, days=day_gap),
                ))
            else:
                result.segments.append(self._direct(current, cur_loc, nxt, next_loc))

        # ── 3. Closing leg ────────────────────────────────────────────────
        last = max(i for i, loc in enumerate(located) if loc)
        result.segments.append(self._return_home(
            sorted_dates[last], located[last], home, default_return_time,
            note("final_return", self.locale),
        ))

        return result

    # ── Segment builders ──────────────────────────────────────────────────────

    def _locate(
        self,
        tour_date: TourDate,
        warnings: list[DataQualityWarning],
    ) -> Optional[LocationSnapshot]:
        """Return the date's location if usable, otherwise record a warning."""
        loc = tour_date.location
        if loc is None:
            warnings.append(DataQualityWarning(tour_date.id, tour_date.date, "missing_location"))
            logger.warning("tour date %s (%s) has no location; skipped", tour_date.id, tour_date.date)
            return None
        check = validate_coordinates(loc.latitude, loc.longitude)
        if not check.valid:
            detail = "; ".join(check.errors)
            warnings.append(DataQualityWarning(
                tour_date.id, tour_date.date, "invalid_coordinates", detail,
            ))
            logger.warning("tour date %s (%s) skipped: %s", tour_date.id, tour_date.date, detail)
            return None
        return loc

    def _measure(self, a: LocationSnapshot, b: LocationSnapshot) -> tuple[int, int]:
        return self.distance_tool.measure(a.latitude, a.longitude, b.latitude, b.longitude)

    def _leave_home(
        self,
        home: LocationSnapshot,
        to_date: TourDate,
        to_loc: LocationSnapshot,
        departure_time: TimeOfDay,
        notes: str,
    ) -> TravelSegment:
        km, minutes = self._measure(home, to_loc)
        return TravelSegment(
            id=segment_id(_HOME, to_date.id),
            type=SegmentType.HOME_TO_VENUE,
            from_type=EndpointType.HOME,
            to_type=EndpointType.VENUE,
            to_date_id=to_date.id,
            from_location=home,
            to_location=to_loc,
            departure_date=to_date.date,
            departure_time=departure_time,
            arrival_date=to_date.date,
            distance_km=km,
            duration_minutes=minutes,
            notes=notes,
        )

    def _return_home(
        self,
        from_date: TourDate,
        from_loc: LocationSnapshot,
        home: LocationSnapshot,
        departure_time: TimeOfDay,
        notes: str,
        gap_days: int | None = None,
    ) -> TravelSegment:
        km, minutes = self._measure(from_loc, home)
        return TravelSegment(
            id=segment_id(from_date.id, _HOME),
            type=SegmentType.VENUE_TO_HOME,
            from_type=EndpointType.VENUE,
            to_type=EndpointType.HOME,
            from_date_id=from_date.id,
            from_location=from_loc,
            to_location=home,
            departure_date=from_date.date,
            departure_time=departure_time,
            arrival_date=from_date.date,
            distance_km=km,
            duration_minutes=minutes,
            notes=notes,
            is_gap_return=gap_days is not None,
            gap_days=gap_days,
        )

    def _direct(
        self,
        from_date: TourDate,
        from_loc: LocationSnapshot,
        to_date: TourDate,
        to_loc: LocationSnapshot,
    ) -> TravelSegment:
        # Times are left empty for manual entry.
        km, minutes = self._measure(from_loc, to_loc)
        return TravelSegment(
            id=segment_id(from_date.id, to_date.id),
            type=SegmentType.VENUE_TO_VENUE,
            from_type=EndpointType.VENUE,
            to_type=EndpointType.VENUE,
            from_date_id=from_date.id,
            to_date_id=to_date.id,
            from_location=from_loc,
            to_location=to_loc,
            departure_date=from_date.date,
            arrival_date=to_date.date,
            distance_km=km,
            duration_minutes=minutes,
            notes=note("direct", self.locale),
        )


# ── Module-level convenience ──────────────────────────────────────────────────

def generate_travel_plan(
    home_base: Optional[HomeBase],
    tour_dates: Iterable[TourDate],
    default_departure_time: TimeOfDay | str | None = None,
    default_return_time: TimeOfDay | str | None = None,
    locale: str | None = None,
) -> GenerationResult:
    """
    Sort *tour_dates*, apply default-time fallbacks from config and run the
    generator.  Pure and synchronous.
    """
    departure = (
        TimeOfDay.coerce(default_departure_time)
        or TimeOfDay.parse(config.DEFAULT_DEPARTURE_TIME)
    )
    ret = (
        TimeOfDay.coerce(default_return_time)
        or TimeOfDay.parse(config.DEFAULT_RETURN_TIME)
    )
    generator = TravelPlanGenerator(locale=locale)
    return generator.generate(home_base, sort_tour_dates(tour_dates), departure, ret)
