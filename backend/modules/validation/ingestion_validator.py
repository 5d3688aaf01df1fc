"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards applied to tour data before it feeds the travel planner
or is written to storage.

  Coordinates (home base / venue):
    ✓ Non-null latitude and longitude
    ✓ Numeric
    ✓ Latitude in [-90, 90]
    ✓ Longitude in [-180, 180]
    ✓ Not both exactly 0.0 (likely missing)

  Home base:
    ✓ Coordinates as above

  Travel segment (before persistence):
    ✓ Non-empty id
    ✓ distance_km >= 0, duration_minutes >= 0
    ✓ gap_days present only on gap-return segments

Usage:
    from modules.validation import validate_coordinates

    result = validate_coordinates(lat, lon)
    if not result.valid:
        print(result.errors)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Coordinate validation ──────────────────────────────────────────────────────

def validate_coordinates(lat: Any, lon: Any) -> ValidationResult:
    """
    Validate one latitude/longitude pair.

    Checks:
      - non-null, numeric
      - in valid range
      - not both 0.0 (null island is treated as a missing value)
    """
    errors: list[str] = []
    record = {"latitude": lat, "longitude": lon}

    if lat is None or lon is None:
        errors.append(
            f"latitude/longitude must not be NULL (got lat={lat!r}, lon={lon!r})"
        )
        return ValidationResult(valid=False, errors=errors, record=record)

    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        errors.append(
            f"latitude/longitude must be numeric (got lat={lat!r}, lon={lon!r})"
        )
        return ValidationResult(valid=False, errors=errors, record=record)

    if not (-90.0 <= lat <= 90.0):
        errors.append(f"latitude={lat} is outside valid range [-90, 90]")

    if not (-180.0 <= lon <= 180.0):
        errors.append(f"longitude={lon} is outside valid range [-180, 180]")

    if lat == 0.0 and lon == 0.0:
        errors.append(
            "latitude=0.0 and longitude=0.0: likely a missing/default "
            "value — the null island (0°N, 0°E) is not a valid venue"
        )

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


def validate_home_base(record: dict[str, Any]) -> ValidationResult:
    """Validate a home base record (keys: name, latitude, longitude)."""
    result = validate_coordinates(record.get("latitude"), record.get("longitude"))
    return ValidationResult(valid=result.valid, errors=result.errors, record=record)


# ── Segment validation ─────────────────────────────────────────────────────────

def validate_segment(record: dict[str, Any]) -> ValidationResult:
    """
    Validate a serialized travel segment before it is written to
    ``tours.travel_plan``.
    """
    errors: list[str] = []

    if not str(record.get("id") or "").strip():
        errors.append("id must not be empty or NULL")

    for key in ("distance_km", "duration_minutes"):
        value = record.get(key)
        try:
            if int(value) < 0:
                errors.append(f"{key}={value} must be >= 0")
        except (TypeError, ValueError):
            errors.append(f"{key}={value!r} must be an integer")

    if record.get("gap_days") is not None and not record.get("is_gap_return"):
        errors.append("gap_days is only allowed on gap-return segments")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Batch filter helper ────────────────────────────────────────────────────────

def filter_valid(
    items: list[T],
    validator: Callable[[dict], ValidationResult],
    to_dict: Callable[[T], dict] | None = None,
) -> list[T]:
    """
    Apply a validator to every item in a list, return only the valid ones.
    Every rejected record is logged at WARNING level.
    """
    valid_items: list[T] = []
    rejected = 0

    for item in items:
        record_dict = (
            to_dict(item)
            if to_dict is not None
            else (item if isinstance(item, dict) else item.__dict__)
        )
        result = validator(record_dict)
        if result.valid:
            valid_items.append(item)
        else:
            rejected += 1
            logger.warning(
                "REJECTED %r: %s",
                record_dict.get("id", record_dict.get("name", "?")),
                "; ".join(result.errors),
            )

    if rejected:
        logger.warning(
            "%d/%d records rejected; %d passed.",
            rejected, len(items), len(valid_items),
        )

    return valid_items
