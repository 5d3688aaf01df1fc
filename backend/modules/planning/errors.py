"""
modules/planning/errors.py
--------------------------
Error taxonomy for the travel planner.

  ConfigurationError      — tour cannot be planned (no home base)
  PersistenceError        — the plan store rejected or failed a save
  SaveInProgressError     — a save for the same tour is already in flight
  EditNotAllowedError     — edit/save attempted on a read-only session
  InvalidSegmentFieldError — field is not editable or the value is malformed

Dates without a usable location are NOT errors; they are reported as
DataQualityWarning entries on the GenerationResult.
"""

from __future__ import annotations


class TravelPlanError(Exception):
    """Base class for every travel-planner failure."""


class ConfigurationError(TravelPlanError):
    """The tour is missing configuration the generator needs."""


class MissingConfigurationError(ConfigurationError):
    """No home base configured for the tour."""

    def __init__(self, message: str = "configure home base first") -> None:
        super().__init__(message)


class PersistenceError(TravelPlanError):
    """Saving the plan failed; in-memory edits are left untouched."""


class SaveInProgressError(TravelPlanError):
    def __init__(self, tour_id: str) -> None:
        super().__init__(f"a save for tour {tour_id!r} is already in progress")
        self.tour_id = tour_id


class EditNotAllowedError(TravelPlanError):
    def __init__(self, tour_id: str) -> None:
        super().__init__(f"travel plan for tour {tour_id!r} is read-only")
        self.tour_id = tour_id


class InvalidSegmentFieldError(TravelPlanError, ValueError):
    """Raised by SegmentStore.update_field for a bad field name or value."""
