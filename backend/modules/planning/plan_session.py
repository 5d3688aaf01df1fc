"""
modules/planning/plan_session.py
---------------------------------
TravelPlanSession — one tour-editing session over the travel planner.

Wraps TravelPlanGenerator, SegmentStore, a TravelPlanStore and a SaveGate
into the single interface the API layer (or any other caller) drives.

Lifecycle:
    session = TravelPlanSession(tour_id, settings, dates, plan_store, can_edit=True)

    session.open()                    # load persisted plan, or generate one
    session.regenerate()              # discard edits, start from the generator
    session.update_field(seg_id, "transport_type", "plane")
    await session.save()              # full overwrite through the plan store

    session.summaries(), session.warnings, session.state

Read-only sessions (can_edit=False) may open and regenerate the plan for
display but refuse edits and saves.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

import config
from schemas.travel import TimeOfDay, TourContext, TourDate, TourSettings, TravelSegment
from modules.observability.logger import StructuredLogger
from modules.planning.errors import (
    EditNotAllowedError,
    PersistenceError,
    SaveInProgressError,
)
from modules.planning.plan_store import TravelPlanStore
from modules.planning.save_gate import SaveGate, get_save_gate
from modules.planning.segment_store import PlanState, PlanSummary, SegmentStore
from modules.planning.travel_planner import (
    DataQualityWarning,
    GenerationResult,
    TravelPlanGenerator,
    sort_tour_dates,
)

logger = logging.getLogger(__name__)


class TravelPlanSession:
    """
    Single source of truth for one tour's travel plan while it is being
    edited: current segments, plan state, last generation warnings and the
    saving flag.
    """

    def __init__(
        self,
        tour_id: str,
        settings: TourSettings,
        tour_dates: list[TourDate],
        plan_store: TravelPlanStore,
        can_edit: bool = False,
        generator: TravelPlanGenerator | None = None,
        save_gate: SaveGate | None = None,
        event_log: StructuredLogger | None = None,
    ) -> None:
        self.tour_id     = tour_id
        self.settings    = settings
        self.tour_dates  = sort_tour_dates(tour_dates)
        self.can_edit    = can_edit
        self.store       = SegmentStore()
        self.warnings: list[DataQualityWarning] = []

        self._plan_store = plan_store
        self._generator  = generator or TravelPlanGenerator()
        self._save_gate  = save_gate or get_save_gate()
        self._event_log  = event_log or StructuredLogger()
        self._saving     = False

    # ── Factory ───────────────────────────────────────────────────────────────

    @classmethod
    def from_context(
        cls,
        context: TourContext,
        plan_store: TravelPlanStore,
        can_edit: bool = False,
        **kwargs: Any,
    ) -> "TravelPlanSession":
        return cls(
            tour_id=context.tour_id,
            settings=context.settings,
            tour_dates=context.dates,
            plan_store=plan_store,
            can_edit=can_edit,
            **kwargs,
        )

    # ── Read ──────────────────────────────────────────────────────────────────

    @property
    def segments(self) -> list[TravelSegment]:
        return self.store.segments

    @property
    def state(self) -> PlanState:
        return self.store.state

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def save_locked(self) -> bool:
        """True while any worker holds this tour's save gate."""
        return self._save_gate.is_locked(self.tour_id)

    @property
    def default_departure_time(self) -> TimeOfDay:
        return self.settings.default_departure_time or TimeOfDay.parse(config.DEFAULT_DEPARTURE_TIME)

    @property
    def default_return_time(self) -> TimeOfDay:
        return self.settings.default_return_time or TimeOfDay.parse(config.DEFAULT_RETURN_TIME)

    def summaries(self) -> PlanSummary:
        return self.store.summaries()

    # ── Plan lifecycle ────────────────────────────────────────────────────────

    def open(self) -> PlanState:
        """
        Load the persisted plan into the store.  When nothing has been
        persisted yet and a home base is configured, generate a fresh plan.
        """
        persisted = self._plan_store.load_travel_plan(self.tour_id)
        if persisted is not None:
            self.store.replace_all(persisted, origin=PlanState.LOADED)
        elif self.settings.home_base is not None:
            self.regenerate()
        self._event_log.log(self.tour_id, "PLAN_OPENED", {
            "state": self.state.value,
            "segment_count": len(self.store),
        })
        return self.state

    def regenerate(self) -> GenerationResult:
        """
        Discard the current segments (including user edits) and replace them
        with a fresh generator run.

        Raises MissingConfigurationError when no home base is configured;
        the store is left untouched in that case.
        """
        result = self._generator.generate(
            self.settings.home_base,
            self.tour_dates,
            self.default_departure_time,
            self.default_return_time,
        )
        self.store.replace_all(result.segments, origin=PlanState.GENERATED)
        self.warnings = list(result.warnings)
        self._event_log.log(self.tour_id, "PLAN_GENERATED", {
            "segment_count": len(result.segments),
            "skipped_dates": [w.date_id for w in result.warnings],
        })
        return result

    def update_field(self, segment_id: str, field_name: str, value: Any) -> bool:
        """Edit one field of one segment; False when the id is unknown."""
        self._require_edit()
        updated = self.store.update_field(segment_id, field_name, value)
        if updated:
            self._event_log.log(self.tour_id, "SEGMENT_UPDATED", {
                "segment_id": segment_id,
                "field": field_name,
                "value": value,
            })
        return updated

    async def save(self) -> None:
        """
        Push the current segments, verbatim, to the plan store.

        Raises:
            EditNotAllowedError: read-only session.
            SaveInProgressError: another save for this tour is in flight.
            PersistenceError:    the store failed; edits stay in memory so
                                 the caller may retry.
        """
        self._require_edit()
        if not self._save_gate.acquire(self.tour_id):
            raise SaveInProgressError(self.tour_id)

        self._saving = True
        # Edits may land while the store call runs in its worker thread.
        revision = self.store.revision
        segments = copy.deepcopy(self.store.segments)
        try:
            await _push(self._plan_store, self.tour_id, segments)
        except PersistenceError as exc:
            self._event_log.log(self.tour_id, "PLAN_SAVE_FAILED", {"error": str(exc.__cause__)})
            raise
        finally:
            self._saving = False
            self._save_gate.release(self.tour_id)

        clean = self.store.mark_saved(revision)
        self._event_log.log(self.tour_id, "PLAN_SAVED", {
            "segment_count": len(segments),
            "edited_during_save": not clean,
        })

    def close(self) -> None:
        """Release the session's event-log handle."""
        self._event_log.close(self.tour_id)

    # ── Internals ─────────────────────────────────────────────────────────────

    def _require_edit(self) -> None:
        if not self.can_edit:
            raise EditNotAllowedError(self.tour_id)


async def _push(plan_store: TravelPlanStore, tour_id: str, segments: list[TravelSegment]) -> None:
    """Run the blocking store call off the event loop; wrap any failure."""
    try:
        await asyncio.to_thread(plan_store.save_travel_plan, tour_id, segments)
    except Exception as exc:
        logger.error("saving travel plan for tour %s failed: %s", tour_id, exc)
        raise PersistenceError(f"could not save travel plan: {exc}") from exc


async def save_travel_plan(
    tour_id: str,
    segments: list[TravelSegment],
    plan_store: TravelPlanStore,
    save_gate: SaveGate | None = None,
) -> None:
    """
    Standalone save: pass *segments* verbatim to *plan_store* behind the
    per-tour save gate.  Same error contract as TravelPlanSession.save().
    """
    gate = save_gate or get_save_gate()
    if not gate.acquire(tour_id):
        raise SaveInProgressError(tour_id)
    try:
        await _push(plan_store, tour_id, list(segments))
    finally:
        gate.release(tour_id)
