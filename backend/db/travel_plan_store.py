"""
db/travel_plan_store.py
------------------------
PostgresTravelPlanStore — the TravelPlanStore backed by the `tours` table.

Bridge between the in-process TravelPlanSession and the persistent DB tier:

    save_travel_plan(tour_id, segments)
        → validates every serialized segment
        → tour_repo.replace_travel_plan()  (one UPDATE, whole-plan overwrite)

    load_travel_plan(tour_id)
        → tour_repo.get_travel_plan()
        → drops persisted entries that no longer validate

    load_tour(tour_id)
        → tour_repo.get_tour_settings() + tour_repo.list_tour_dates()

Each call borrows its own pooled connection; commit/rollback is handled by
db.connection.get_conn().
"""

from __future__ import annotations

import logging
from typing import Optional

from schemas.travel import LocationSnapshot, TourContext, TourDate, TourSettings, TravelSegment
from modules.validation import filter_valid, validate_segment
from db.connection import get_conn
from db.repositories import tour_repo

logger = logging.getLogger(__name__)


class PostgresTravelPlanStore:

    def save_travel_plan(self, tour_id: str, segments: list[TravelSegment]) -> None:
        payload = [s.to_dict() for s in segments]
        errors = [
            f"{record.get('id')!r}: {'; '.join(result.errors)}"
            for record in payload
            if not (result := validate_segment(record))
        ]
        if errors:
            raise ValueError("refusing to persist invalid segments: " + " | ".join(errors))

        with get_conn() as conn:
            updated = tour_repo.replace_travel_plan(conn, tour_id, payload)
        if updated == 0:
            raise LookupError(f"tour {tour_id!r} not found")

    def load_travel_plan(self, tour_id: str) -> Optional[list[TravelSegment]]:
        with get_conn() as conn:
            raw = tour_repo.get_travel_plan(conn, tour_id)
        if raw is None:
            return None
        return [TravelSegment.from_dict(r) for r in filter_valid(raw, validate_segment)]

    def load_tour(self, tour_id: str) -> Optional[TourContext]:
        with get_conn() as conn:
            settings = tour_repo.get_tour_settings(conn, tour_id)
            if settings is None:
                return None
            rows = tour_repo.list_tour_dates(conn, tour_id)

        return TourContext(
            tour_id=tour_id,
            settings=TourSettings.from_dict(settings),
            dates=[_tour_date(row) for row in rows],
        )


def _tour_date(row: dict) -> TourDate:
    location = None
    if row.get("latitude") is not None and row.get("longitude") is not None:
        location = LocationSnapshot(
            name=row.get("location_name") or "",
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
        )
    return TourDate(id=str(row["id"]), date=row["date"], location=location)
