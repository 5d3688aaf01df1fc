"""
Shared fixtures for the travel planner tests.

Coordinates used throughout (the end-to-end tour):
    home  (40.0, -3.0)
    D1    (40.5, -3.5)   day 0
    D2    (41.0, -4.0)   day 1
    D3    (45.0, -8.0)   day 5
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Optional

import pytest

import config
from schemas.travel import HomeBase, LocationSnapshot, TourDate

DAY0 = date(2025, 3, 1)


@pytest.fixture(autouse=True)
def _logs_dir(tmp_path, monkeypatch):
    """Keep JSONL event logs out of the source tree."""
    monkeypatch.setattr(config, "LOGS_DIR", str(tmp_path / "logs"))


@pytest.fixture
def home_base() -> HomeBase:
    return HomeBase(name="Madrid HQ", address="Calle Mayor 1", latitude=40.0, longitude=-3.0)


@pytest.fixture
def make_date() -> Callable[..., TourDate]:
    def _make(
        date_id: str,
        day: int,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        name: str = "",
    ) -> TourDate:
        location = None
        if lat is not None and lon is not None:
            location = LocationSnapshot(name or f"Venue {date_id}", lat, lon)
        return TourDate(id=date_id, date=DAY0 + timedelta(days=day), location=location)

    return _make


@pytest.fixture
def scenario_dates(make_date) -> list[TourDate]:
    return [
        make_date("d1", 0, 40.5, -3.5),
        make_date("d2", 1, 41.0, -4.0),
        make_date("d3", 5, 45.0, -8.0),
    ]
