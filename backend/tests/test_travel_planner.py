from __future__ import annotations

import pytest

import config
from schemas.travel import HomeBase, SegmentType, TimeOfDay
from modules.planning import (
    ConfigurationError,
    MissingConfigurationError,
    TravelPlanGenerator,
    generate_travel_plan,
)
from modules.planning.segment_notes import note
from modules.tool_usage.distance_tool import round_half_up

DEPARTURE = TimeOfDay(9, 0)
RETURN = TimeOfDay(18, 0)


def _generate(home_base, dates, locale="en"):
    return TravelPlanGenerator(locale=locale).generate(home_base, dates, DEPARTURE, RETURN)


# ── End-to-end scenario ─────────────────────────────────────────────────────

def test_scenario_produces_five_segments(home_base, scenario_dates):
    segments = _generate(home_base, scenario_dates).segments

    assert [s.type for s in segments] == [
        SegmentType.HOME_TO_VENUE,
        SegmentType.VENUE_TO_VENUE,
        SegmentType.VENUE_TO_HOME,
        SegmentType.HOME_TO_VENUE,
        SegmentType.VENUE_TO_HOME,
    ]
    assert [s.id for s in segments] == [
        "home-to-d1", "d1-to-d2", "d2-to-home", "home-to-d3", "d3-to-home",
    ]

    gap_return = segments[2]
    assert gap_return.is_gap_return is True
    assert gap_return.gap_days == 4
    assert gap_return.from_date_id == "d2"

    closing = segments[4]
    assert closing.is_gap_return is False
    assert closing.gap_days is None
    assert closing.notes == note("final_return", "en")


def test_segment_endpoints_and_snapshots(home_base, scenario_dates):
    opening, direct, *_ = _generate(home_base, scenario_dates).segments

    assert opening.from_location.name == "Madrid HQ"
    assert opening.to_location.latitude == 40.5
    assert opening.to_date_id == "d1" and opening.from_date_id is None
    assert direct.from_date_id == "d1" and direct.to_date_id == "d2"


def test_default_times(home_base, scenario_dates):
    opening, direct, gap_return, resume, closing = _generate(home_base, scenario_dates).segments

    assert opening.departure_time == DEPARTURE
    assert resume.departure_time == DEPARTURE
    assert gap_return.departure_time == RETURN
    assert closing.departure_time == RETURN
    assert direct.departure_time is None and direct.arrival_time is None
    assert opening.arrival_time is None


def test_departure_and_arrival_dates(home_base, scenario_dates):
    _, direct, gap_return, resume, _ = _generate(home_base, scenario_dates).segments

    assert direct.departure_date == scenario_dates[0].date
    assert direct.arrival_date == scenario_dates[1].date
    assert gap_return.departure_date == scenario_dates[1].date
    assert resume.departure_date == scenario_dates[2].date


def test_generation_is_idempotent(home_base, scenario_dates):
    first = _generate(home_base, scenario_dates)
    second = _generate(home_base, scenario_dates)
    assert first.segments == second.segments
    assert [s.to_dict() for s in first.segments] == [s.to_dict() for s in second.segments]


def test_duration_derivation_holds_for_every_segment(home_base, scenario_dates):
    for segment in _generate(home_base, scenario_dates).segments:
        assert segment.distance_km >= 0
        assert segment.duration_minutes == round_half_up(segment.distance_km / 80 * 60)


# ── Gap threshold ───────────────────────────────────────────────────────────

def test_one_day_apart_is_direct_travel(home_base, make_date):
    dates = [make_date("a", 0, 40.5, -3.5), make_date("b", 1, 41.0, -4.0)]
    segments = _generate(home_base, dates).segments

    between = [s for s in segments if s.id not in ("home-to-a", "b-to-home")]
    assert len(between) == 1
    assert between[0].type is SegmentType.VENUE_TO_VENUE
    assert between[0].notes == note("direct", "en")


def test_same_day_is_direct_travel(home_base, make_date):
    dates = [make_date("a", 0, 40.5, -3.5), make_date("b", 0, 41.0, -4.0)]
    types = [s.type for s in _generate(home_base, dates).segments]
    assert types == [SegmentType.HOME_TO_VENUE, SegmentType.VENUE_TO_VENUE, SegmentType.VENUE_TO_HOME]


def test_two_days_apart_returns_home(home_base, make_date):
    dates = [make_date("a", 0, 40.5, -3.5), make_date("b", 2, 41.0, -4.0)]
    segments = _generate(home_base, dates).segments

    assert [s.id for s in segments] == ["home-to-a", "a-to-home", "home-to-b", "b-to-home"]
    gap_return, resume = segments[1], segments[2]
    assert gap_return.type is SegmentType.VENUE_TO_HOME
    assert gap_return.is_gap_return and gap_return.gap_days == 2
    assert gap_return.notes == note("gap_return", "en", days=2)
    assert resume.type is SegmentType.HOME_TO_VENUE
    assert not resume.is_gap_return and resume.gap_days is None
    assert resume.notes == note("gap_resume", "en", days=2)


def test_custom_gap_threshold(home_base, make_date):
    dates = [make_date("a", 0, 40.5, -3.5), make_date("b", 2, 41.0, -4.0)]
    generator = TravelPlanGenerator(gap_threshold_days=3)
    segments = generator.generate(home_base, dates, DEPARTURE, RETURN).segments
    assert [s.type for s in segments][1] is SegmentType.VENUE_TO_VENUE


# ── Missing locations ───────────────────────────────────────────────────────

def test_unlocated_date_contributes_no_segments(home_base, make_date):
    dates = [
        make_date("a", 0, 40.5, -3.5),
        make_date("b", 1),
        make_date("c", 2, 41.0, -4.0),
    ]
    result = _generate(home_base, dates)

    assert [s.id for s in result.segments] == ["home-to-a", "c-to-home"]
    assert all("b" not in (s.from_date_id, s.to_date_id) for s in result.segments)
    assert [(w.date_id, w.reason) for w in result.warnings] == [("b", "missing_location")]


def test_leading_unlocated_date_moves_opening_leg(home_base, make_date):
    dates = [
        make_date("a", 0),
        make_date("b", 1, 40.5, -3.5),
        make_date("c", 2, 41.0, -4.0),
    ]
    ids = [s.id for s in _generate(home_base, dates).segments]
    assert ids == ["home-to-b", "b-to-c", "c-to-home"]


def test_trailing_unlocated_date_moves_closing_leg(home_base, make_date):
    dates = [
        make_date("a", 0, 40.5, -3.5),
        make_date("b", 1, 41.0, -4.0),
        make_date("c", 2),
    ]
    ids = [s.id for s in _generate(home_base, dates).segments]
    assert ids == ["home-to-a", "a-to-b", "b-to-home"]


def test_null_island_is_treated_as_missing(home_base, make_date):
    dates = [make_date("a", 0, 0.0, 0.0), make_date("b", 1, 41.0, -4.0)]
    result = _generate(home_base, dates)

    assert [s.id for s in result.segments] == ["home-to-b", "b-to-home"]
    assert result.warnings[0].reason == "invalid_coordinates"


def test_no_located_dates_yields_empty_plan(home_base, make_date):
    dates = [make_date("a", 0), make_date("b", 3)]
    result = _generate(home_base, dates)
    assert result.segments == []
    assert len(result.warnings) == 2


def test_single_located_date_goes_there_and_back(home_base, make_date):
    ids = [s.id for s in _generate(home_base, [make_date("a", 0, 40.5, -3.5)]).segments]
    assert ids == ["home-to-a", "a-to-home"]


# ── Configuration errors ────────────────────────────────────────────────────

def test_missing_home_base_raises(scenario_dates):
    with pytest.raises(MissingConfigurationError):
        _generate(None, scenario_dates)


def test_missing_home_base_is_distinct_from_empty_plan(home_base, make_date):
    empty = _generate(home_base, [make_date("a", 0)])
    assert empty.segments == []
    with pytest.raises(ConfigurationError):
        _generate(None, [make_date("a", 0)])


def test_no_dates_yields_empty_plan(home_base):
    result = _generate(home_base, [])
    assert result.segments == [] and result.warnings == []


def test_home_base_with_invalid_coordinates_raises(scenario_dates):
    broken = HomeBase(name="Nowhere", address="", latitude=95.0, longitude=-3.0)
    with pytest.raises(ConfigurationError, match="latitude"):
        _generate(broken, scenario_dates)


# ── Public entry point ──────────────────────────────────────────────────────

def test_generate_travel_plan_sorts_dates(home_base, scenario_dates):
    shuffled = [scenario_dates[2], scenario_dates[0], scenario_dates[1]]
    result = generate_travel_plan(home_base, shuffled, "09:00", "18:00", locale="en")
    assert [s.id for s in result.segments] == [
        "home-to-d1", "d1-to-d2", "d2-to-home", "home-to-d3", "d3-to-home",
    ]


def test_generate_travel_plan_falls_back_to_configured_times(home_base, scenario_dates, monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_DEPARTURE_TIME", "07:30")
    monkeypatch.setattr(config, "DEFAULT_RETURN_TIME", "23:15")
    segments = generate_travel_plan(home_base, scenario_dates).segments
    assert segments[0].departure_time == TimeOfDay(7, 30)
    assert segments[-1].departure_time == TimeOfDay(23, 15)


def test_generate_travel_plan_rejects_malformed_time(home_base, scenario_dates):
    with pytest.raises(ValueError):
        generate_travel_plan(home_base, scenario_dates, "9am", None)


def test_spanish_notes(home_base, scenario_dates):
    segments = _generate(home_base, scenario_dates, locale="es").segments
    assert segments[0].notes == "Salida desde la base"
    assert segments[2].notes == "Regreso a base - 4 días de descanso"
    assert segments[3].notes == "Salida después de 4 días de descanso"
    assert segments[4].notes == "Regreso final a base"


def test_zero_gap_threshold_is_honoured(home_base, make_date):
    dates = [make_date("a", 0, 40.5, -3.5), make_date("b", 0, 41.0, -4.0)]
    generator = TravelPlanGenerator(gap_threshold_days=0)
    segments = generator.generate(home_base, dates, DEPARTURE, RETURN).segments
    assert [s.id for s in segments] == ["home-to-a", "a-to-home", "home-to-b", "b-to-home"]
    assert segments[1].gap_days == 0


def test_unsupported_locale_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="locale"):
        TravelPlanGenerator(locale="fr")
