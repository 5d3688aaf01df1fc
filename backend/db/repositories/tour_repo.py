"""
db/repositories/tour_repo.py
------------------------------
Read/write operations for the `tours`, `tour_dates` and `locations` tables.

Schema: docs/database/01-travel-plan.sql

All functions accept a psycopg2 connection object.
Commit/rollback is managed by the caller via db.connection.get_conn().
"""

from __future__ import annotations

import json
from typing import Any


# ── tours table ────────────────────────────────────────────────────────────────

def get_tour_settings(conn, tour_id: str) -> dict | None:
    """
    Return the `tours.tour_settings` JSON for a tour.

    Returns None when the tour does not exist; an empty dict when it exists
    but has no settings yet.
    """
    sql = "SELECT tour_settings FROM tours WHERE id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (tour_id,))
        row = cur.fetchone()
        if row is None:
            return None
        return _json(row[0]) or {}


def get_travel_plan(conn, tour_id: str) -> list[dict] | None:
    """Return the persisted `tours.travel_plan` list, or None if never saved."""
    sql = "SELECT travel_plan FROM tours WHERE id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (tour_id,))
        row = cur.fetchone()
        if row is None or row[0] is None:
            return None
        return _json(row[0])


def replace_travel_plan(conn, tour_id: str, segments: list[dict[str, Any]]) -> int:
    """
    Overwrite `tours.travel_plan` with *segments* (already serialized).

    Returns the number of rows updated (0 when the tour does not exist).
    """
    sql = """
        UPDATE tours
           SET travel_plan = %s::jsonb,
               updated_at  = now()
         WHERE id = %s
    """
    with conn.cursor() as cur:
        cur.execute(sql, (json.dumps(segments), tour_id))
        return cur.rowcount


# ── tour_dates table ───────────────────────────────────────────────────────────

def list_tour_dates(conn, tour_id: str) -> list[dict]:
    """
    Return every date of a tour ordered by date, with its location (if any).

    Row keys: id, date, location_name, latitude, longitude
    """
    sql = """
        SELECT td.id, td.date,
               l.name AS location_name, l.latitude, l.longitude
          FROM tour_dates td
          LEFT JOIN locations l ON l.id = td.location_id
         WHERE td.tour_id = %s
         ORDER BY td.date ASC
    """
    with conn.cursor() as cur:
        cur.execute(sql, (tour_id,))
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]


def _json(value: Any) -> Any:
    # psycopg2 decodes jsonb to Python objects; plain json/text columns arrive as str
    if isinstance(value, str):
        return json.loads(value)
    return value
