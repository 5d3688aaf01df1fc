"""
db/
----
Database access layer for the tour travel planner.

Storage architecture:
  PostgreSQL (psycopg2) — persistent backing store
    tables: tours (tour_settings, travel_plan), tour_dates, locations
    schema: docs/database/01-travel-plan.sql
    apply:  python scripts/run_migrations.py

  Redis (redis-py) — cross-worker save lock
    savelock:{tour_id}   TTL = SAVE_LOCK_TTL

Public exports (import from here for convenience):
    from db import get_conn, get_redis
    from db.repositories import tour_repo
    from db.travel_plan_store import PostgresTravelPlanStore
"""

from db.connection import get_conn, close_pool
from db.redis_client import get_redis

__all__ = ["get_conn", "close_pool", "get_redis"]
