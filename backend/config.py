"""
config.py
---------
Central configuration for the tour travel planner.
All secrets loaded from environment variables — never hard-coded.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

# ── Travel planning ───────────────────────────────────────────────────────────
# Fallbacks used when a tour's settings carry no default departure/return time.
DEFAULT_DEPARTURE_TIME: str = os.getenv("DEFAULT_DEPARTURE_TIME", "09:00")
DEFAULT_RETURN_TIME:    str = os.getenv("DEFAULT_RETURN_TIME",    "18:00")

# Two or more calendar days between consecutive shows → crew returns home.
GAP_THRESHOLD_DAYS: int = int(os.getenv("GAP_THRESHOLD_DAYS", "2"))

# Fixed road speed used for every duration estimate (km/h)
AVERAGE_SPEED_KMH: float = float(os.getenv("AVERAGE_SPEED_KMH", "80"))

EARTH_RADIUS_KM: float = 6371.0

# Language of generated segment notes: "es" | "en"
PLAN_LOCALE: str = os.getenv("PLAN_LOCALE", "en")

# ── Backends ──────────────────────────────────────────────────────────────────
# Where travel plans are persisted: "in_memory" | "postgres"
PLAN_STORE_BACKEND: str = os.getenv("PLAN_STORE_BACKEND", "in_memory")

# Where the per-tour "save in flight" flag lives: "in_memory" | "redis"
SAVE_GATE_BACKEND: str = os.getenv("SAVE_GATE_BACKEND", "in_memory")
# Redis lock expiry (seconds); a crashed worker never holds a tour forever
SAVE_LOCK_TTL: int = int(os.getenv("SAVE_LOCK_TTL", "60"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
# JSONL event logs, one file per tour
LOGS_DIR: str = os.getenv("LOGS_DIR", str(Path(__file__).parent / "logs"))

# ── PostgreSQL ────────────────────────────────────────────────────────────────
# Schema defined in docs/database/01-travel-plan.sql
# Apply with: python scripts/run_migrations.py
POSTGRES_HOST: str     = os.getenv("POSTGRES_HOST",     "localhost")
POSTGRES_PORT: int     = int(os.getenv("POSTGRES_PORT", "5432"))
POSTGRES_DB: str       = os.getenv("POSTGRES_DB",       "tourplanner")
POSTGRES_USER: str     = os.getenv("POSTGRES_USER",     "tourplanner_user")
POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "tourplanner_pass")
POSTGRES_MIN_CONN: int = int(os.getenv("POSTGRES_MIN_CONN", "1"))
POSTGRES_MAX_CONN: int = int(os.getenv("POSTGRES_MAX_CONN", "10"))

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_HOST: str     = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int     = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int       = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
