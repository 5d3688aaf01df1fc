#!/usr/bin/env python
"""
scripts/run_migrations.py
--------------------------
Applies every docs/database/*.sql file, in name order, to the configured
Postgres database.

Usage:
    python scripts/run_migrations.py [--dry-run]

Exit codes:
    0 — migrations applied successfully (or dry-run completed)
    1 — connection failed or SQL error

All files run in a single transaction; the schema files use IF NOT EXISTS
so re-running is safe.
"""

from __future__ import annotations

import argparse
import pathlib
import re
import sys

# Add the backend directory to sys.path so that config is importable
_BACKEND_DIR = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_BACKEND_DIR))

import psycopg2  # noqa: E402

import config  # noqa: E402

_SQL_DIR = _BACKEND_DIR / "docs" / "database"


def _statements(sql: str) -> list[str]:
    """Strip /* */ and -- comments, split on semicolons, drop blanks."""
    sql = re.sub(r"/\*.*?\*/", "", sql, flags=re.DOTALL)
    sql = re.sub(r"--[^\n]*", "", sql)
    return [s.strip() for s in sql.split(";") if s.strip()]


def collect() -> list[tuple[pathlib.Path, str]]:
    files = sorted(_SQL_DIR.glob("*.sql"))
    if not files:
        raise FileNotFoundError(f"no .sql files in {_SQL_DIR}")
    return [
        (path, stmt)
        for path in files
        for stmt in _statements(path.read_text(encoding="utf-8"))
    ]


def run(dry_run: bool = False) -> None:
    statements = collect()
    print(f"[migrations] Statements : {len(statements)}")
    print(f"[migrations] Target DB  : {config.POSTGRES_DB} @ "
          f"{config.POSTGRES_HOST}:{config.POSTGRES_PORT}")

    if dry_run:
        for i, (path, stmt) in enumerate(statements, 1):
            print(f"  [{i:03d}] {path.name}: {stmt[:70].replace(chr(10), ' ')}...")
        print("[migrations] DRY-RUN — no changes applied.")
        return

    conn = psycopg2.connect(
        host=config.POSTGRES_HOST,
        port=config.POSTGRES_PORT,
        dbname=config.POSTGRES_DB,
        user=config.POSTGRES_USER,
        password=config.POSTGRES_PASSWORD,
    )
    try:
        with conn.cursor() as cur:
            for path, stmt in statements:
                cur.execute(stmt)
                print(f"  [✓] {path.name}: {stmt[:60].replace(chr(10), ' ')}")
        conn.commit()
        print(f"[migrations] Done — {len(statements)} statements applied.")
    except Exception:
        conn.rollback()
        print("[migrations] ROLLED BACK due to error.")
        raise
    finally:
        conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Apply Postgres schema migrations.")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print statements without executing them.")
    args = parser.parse_args()
    try:
        run(dry_run=args.dry_run)
    except Exception as exc:
        print(f"[migrations] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
