"""
Structured JSON logger — append-only, one object per line (.jsonl).

Usage:
    from modules.observability.logger import StructuredLogger

    logger = StructuredLogger()
    logger.log("tour_42", "PLAN_GENERATED", {"segment_count": 5})

Logs are written to  <LOGS_DIR>/<tour_id>.jsonl  (config.LOGS_DIR unless a
directory is passed explicitly).  The directory is resolved when a file is
first opened, not at construction time.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

import config

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else None
        self._lock = threading.Lock()
        self._handles: dict[str, TextIO] = {}  # stream_id -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, stream_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<stream_id>.jsonl``."""
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tour_id": stream_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(stream_id)
            if fh is None:
                fh = self._open(stream_id)
            fh.write(line)
            fh.flush()

    def close(self, stream_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if stream_id:
                fh = self._handles.pop(stream_id, None)
                if fh:
                    fh.close()
            else:
                for fh in self._handles.values():
                    fh.close()
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, stream_id: str) -> TextIO:
        logs_dir = self._logs_dir or Path(config.LOGS_DIR)
        os.makedirs(logs_dir, exist_ok=True)
        path = logs_dir / f"{_UNSAFE_CHARS.sub('_', stream_id)}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[stream_id] = fh
        return fh
