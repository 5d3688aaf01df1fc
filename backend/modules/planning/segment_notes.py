"""
modules/planning/segment_notes.py
---------------------------------
Localized default notes written onto generated segments.
"""

from __future__ import annotations

import config

_CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "departure":    "Departure from home base",
        "gap_return":   "Return to base - {days} rest days",
        "gap_resume":   "Departure after {days} rest days",
        "direct":       "Direct travel between dates",
        "final_return": "Final return to base",
    },
    "es": {
        "departure":    "Salida desde la base",
        "gap_return":   "Regreso a base - {days} días de descanso",
        "gap_resume":   "Salida después de {days} días de descanso",
        "direct":       "Viaje directo entre fechas",
        "final_return": "Regreso final a base",
    },
}

SUPPORTED_LOCALES: tuple[str, ...] = tuple(_CATALOG)


def note(key: str, locale: str | None = None, **params: object) -> str:
    """Render note *key*; unknown locales fall back to English."""
    messages = _CATALOG.get(locale or config.PLAN_LOCALE, _CATALOG["en"])
    return messages[key].format(**params)
