"""
api/routes/health.py
--------------------
Health-check endpoint — used by load balancers, Docker health probes, etc.
Reports which plan-store and save-gate backends this worker was started with.
"""
from __future__ import annotations

from fastapi import APIRouter

import config

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    return {
        "status": "ok",
        "service": "tour-travel-planner",
        "plan_store": config.PLAN_STORE_BACKEND,
        "save_gate": config.SAVE_GATE_BACKEND,
    }
