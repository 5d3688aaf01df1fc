"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET   /v1/health
    POST  /v1/tours/{tour_id}/travel-plan/open
    POST  /v1/tours/{tour_id}/travel-plan/generate
    GET   /v1/tours/{tour_id}/travel-plan
    PATCH /v1/tours/{tour_id}/travel-plan/segments/{segment_id}
    POST  /v1/tours/{tour_id}/travel-plan/save
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api.routes import health, travel_plan
from db.connection import close_pool

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown: close session event logs and the Postgres pool (if one was opened)
    travel_plan.reset_state()
    close_pool()


app = FastAPI(
    lifespan=lifespan,
    title="Tour Travel Planner API",
    version="1.0.0",
    description=(
        "Generates and edits tour travel plans: home base → venue, "
        "venue → venue and rest-gap returns, with great-circle distances."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the production-management frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,      prefix="/v1",       tags=["Health"])
app.include_router(travel_plan.router, prefix="/v1/tours", tags=["TravelPlan"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
