"""
modules/planning package — tour travel plan generation and editing.
"""
from modules.planning.errors import (
    ConfigurationError,
    EditNotAllowedError,
    InvalidSegmentFieldError,
    MissingConfigurationError,
    PersistenceError,
    SaveInProgressError,
    TravelPlanError,
)
from modules.planning.travel_planner import (
    DataQualityWarning,
    GenerationResult,
    TravelPlanGenerator,
    generate_travel_plan,
)
from modules.planning.segment_store import PlanState, PlanSummary, SegmentStore
from modules.planning.plan_session import TravelPlanSession, save_travel_plan

__all__ = [
    "ConfigurationError",
    "EditNotAllowedError",
    "InvalidSegmentFieldError",
    "MissingConfigurationError",
    "PersistenceError",
    "SaveInProgressError",
    "TravelPlanError",
    "DataQualityWarning",
    "GenerationResult",
    "TravelPlanGenerator",
    "generate_travel_plan",
    "PlanState",
    "PlanSummary",
    "SegmentStore",
    "TravelPlanSession",
    "save_travel_plan",
]
