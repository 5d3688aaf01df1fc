"""
modules/validation package — data quality guards for tour data.
"""
from modules.validation.ingestion_validator import (
    ValidationResult,
    validate_coordinates,
    validate_home_base,
    validate_segment,
    filter_valid,
)

__all__ = [
    "ValidationResult",
    "validate_coordinates",
    "validate_home_base",
    "validate_segment",
    "filter_valid",
]
