"""
modules/validation package: data quality guards before any planning step.
"""
from smart_itinerary.modules.validation.knowledge_validator import (
    ValidationResult,
    validate_place,
    validate_trip,
    coerce_knowledge,
    normalize_knowledge,
)

__all__ = [
    "ValidationResult",
    "validate_place",
    "validate_trip",
    "coerce_knowledge",
    "normalize_knowledge",
]
