"""
modules/validation/knowledge_validator.py
------------------------------------------
Data-quality guards applied to place-knowledge records before planning.

The engine must degrade instead of failing, so problems found here are
repaired rather than rejected:

  PlaceKnowledge:
    ✓ Coordinates in range and not the (0, 0) null island  -> else None (distance 0)
    ✓ typicalDuration >= 0                                  -> else per-type default
    ✓ openingHours open/close are valid HH:MM               -> else None (always open)
    ✓ crowdPeakHours entries are "HH:MM-HH:MM"              -> else dropped
    ✓ Name unique within the trip                           -> later duplicates dropped

  Trip:
    ✓ end >= start (reversed ranges are still planned over the same span)

Usage:
    from smart_itinerary.modules.validation import normalize_knowledge

    places = normalize_knowledge(raw_records)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union

from smart_itinerary.schemas.knowledge import (
    DEFAULT_DURATIONS,
    Budget,
    DateRange,
    PlaceKnowledge,
)
from smart_itinerary.modules.tool_usage.time_tool import parse_hhmm, parse_window

logger = logging.getLogger(__name__)

KnowledgeInput = Union[PlaceKnowledge, Mapping[str, Any]]


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:   True iff there are zero errors.
        errors:  Human-readable list of failure reasons.
        repairs: Field updates that make the record usable (model_copy(update=...)).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    repairs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Place validation ───────────────────────────────────────────────────────────

def validate_place(place: PlaceKnowledge) -> ValidationResult:
    """Check one record and collect the repairs needed to plan with it."""
    errors: list[str] = []
    repairs: dict[str, Any] = {}

    # ── Coordinates ────────────────────────────────────────────────────────
    c = place.coordinates
    if c is not None:
        if not (-90.0 <= c.lat <= 90.0) or not (-180.0 <= c.lng <= 180.0):
            errors.append(f"coordinates ({c.lat}, {c.lng}) out of range")
            repairs["coordinates"] = None
        elif c.lat == 0.0 and c.lng == 0.0:
            errors.append("coordinates (0, 0): likely a missing/default value")
            repairs["coordinates"] = None

    # ── Duration ───────────────────────────────────────────────────────────
    if place.typical_duration is None or place.typical_duration < 0:
        if place.typical_duration is not None:
            errors.append(f"typicalDuration={place.typical_duration} must be >= 0")
        repairs["typical_duration"] = DEFAULT_DURATIONS[place.type]

    # ── Opening hours ──────────────────────────────────────────────────────
    oh = place.opening_hours
    if oh is not None and (parse_hhmm(oh.open) is None or parse_hhmm(oh.close) is None):
        errors.append(f"openingHours {oh.open!r}-{oh.close!r} is not HH:MM")
        repairs["opening_hours"] = None

    # ── Crowd windows ──────────────────────────────────────────────────────
    good_windows = [w for w in place.crowd_peak_hours if parse_window(w) is not None]
    if len(good_windows) != len(place.crowd_peak_hours):
        bad = [w for w in place.crowd_peak_hours if w not in good_windows]
        errors.append(f"crowdPeakHours entries not HH:MM-HH:MM: {bad}")
        repairs["crowd_peak_hours"] = good_windows

    # A missing duration alone is filled silently; it is not an error.
    return ValidationResult(valid=len(errors) == 0, errors=errors, repairs=repairs)


def validate_trip(dates: DateRange, budget: Budget | None = None) -> ValidationResult:
    errors: list[str] = []
    if dates.end < dates.start:
        errors.append(f"end={dates.end} is before start={dates.start}")
    if budget is not None and budget.total == 0:
        errors.append("budget total is 0; per-type cost estimates will be 0")
    return ValidationResult(valid=len(errors) == 0, errors=errors)


# ── Batch normalisation ────────────────────────────────────────────────────────

def coerce_knowledge(records: Iterable[KnowledgeInput]) -> list[PlaceKnowledge]:
    """Accept PlaceKnowledge instances or raw dicts (camelCase or snake_case)."""
    return [
        r if isinstance(r, PlaceKnowledge) else PlaceKnowledge.model_validate(r)
        for r in records
    ]


def normalize_knowledge(records: Iterable[KnowledgeInput]) -> list[PlaceKnowledge]:
    """
    Return planning-ready copies of the input records, in input order.

    Never raises for data-quality problems; every repair is logged.  The
    original records are left untouched.
    """
    places = coerce_knowledge(records)
    seen: set[str] = set()
    cleaned: list[PlaceKnowledge] = []

    for place in places:
        if place.name in seen:
            logger.warning("[validator] duplicate place name %r dropped", place.name)
            continue
        seen.add(place.name)

        result = validate_place(place)
        if not result.valid:
            logger.warning("[validator] repaired %r: %s", place.name, "; ".join(result.errors))
        cleaned.append(place.model_copy(update=result.repairs) if result.repairs else place)

    return cleaned
