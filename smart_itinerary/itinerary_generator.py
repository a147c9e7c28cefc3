"""
itinerary_generator.py
----------------------
Entry point: place knowledge + date range + optional budget -> GeneratedItinerary.

Pipeline:
  1. normalize_knowledge()     repair/default the records (never raises)
  2. day assignment            DayBinPacker (default) or region assignment
  3. per day:
       DayScheduleBuilder      timed visits + travel legs
       MealPlanner             meal slots into the gaps
       recommendations         missing-category suggestions
       fatigue advisor         level + adjustment hints
  4. summarize()               trip totals, route polyline

Each day depends only on its own bin, so iter_day_itineraries() yields
finished days one at a time; a consumer that stops early keeps every day it
already received.
"""

from __future__ import annotations

import logging
import time as _time_mod
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from smart_itinerary.schemas.itinerary import DayItinerary, GeneratedItinerary
from smart_itinerary.schemas.knowledge import Budget, DateRange, PlaceCategory, PlaceKnowledge
from smart_itinerary.schemas.settings import PlannerSettings
from smart_itinerary.modules.observability.logger import StructuredLogger
from smart_itinerary.modules.planning.day_bin_packer import DayBinPacker
from smart_itinerary.modules.planning.day_schedule_builder import DayScheduleBuilder
from smart_itinerary.modules.planning.fatigue_advisor import fatigue_level, suggest_adjustments
from smart_itinerary.modules.planning.itinerary_summarizer import build_route, summarize
from smart_itinerary.modules.planning.meal_planner import MealPlanner
from smart_itinerary.modules.planning.recommendations import day_recommendations
from smart_itinerary.modules.planning.region_clusterer import assign_regions_to_days
from smart_itinerary.modules.planning.route_orderer import order_route
from smart_itinerary.modules.tool_usage.time_tool import parse_hhmm
from smart_itinerary.modules.validation.knowledge_validator import (
    KnowledgeInput,
    normalize_knowledge,
    validate_trip,
)
from smart_itinerary import config

logger = logging.getLogger(__name__)

_perf_logger = StructuredLogger()

DatesInput = Union[DateRange, Mapping[str, Any]]
BudgetInput = Union[Budget, Mapping[str, Any], None]


def _coerce_dates(dates: DatesInput) -> DateRange:
    return dates if isinstance(dates, DateRange) else DateRange.model_validate(dates)


def _coerce_budget(budget: BudgetInput) -> Optional[Budget]:
    if budget is None or isinstance(budget, Budget):
        return budget
    return Budget.model_validate(budget)


def _iso_timestamp(now: Optional[datetime]) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _assert_no_overlap(day: DayItinerary) -> None:
    """Final self-check: activities sorted by start and never overlapping."""
    prev_end = None
    prev_id = None
    for a in day.activities:
        start, end = parse_hhmm(a.start_time), parse_hhmm(a.end_time)
        if prev_end is not None and start < prev_end:
            raise RuntimeError(
                f"ERROR_SCHEDULE_OVERLAP: day {day.day} activity {a.id!r} starts "
                f"{a.start_time} before {prev_id!r} ends"
            )
        prev_end, prev_id = end, a.id


def _assign_days(
    visitable: list[PlaceKnowledge],
    num_days: int,
    settings: PlannerSettings,
) -> list[list[PlaceKnowledge]]:
    if settings.day_assignment == "regions":
        groups = assign_regions_to_days(
            visitable, num_days, settings.region_radius_km, settings.split_max_iterations
        )
        return [order_route(g) for g in groups]
    if settings.day_assignment != "bin_packing":
        logger.warning("[generator] unknown day assignment %r; using bin_packing", settings.day_assignment)
    result = DayBinPacker(settings).pack(visitable, num_days)
    return [b.places for b in result.bins]


def _iter_days(
    places: list[PlaceKnowledge],
    dates: DateRange,
    budget: Optional[Budget],
    settings: PlannerSettings,
) -> Iterator[DayItinerary]:
    num_days = dates.num_days
    visitable = [p for p in places if p.type != PlaceCategory.accommodation]
    bins = _assign_days(visitable, num_days, settings)

    builder = DayScheduleBuilder(settings, budget, num_days)
    meals = MealPlanner(settings)

    for i in range(num_days):
        day_number = i + 1
        date_str = (dates.start + timedelta(days=i)).isoformat()
        day_places = bins[i] if i < len(bins) else []

        schedule = builder.build(day_number, date_str, day_places)
        day = meals.plan(schedule.day, day_places)
        day.recommendations = day_recommendations(day_places)
        day.fatigue_level = fatigue_level(day.total_fatigue)
        day.adjustments = suggest_adjustments(day, settings.daily_fatigue_budget)
        _assert_no_overlap(day)
        yield day


def iter_day_itineraries(
    knowledge: Iterable[KnowledgeInput],
    dates: DatesInput,
    budget: BudgetInput = None,
    *,
    settings: PlannerSettings | None = None,
) -> Iterator[DayItinerary]:
    """Yield each finished DayItinerary in day order."""
    places = normalize_knowledge(knowledge)
    yield from _iter_days(places, _coerce_dates(dates), _coerce_budget(budget), settings or PlannerSettings())


def generate_smart_itinerary(
    knowledge: Iterable[KnowledgeInput],
    dates: DatesInput,
    budget: BudgetInput = None,
    *,
    settings: PlannerSettings | None = None,
    now: Optional[datetime] = None,
) -> GeneratedItinerary:
    """
    Generate a complete day-by-day itinerary.

    Args:
        knowledge: PlaceKnowledge records or equivalent dicts.
        dates:     DateRange or {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}.
        budget:    Budget, {"total", "currency", "perPerson"} or None (static costs).
        settings:  PlannerSettings override (e.g. a different transit-speed profile).
        now:       Timestamp for generatedAt; pass a fixed value for
                   reproducible output.

    Raises:
        pydantic.ValidationError for malformed top-level input (unparseable
        dates, records without a name).  Data-quality issues inside records
        are repaired, never raised.
    """
    _t0 = _time_mod.perf_counter()
    settings = settings or PlannerSettings()
    date_range = _coerce_dates(dates)
    trip_budget = _coerce_budget(budget)
    places = normalize_knowledge(knowledge)

    trip_check = validate_trip(date_range, trip_budget)
    for problem in trip_check.errors:
        logger.warning("[generator] %s", problem)

    logger.info(
        "[generator] generating itinerary for %d places, %s to %s",
        len(places), date_range.start, date_range.end,
    )

    days = list(_iter_days(places, date_range, trip_budget, settings))
    currency = trip_budget.currency if trip_budget else config.DEFAULT_CURRENCY
    summary = summarize(days, places, date_range.num_days, currency)

    itinerary = GeneratedItinerary(
        days=days,
        route=build_route(days),
        summary=summary,
        generated_at=_iso_timestamp(now),
    )

    logger.info(
        "[generator] generated %d days, %d visits, %.1f km total",
        len(days), summary.places_visited, summary.distance_traveled,
    )
    if summary.unscheduled_places:
        logger.info("[generator] could not schedule: %s", ", ".join(summary.unscheduled_places))

    _perf_logger.log("itinerary", "PERFORMANCE", {
        "component": "generate_smart_itinerary",
        "places": len(places),
        "days": len(days),
        "duration_ms": round((_time_mod.perf_counter() - _t0) * 1000, 2),
    })
    return itinerary
