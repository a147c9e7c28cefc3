"""
modules/planning/itinerary_summarizer.py
----------------------------------------
Trip-level aggregation over all scheduled days.
"""

from __future__ import annotations

from typing import Sequence

from smart_itinerary.schemas.itinerary import VISIT, DayItinerary, ItinerarySummary
from smart_itinerary.schemas.knowledge import (
    RECOMMENDED_CATEGORIES,
    Coords,
    PlaceCategory,
    PlaceKnowledge,
)


def missing_categories(places: Sequence[PlaceKnowledge]) -> list[str]:
    """Recommended categories (beach, restaurant, landmark) absent from the input."""
    present = {p.type for p in places}
    return [c.value for c in RECOMMENDED_CATEGORIES if c not in present]


def build_route(days: Sequence[DayItinerary]) -> list[Coords]:
    """Visit coordinates in day/time order, for the map polyline."""
    return [
        a.place.coordinates
        for day in days
        for a in day.activities
        if a.type == VISIT and a.place.coordinates is not None
    ]


def unscheduled_places(places: Sequence[PlaceKnowledge], days: Sequence[DayItinerary]) -> list[str]:
    """Visitable places (input order) that ended up on no day."""
    visited = {a.place.name for day in days for a in day.activities_of(VISIT)}
    return [
        p.name for p in places
        if p.type != PlaceCategory.accommodation and p.name not in visited
    ]


def summarize(
    days: Sequence[DayItinerary],
    knowledge: Sequence[PlaceKnowledge],
    num_days: int,
    currency: str = "INR",
) -> ItinerarySummary:
    total_fatigue = sum(d.total_fatigue for d in days)
    return ItinerarySummary(
        total_days=num_days,
        total_cost=sum(d.total_cost for d in days),
        currency=currency,
        places_visited=sum(len(d.activities_of(VISIT)) for d in days),
        distance_traveled=round(sum(d.travel_distance for d in days), 1),
        average_fatigue_per_day=round(total_fatigue / num_days) if num_days else 0,
        missing_categories=missing_categories(knowledge),
        unscheduled_places=unscheduled_places(knowledge, days),
    )
