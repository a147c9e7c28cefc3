"""
modules/planning/route_orderer.py
---------------------------------
Orders one day's places into a visiting sequence.

  1. Seed with the place whose time-of-day preference is earliest
     (morning < afternoon < evening < night < flexible; ties -> input order).
  2. Repeatedly append the unvisited place nearest (great-circle) to the
     current one.

Greedy nearest-neighbour only: no 2-opt, no backtracking.
"""

from __future__ import annotations

from typing import Sequence

from smart_itinerary.schemas.knowledge import PlaceKnowledge
from smart_itinerary.modules.tool_usage.distance_tool import place_distance_km
from smart_itinerary.modules.tool_usage.time_tool import TIME_OF_DAY_ORDER, optimal_time_of_day


def order_route(places: Sequence[PlaceKnowledge]) -> list[PlaceKnowledge]:
    if len(places) <= 1:
        return list(places)

    remaining = list(places)
    # min() keeps the first of equal keys, i.e. input order on ties
    start = min(
        range(len(remaining)),
        key=lambda i: TIME_OF_DAY_ORDER[optimal_time_of_day(remaining[i])],
    )
    current = remaining.pop(start)
    ordered = [current]

    while remaining:
        nearest = min(
            range(len(remaining)),
            key=lambda i: place_distance_km(current, remaining[i]),
        )
        current = remaining.pop(nearest)
        ordered.append(current)

    return ordered


def route_distance_km(places: Sequence[PlaceKnowledge]) -> float:
    """Total great-circle km when visiting places in the given order."""
    return sum(
        place_distance_km(places[i - 1], places[i]) for i in range(1, len(places))
    )
