"""
modules/planning/meal_planner.py
--------------------------------
Inserts up to five fixed meal slots into a scheduled day.

Slot applicability depends on the day's activity span (first start, last end):

  breakfast     07:30 / 45 min  first start <= 08:30
  morning snack 10:30 / 20 min  span covers 10:30
  lunch         12:30 / 60 min  first start <= 12:30 and last end >= 12:00
  evening snack 16:30 / 20 min  span covers 16:30
  dinner        19:30 / 75 min  last end >= 18:30

Restaurants come from the pooled nearbyRestaurants of the day's places and
are ranked by (a) type preference (cafes for breakfast/snacks, restaurants
for main meals), (b) rating, (c) distance.  Each is used once per day.

A meal is placed at the non-overlapping start nearest its slot time within
[slot - 60, slot + 90]; if nothing fits, the meal is left out.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from smart_itinerary.schemas.itinerary import MEAL, DayItinerary, PlaceRef, ScheduledActivity
from smart_itinerary.schemas.knowledge import NearbyPlace, PlaceCategory, PlaceKnowledge
from smart_itinerary.schemas.settings import MealSlot, PlannerSettings
from smart_itinerary.modules.tool_usage.time_tool import format_hhmm, parse_hhmm, time_slot_for

logger = logging.getLogger(__name__)


class MealPlanner:

    def __init__(self, settings: PlannerSettings | None = None) -> None:
        self.settings = settings or PlannerSettings()

    def plan(self, day: DayItinerary, places: Sequence[PlaceKnowledge]) -> DayItinerary:
        """Add meal activities (plus their cost and fatigue) to day in place."""
        pool = [r for p in places for r in p.nearby_restaurants]
        if not pool or not day.activities:
            return day

        used: set[str] = set()
        for meal in self.applicable_slots(day):
            restaurant = best_restaurant(pool, used, meal.prefer_cafe)
            if restaurant is None:
                break
            start = self._find_start(day, meal)
            if start is None:
                logger.debug("[meals] day %d: no free gap for %s", day.day, meal.key)
                continue

            day.activities.append(self._meal_activity(day.day, meal, restaurant, start))
            used.add(restaurant.name)
            day.total_cost += meal.cost
            day.total_fatigue += self.settings.meal_fatigue
            self._sort(day)

        return day

    # ── Slot selection ────────────────────────────────────────────────────────

    def applicable_slots(self, day: DayItinerary) -> list[MealSlot]:
        if not day.activities:
            return []
        first = min(_start(a) for a in day.activities)
        last = max(_end(a) for a in day.activities)

        chosen: list[MealSlot] = []
        for meal in self.settings.meal_slots:
            key = meal.key
            if key == "breakfast":
                ok = first <= meal.time + 60
            elif key == "lunch":
                ok = first <= meal.time and last >= meal.time - 30
            elif key == "dinner":
                ok = last >= meal.time - 60
            else:
                ok = first <= meal.time <= last
            if ok:
                chosen.append(meal)
        return chosen

    # ── Placement ─────────────────────────────────────────────────────────────

    def _find_start(self, day: DayItinerary, meal: MealSlot) -> Optional[int]:
        s = self.settings
        lo = meal.time - s.meal_shift_before
        hi = meal.time + s.meal_shift_after
        busy = [(_start(a), _end(a)) for a in day.activities]

        candidates = {meal.time}
        for a_start, a_end in busy:
            candidates.add(a_end)
            candidates.add(a_start - meal.duration)

        feasible = [
            c for c in candidates
            if lo <= c <= hi
            and c + meal.duration <= s.day_hard_end
            and all(c + meal.duration <= b_start or c >= b_end for b_start, b_end in busy)
        ]
        if not feasible:
            return None
        return min(feasible, key=lambda c: (abs(c - meal.time), c))

    def _meal_activity(self, day_number: int, meal: MealSlot, restaurant: NearbyPlace, start: int) -> ScheduledActivity:
        s = self.settings
        return ScheduledActivity(
            id=f"{meal.key}-{day_number}",
            place=PlaceRef(
                name=restaurant.name,
                type=PlaceCategory.restaurant.value,
                coordinates=restaurant.coordinates,
            ),
            day=day_number,
            time_slot=time_slot_for(start, s.afternoon_start, s.evening_start, s.night_start),
            start_time=format_hhmm(start),
            end_time=format_hhmm(start + meal.duration),
            duration=meal.duration,
            type=MEAL,
            fatigue_impact=s.meal_fatigue,
            best_time_reason=meal.label,
            estimated_cost=meal.cost,
        )

    @staticmethod
    def _sort(day: DayItinerary) -> None:
        day.activities.sort(key=_start)


def best_restaurant(
    pool: Sequence[NearbyPlace],
    used: set[str],
    prefer_cafe: bool,
) -> Optional[NearbyPlace]:
    """Best unused candidate by type preference, then rating, then distance."""
    available = [r for r in pool if r.name not in used]
    if not available:
        return None

    def rank(r: NearbyPlace):
        type_miss = 0 if r.is_cafe == prefer_cafe else 1
        return (type_miss, -(r.rating or 0.0), r.distance or 0.0)

    return min(available, key=rank)


def _start(activity: ScheduledActivity) -> int:
    return parse_hhmm(activity.start_time) or 0


def _end(activity: ScheduledActivity) -> int:
    end = parse_hhmm(activity.end_time)
    return end if end is not None else _start(activity) + activity.duration
