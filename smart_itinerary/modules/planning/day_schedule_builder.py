"""
modules/planning/day_schedule_builder.py
----------------------------------------
Turns one day's ordered places into timed visit and travel activities.

Places keep their route order inside each time-of-day bucket; buckets run
morning, afternoon, flexible, evening, night.  For each place:

  earliest start = max(clock, preferred-window start, opening time)
  travel leg     = max(15, round(km x 3)) min, "auto" < 5 km else "car",
                   placed immediately before the visit
  meal hold      = the first visit landing in a lunch/dinner window leaves a
                   meal-sized gap in front of it (only if dining exists);
                   the gap is skipped when it would get the visit dropped

A place is dropped from the day (never rescheduled) when:
  - the visit cannot finish before closing time
  - it would start at/after the 23:00 cutoff and is not nightlife
  - it would end after midnight
  - the day's visit + travel minutes would pass budget + overload ceiling
    (never applied to the first visit of the day)

The clock then advances to the visit end + a 15-minute buffer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from smart_itinerary.schemas.itinerary import (
    TRAVEL,
    VISIT,
    DayItinerary,
    PlaceRef,
    ScheduledActivity,
    TravelInfo,
)
from smart_itinerary.schemas.knowledge import Budget, PlaceCategory, PlaceKnowledge
from smart_itinerary.schemas.settings import MealSlot, PlannerSettings
from smart_itinerary.modules.tool_usage.distance_tool import place_distance_km
from smart_itinerary.modules.tool_usage.time_tool import (
    AFTERNOON,
    EVENING,
    NIGHT,
    SCHEDULE_BUCKET_ORDER,
    format_hhmm,
    opening_window,
    optimal_time_of_day,
    parse_window,
    time_slot_for,
)

logger = logging.getLogger(__name__)


@dataclass
class DaySchedule:
    """Builder output: the day (visits + travel only) and what was dropped."""
    day: DayItinerary
    dropped: list[str] = field(default_factory=list)


@dataclass
class _Slot:
    """Tentative placement of one visit."""
    start: int
    travel_minutes: int = 0
    travel_km: float = 0.0
    hold: Optional[MealSlot] = None


class DayScheduleBuilder:

    def __init__(
        self,
        settings: PlannerSettings | None = None,
        budget: Budget | None = None,
        num_days: int = 1,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.budget = budget
        self.num_days = max(num_days, 1)

    # ── Public entry point ────────────────────────────────────────────────────

    def build(self, day_number: int, date_str: str, places: Sequence[PlaceKnowledge]) -> DaySchedule:
        s = self.settings
        day = DayItinerary(day=day_number, date=date_str)
        dropped: list[str] = []

        has_dining = any(p.nearby_restaurants for p in places)
        pending_holds = [m for m in s.meal_slots if m.hold] if has_dining else []

        clock = s.day_start
        scheduled_minutes = 0
        prev: Optional[PlaceKnowledge] = None
        visit_index = 0

        for place in self._schedule_order(places):
            if place.type == PlaceCategory.accommodation:
                continue

            slot = self._place_slot(place, clock, prev, pending_holds)
            duration = place.duration_minutes
            end = slot.start + duration
            reason = self._rejection_reason(place, slot, end, scheduled_minutes, prev is None)
            if reason and slot.hold is not None:
                # the meal gap cost the visit: place it without one
                slot = self._place_slot(place, clock, prev, [])
                end = slot.start + duration
                reason = self._rejection_reason(place, slot, end, scheduled_minutes, prev is None)
            if reason:
                logger.info("[scheduler] day %d: dropped %r (%s)", day_number, place.name, reason)
                dropped.append(place.name)
                continue

            if slot.hold is not None:
                pending_holds.remove(slot.hold)

            if prev is not None:
                travel = self._travel_activity(day_number, visit_index, place, slot)
                day.activities.append(travel)
                day.total_fatigue += travel.fatigue_impact
                day.travel_distance += slot.travel_km

            visit = self._visit_activity(day_number, visit_index, place, slot.start, duration)
            day.activities.append(visit)
            day.total_fatigue += visit.fatigue_impact
            day.total_cost += visit.estimated_cost or 0.0

            scheduled_minutes += slot.travel_minutes + duration
            clock = end + s.visit_buffer
            prev = place
            visit_index += 1

        day.travel_distance = round(day.travel_distance, 1)
        return DaySchedule(day=day, dropped=dropped)

    # ── Ordering ──────────────────────────────────────────────────────────────

    @staticmethod
    def _schedule_order(places: Sequence[PlaceKnowledge]) -> list[PlaceKnowledge]:
        # stable: route order survives inside each bucket
        return sorted(places, key=lambda p: SCHEDULE_BUCKET_ORDER[optimal_time_of_day(p)])

    # ── Placement ─────────────────────────────────────────────────────────────

    def _window_start(self, place: PlaceKnowledge) -> int:
        s = self.settings
        bucket = optimal_time_of_day(place)
        if bucket == AFTERNOON:
            return s.afternoon_start
        if bucket == EVENING:
            return s.evening_start
        if bucket == NIGHT:
            return s.night_start
        return s.day_start

    def _place_slot(
        self,
        place: PlaceKnowledge,
        clock: int,
        prev: Optional[PlaceKnowledge],
        pending_holds: list[MealSlot],
    ) -> _Slot:
        s = self.settings
        open_m, _ = opening_window(place, s.day_start, s.day_cutoff)
        earliest = max(clock, self._window_start(place), open_m)

        slot = _Slot(start=earliest)
        if prev is not None:
            slot.travel_km = place_distance_km(prev, place)
            slot.travel_minutes = max(s.min_travel_minutes, round(slot.travel_km * s.travel_minutes_per_km))
            slot.start = max(earliest, clock + slot.travel_minutes)

        for meal in pending_holds:
            window_open = meal.time - s.meal_shift_before
            window_close = meal.time + s.meal_shift_after
            if slot.start < window_open or clock > window_close:
                continue
            gap_start = max(clock, window_open)
            slot.start = max(slot.start, gap_start + meal.duration + slot.travel_minutes)
            slot.hold = meal
            break

        return slot

    def _rejection_reason(
        self,
        place: PlaceKnowledge,
        slot: _Slot,
        end: int,
        scheduled_minutes: int,
        is_first: bool,
    ) -> Optional[str]:
        s = self.settings
        _, close_m = opening_window(place, s.day_start, s.day_cutoff)
        if end > close_m:
            return f"ends {format_hhmm(end)} after closing {format_hhmm(close_m % (24 * 60))}"
        if slot.start >= s.day_cutoff and place.type != PlaceCategory.nightlife:
            return f"starts {format_hhmm(slot.start)} after day cutoff"
        if end > s.day_hard_end:
            return "would run past midnight"
        if not is_first and scheduled_minutes + slot.travel_minutes + place.duration_minutes > s.day_ceiling_minutes:
            return f"day would exceed {s.day_ceiling_minutes} scheduled minutes"
        return None

    # ── Activity construction ─────────────────────────────────────────────────

    def _slot_name(self, minutes: int) -> str:
        s = self.settings
        return time_slot_for(minutes, s.afternoon_start, s.evening_start, s.night_start)

    def _travel_activity(self, day_number: int, index: int, place: PlaceKnowledge, slot: _Slot) -> ScheduledActivity:
        s = self.settings
        start = slot.start - slot.travel_minutes
        return ScheduledActivity(
            id=f"travel-{day_number}-{index}",
            place=PlaceRef(
                name=f"Travel to {place.name}",
                type=PlaceCategory.destination.value,
                coordinates=place.coordinates,
            ),
            day=day_number,
            time_slot=self._slot_name(start),
            start_time=format_hhmm(start),
            end_time=format_hhmm(slot.start),
            duration=slot.travel_minutes,
            type=TRAVEL,
            fatigue_impact=round(slot.travel_minutes / 10),
            travel_from_prev=TravelInfo(
                distance=round(slot.travel_km, 1),
                duration=slot.travel_minutes,
                mode="car" if slot.travel_km >= s.car_mode_threshold_km else "auto",
            ),
        )

    def _visit_activity(
        self,
        day_number: int,
        index: int,
        place: PlaceKnowledge,
        start: int,
        duration: int,
    ) -> ScheduledActivity:
        return ScheduledActivity(
            id=f"visit-{day_number}-{index}",
            place=PlaceRef(name=place.name, type=place.type.value, coordinates=place.coordinates),
            day=day_number,
            time_slot=self._slot_name(start),
            start_time=format_hhmm(start),
            end_time=format_hhmm(start + duration),
            duration=duration,
            type=VISIT,
            fatigue_impact=self.settings.fatigue_by_type.get(place.type, self.settings.default_fatigue),
            crowd_level=crowd_level(start, place.crowd_peak_hours),
            best_time_reason=place.best_time_to_visit or None,
            estimated_cost=self.estimate_cost(place),
        )

    def estimate_cost(self, place: PlaceKnowledge) -> float:
        """Entry fee when known (0 = free), else a per-type estimate."""
        if place.entry_fee is not None:
            return float(place.entry_fee)
        s = self.settings
        if self.budget is not None:
            daily = self.budget.total / self.num_days
            return float(round(daily * s.cost_multipliers.get(place.type, s.default_cost_multiplier)))
        return s.static_costs.get(place.type, s.default_static_cost)


def crowd_level(start: int, peak_windows: Sequence[str], near_minutes: int = 60) -> str:
    """'high' inside a peak window, 'medium' within near_minutes of one, else 'low'."""
    windows = [w for w in (parse_window(p) for p in peak_windows) if w is not None]
    for lo, hi in windows:
        if lo <= start <= hi:
            return "high"
    for lo, hi in windows:
        gap = lo - start if start < lo else start - hi
        if gap < near_minutes:
            return "medium"
    return "low"
