"""
schemas/settings.py
-------------------
Explicit configuration structure for one itinerary generation run.

PlannerSettings bundles every tuned constant the planning modules use.  The
defaults come from config.py (and therefore from the environment); a caller
that needs a different locale profile builds its own instance and passes it to
generate_smart_itinerary(settings=...).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from smart_itinerary import config
from smart_itinerary.schemas.knowledge import PlaceCategory


@dataclass(frozen=True)
class MealSlot:
    """One of the fixed daily meal slots."""
    key: str                 # id prefix, e.g. "lunch"
    label: str               # shown as bestTimeReason
    time: int                # preferred start, minutes from midnight
    duration: int            # minutes
    cost: float
    prefer_cafe: bool
    hold: bool = False       # scheduler keeps a gap for this meal


def _default_meal_slots() -> tuple[MealSlot, ...]:
    return (
        MealSlot("breakfast",    "Breakfast",    7 * 60 + 30,  45, 250.0, True),
        MealSlot("morningSnack", "Morning Tea",  10 * 60 + 30, 20, 100.0, True),
        MealSlot("lunch",        "Lunch",        12 * 60 + 30, 60, 400.0, False, hold=True),
        MealSlot("eveningSnack", "Refreshments", 16 * 60 + 30, 20, 150.0, True),
        MealSlot("dinner",       "Dinner",       19 * 60 + 30, 75, 600.0, False, hold=True),
    )


def _default_fatigue_by_type() -> dict[PlaceCategory, int]:
    return {
        PlaceCategory.beach:       20,
        PlaceCategory.fort:        35,
        PlaceCategory.landmark:    25,
        PlaceCategory.activity:    40,
        PlaceCategory.nightlife:   30,
        PlaceCategory.restaurant:  -5,
        PlaceCategory.destination: 20,
    }


def _default_static_costs() -> dict[PlaceCategory, float]:
    return {
        PlaceCategory.beach:       0.0,
        PlaceCategory.fort:        100.0,
        PlaceCategory.landmark:    150.0,
        PlaceCategory.activity:    500.0,
        PlaceCategory.nightlife:   1000.0,
        PlaceCategory.restaurant:  400.0,
        PlaceCategory.destination: 100.0,
    }


def _default_cost_multipliers() -> dict[PlaceCategory, float]:
    # share of the per-day budget
    return {
        PlaceCategory.beach:       0.0,
        PlaceCategory.fort:        0.02,
        PlaceCategory.landmark:    0.03,
        PlaceCategory.activity:    0.1,
        PlaceCategory.nightlife:   0.2,
        PlaceCategory.restaurant:  0.08,
        PlaceCategory.destination: 0.02,
    }


@dataclass(frozen=True)
class PlannerSettings:
    day_assignment: str = config.DAY_ASSIGNMENT_STRATEGY

    region_radius_km: float = config.REGION_RADIUS_KM
    micro_cluster_minutes: float = config.MICRO_CLUSTER_MINUTES
    overload_ceiling_minutes: int = config.OVERLOAD_CEILING_MINUTES
    rebalance_max_iterations: int = config.REBALANCE_MAX_ITERATIONS
    split_max_iterations: int = config.SPLIT_MAX_ITERATIONS

    bin_packing_speed_kmh: float = config.BIN_PACKING_SPEED_KMH
    travel_minutes_per_km: float = config.TRAVEL_MINUTES_PER_KM
    min_travel_minutes: int = config.MIN_TRAVEL_MINUTES
    car_mode_threshold_km: float = config.CAR_MODE_THRESHOLD_KM

    day_start: int = config.DAY_START_MINUTES
    day_end: int = config.DAY_END_MINUTES
    day_cutoff: int = config.DAY_CUTOFF_MINUTES
    day_hard_end: int = config.DAY_HARD_END_MINUTES
    afternoon_start: int = config.AFTERNOON_START_MINUTES
    evening_start: int = config.EVENING_START_MINUTES
    night_start: int = config.NIGHT_START_MINUTES

    lunch_buffer: int = config.LUNCH_BUFFER_MINUTES
    dinner_buffer: int = config.DINNER_BUFFER_MINUTES
    rest_buffer: int = config.REST_BUFFER_MINUTES
    visit_buffer: int = config.VISIT_BUFFER_MINUTES

    meal_slots: tuple[MealSlot, ...] = field(default_factory=_default_meal_slots)
    meal_fatigue: int = config.MEAL_FATIGUE
    meal_shift_before: int = config.MEAL_SHIFT_BEFORE_MINUTES
    meal_shift_after: int = config.MEAL_SHIFT_AFTER_MINUTES

    fatigue_by_type: dict[PlaceCategory, int] = field(default_factory=_default_fatigue_by_type)
    default_fatigue: int = 20
    daily_fatigue_budget: int = config.DAILY_FATIGUE_BUDGET

    static_costs: dict[PlaceCategory, float] = field(default_factory=_default_static_costs)
    cost_multipliers: dict[PlaceCategory, float] = field(default_factory=_default_cost_multipliers)
    default_static_cost: float = config.DEFAULT_STATIC_COST
    default_cost_multiplier: float = config.DEFAULT_COST_MULTIPLIER

    @property
    def effective_day_minutes(self) -> int:
        """Activity + travel budget per day: 08:00-21:00 minus meal/rest buffers (615)."""
        raw = self.day_end - self.day_start
        return raw - (self.lunch_buffer + self.dinner_buffer + self.rest_buffer)

    @property
    def day_ceiling_minutes(self) -> int:
        return self.effective_day_minutes + self.overload_ceiling_minutes
