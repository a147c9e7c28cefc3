"""modules/planning: day assignment, route ordering, scheduling and meals."""

from smart_itinerary.modules.planning.day_bin_packer import DayBin, DayBinPacker, PackingResult
from smart_itinerary.modules.planning.day_schedule_builder import (
    DaySchedule, DayScheduleBuilder, crowd_level,
)
from smart_itinerary.modules.planning.fatigue_advisor import fatigue_level, suggest_adjustments
from smart_itinerary.modules.planning.itinerary_summarizer import (
    build_route, missing_categories, summarize, unscheduled_places,
)
from smart_itinerary.modules.planning.meal_planner import MealPlanner, best_restaurant
from smart_itinerary.modules.planning.recommendations import day_recommendations
from smart_itinerary.modules.planning.region_clusterer import (
    assign_regions_to_days, group_by_region, split_region,
)
from smart_itinerary.modules.planning.route_orderer import order_route, route_distance_km

__all__ = [
    "DayBin",
    "DayBinPacker",
    "PackingResult",
    "DaySchedule",
    "DayScheduleBuilder",
    "crowd_level",
    "fatigue_level",
    "suggest_adjustments",
    "build_route",
    "missing_categories",
    "summarize",
    "unscheduled_places",
    "MealPlanner",
    "best_restaurant",
    "day_recommendations",
    "assign_regions_to_days",
    "group_by_region",
    "split_region",
    "order_route",
    "route_distance_km",
]
