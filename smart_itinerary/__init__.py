"""smart_itinerary: deterministic day-by-day itinerary generation from place knowledge."""

from smart_itinerary.itinerary_generator import generate_smart_itinerary, iter_day_itineraries
from smart_itinerary.schemas.itinerary import (
    DayItinerary,
    GeneratedItinerary,
    ItinerarySummary,
    PlaceRecommendation,
    ScheduledActivity,
)
from smart_itinerary.schemas.knowledge import (
    Budget,
    Coords,
    DateRange,
    NearbyPlace,
    OpeningHours,
    PlaceCategory,
    PlaceKnowledge,
)
from smart_itinerary.schemas.settings import MealSlot, PlannerSettings

__all__ = [
    "generate_smart_itinerary",
    "iter_day_itineraries",
    "DayItinerary",
    "GeneratedItinerary",
    "ItinerarySummary",
    "PlaceRecommendation",
    "ScheduledActivity",
    "Budget",
    "Coords",
    "DateRange",
    "NearbyPlace",
    "OpeningHours",
    "PlaceCategory",
    "PlaceKnowledge",
    "MealSlot",
    "PlannerSettings",
]
