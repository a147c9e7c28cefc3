"""
schemas/itinerary.py
--------------------
Dataclass definitions for the generated itinerary.

  ScheduledActivity  -- one timed visit / meal / travel leg / rest
  DayItinerary       -- one day's activities plus fatigue, cost and distance
  ItinerarySummary   -- trip-level totals
  GeneratedItinerary -- the full result handed to rendering/export code

Every structure serialises to a JSON-compatible dict via to_dict(), using the
camelCase keys the map and editing UIs consume.  Optional fields are omitted
when unset.  Times are "HH:MM" strings, durations minutes, distances km,
money in the budget's currency.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from smart_itinerary.schemas.knowledge import Coords

# Activity types
VISIT = "visit"
MEAL = "meal"
TRAVEL = "travel"
REST = "rest"


def _coords_dict(coords: Optional[Coords]) -> Optional[dict]:
    if coords is None:
        return None
    return {"lat": coords.lat, "lng": coords.lng}


@dataclass(frozen=True)
class PlaceRef:
    """Denormalised place carried by an activity."""
    name: str
    type: str
    coordinates: Optional[Coords] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "coordinates": _coords_dict(self.coordinates),
        }


@dataclass(frozen=True)
class TravelInfo:
    distance: float      # km, 1 dp
    duration: int        # minutes
    mode: str            # "auto" | "car"

    def to_dict(self) -> dict[str, Any]:
        return {"distance": self.distance, "duration": self.duration, "mode": self.mode}


@dataclass
class ScheduledActivity:
    id: str
    place: PlaceRef
    day: int
    time_slot: str               # morning | afternoon | evening | night
    start_time: str              # "09:00"
    end_time: str                # "11:00"
    duration: int
    type: str                    # visit | meal | travel | rest
    fatigue_impact: int = 0
    travel_from_prev: Optional[TravelInfo] = None
    crowd_level: Optional[str] = None
    best_time_reason: Optional[str] = None
    estimated_cost: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "place": self.place.to_dict(),
            "day": self.day,
            "timeSlot": self.time_slot,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "type": self.type,
            "fatigueImpact": self.fatigue_impact,
        }
        if self.travel_from_prev is not None:
            out["travelFromPrev"] = self.travel_from_prev.to_dict()
        if self.crowd_level is not None:
            out["crowdLevel"] = self.crowd_level
        if self.best_time_reason is not None:
            out["bestTimeReason"] = self.best_time_reason
        if self.estimated_cost is not None:
            out["estimatedCost"] = self.estimated_cost
        return out


@dataclass(frozen=True)
class PlaceRecommendation:
    """Suggested addition for a category missing from a day."""
    name: str
    type: str
    coordinates: Optional[Coords]
    distance: float
    reason: str
    score: float
    map_url: Optional[str] = None
    google_maps_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "coordinates": _coords_dict(self.coordinates),
            "distance": self.distance,
            "reason": self.reason,
            "score": self.score,
        }
        if self.map_url:
            out["mapUrl"] = self.map_url
        if self.google_maps_url:
            out["googleMapsUrl"] = self.google_maps_url
        return out


@dataclass
class DayItinerary:
    day: int
    date: str                                   # ISO date
    activities: list[ScheduledActivity] = field(default_factory=list)
    total_fatigue: int = 0
    total_cost: float = 0.0
    travel_distance: float = 0.0                # km
    recommendations: list[PlaceRecommendation] = field(default_factory=list)
    fatigue_level: str = "light"
    adjustments: list[str] = field(default_factory=list)

    def activities_of(self, activity_type: str) -> list[ScheduledActivity]:
        return [a for a in self.activities if a.type == activity_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "date": self.date,
            "activities": [a.to_dict() for a in self.activities],
            "totalFatigue": self.total_fatigue,
            "totalCost": self.total_cost,
            "travelDistance": self.travel_distance,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "fatigueLevel": self.fatigue_level,
            "adjustments": list(self.adjustments),
        }


@dataclass
class ItinerarySummary:
    total_days: int = 0
    total_cost: float = 0.0
    currency: str = "INR"
    places_visited: int = 0
    distance_traveled: float = 0.0              # km
    average_fatigue_per_day: int = 0
    missing_categories: list[str] = field(default_factory=list)
    unscheduled_places: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDays": self.total_days,
            "totalCost": self.total_cost,
            "currency": self.currency,
            "placesVisited": self.places_visited,
            "distanceTraveled": self.distance_traveled,
            "averageFatiguePerDay": self.average_fatigue_per_day,
            "missingCategories": list(self.missing_categories),
            "unscheduledPlaces": list(self.unscheduled_places),
        }


@dataclass
class GeneratedItinerary:
    """Top-level output of generate_smart_itinerary()."""
    days: list[DayItinerary] = field(default_factory=list)
    route: list[Coords] = field(default_factory=list)      # map polyline
    summary: ItinerarySummary = field(default_factory=ItinerarySummary)
    generated_at: str = ""                                  # ISO-8601 timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "days": [d.to_dict() for d in self.days],
            "route": [_coords_dict(c) for c in self.route],
            "summary": self.summary.to_dict(),
            "generatedAt": self.generated_at,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
