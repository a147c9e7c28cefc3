"""
modules/planning/recommendations.py
-----------------------------------
Per-day suggestions for categories the day's plan is missing.

Currently one rule: a day without any restaurant-typed place, but with known
nearby dining, gets the first nearby option suggested.
"""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote_plus

from smart_itinerary.schemas.itinerary import PlaceRecommendation
from smart_itinerary.schemas.knowledge import PlaceCategory, PlaceKnowledge

MAX_RECOMMENDATIONS_PER_DAY = 3


def day_recommendations(places: Sequence[PlaceKnowledge]) -> list[PlaceRecommendation]:
    recommendations: list[PlaceRecommendation] = []

    has_restaurant = any(p.type == PlaceCategory.restaurant for p in places)
    nearby = [r for p in places for r in p.nearby_restaurants]

    if not has_restaurant and nearby:
        r = nearby[0]
        map_url = None
        if r.coordinates is not None:
            map_url = (
                f"https://www.openstreetmap.org/?mlat={r.coordinates.lat}"
                f"&mlon={r.coordinates.lng}"
            )
        recommendations.append(PlaceRecommendation(
            name=r.name,
            type=PlaceCategory.restaurant.value,
            coordinates=r.coordinates,
            distance=r.distance,
            reason="No restaurant in your plan - consider this nearby option",
            score=0.8,
            map_url=map_url,
            google_maps_url=f"https://www.google.com/maps/search/?api=1&query={quote_plus(r.name)}",
        ))

    return recommendations[:MAX_RECOMMENDATIONS_PER_DAY]
