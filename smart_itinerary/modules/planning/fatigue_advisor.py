"""
modules/planning/fatigue_advisor.py
-----------------------------------
Reads a finished day's fatigue total and suggests how to lighten it.

Fatigue is an abstract score (not a health measure); the default daily
budget is 100.
"""

from __future__ import annotations

from smart_itinerary import config
from smart_itinerary.schemas.itinerary import VISIT, DayItinerary


def fatigue_level(total: int) -> str:
    if total < 50:
        return "light"
    if total < 75:
        return "moderate"
    if total < 100:
        return "heavy"
    return "exhausting"


def suggest_adjustments(day: DayItinerary, budget: int = config.DAILY_FATIGUE_BUDGET) -> list[str]:
    suggestions: list[str] = []
    if day.total_fatigue <= budget:
        return suggestions

    over_by = day.total_fatigue - budget
    visits = day.activities_of(VISIT)

    if visits:
        # first of equal impacts wins, matching chronological order
        highest = max(visits, key=lambda a: a.fatigue_impact)
        suggestions.append(
            f"Consider shortening or skipping {highest.place.name} "
            f"(saves {highest.fatigue_impact} fatigue)"
        )
    if over_by > 30:
        suggestions.append("Add a rest break in the afternoon")
    if len(visits) >= 4:
        suggestions.append("Consider moving one activity to another day")

    return suggestions
