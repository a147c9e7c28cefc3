"""
modules/tool_usage/time_tool.py
-------------------------------
Clock helpers shared by the planning modules.

All arithmetic happens in integer minutes-from-midnight; "HH:MM" strings only
exist at the edges (input opening hours / crowd windows, output activities).
"""

from __future__ import annotations

import re
from typing import Optional

from smart_itinerary.schemas.knowledge import PlaceCategory, PlaceKnowledge

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

# Time-of-day buckets, earliest first.  "flexible" sorts last for route seeding.
MORNING = "morning"
AFTERNOON = "afternoon"
EVENING = "evening"
NIGHT = "night"
FLEXIBLE = "flexible"

TIME_OF_DAY_ORDER: dict[str, int] = {
    MORNING: 0,
    AFTERNOON: 1,
    EVENING: 2,
    NIGHT: 3,
    FLEXIBLE: 4,
}

# Schedule order: flexible places fill the day between afternoon and evening.
SCHEDULE_BUCKET_ORDER: dict[str, float] = {
    MORNING: 0,
    AFTERNOON: 1,
    FLEXIBLE: 1.5,
    EVENING: 2,
    NIGHT: 3,
}


def parse_hhmm(value: Optional[str]) -> Optional[int]:
    """'09:30' -> 570.  Returns None for anything that is not a valid HH:MM."""
    if not value:
        return None
    m = _HHMM_RE.match(value)
    if not m:
        return None
    hours, mins = int(m.group(1)), int(m.group(2))
    if hours > 24 or mins > 59 or (hours == 24 and mins):
        return None
    return hours * 60 + mins


def format_hhmm(minutes: int) -> str:
    """570 -> '09:30'."""
    minutes = max(0, int(minutes))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_window(window: str) -> Optional[tuple[int, int]]:
    """'10:00-12:00' -> (600, 720).  Malformed windows return None."""
    if not window or "-" not in window:
        return None
    start_s, _, end_s = window.partition("-")
    start, end = parse_hhmm(start_s), parse_hhmm(end_s)
    if start is None or end is None:
        return None
    return start, end


def time_slot_for(minutes: int, afternoon_start: int, evening_start: int, night_start: int) -> str:
    """Bucket a clock time into morning / afternoon / evening / night."""
    if minutes < afternoon_start:
        return MORNING
    if minutes < evening_start:
        return AFTERNOON
    if minutes < night_start:
        return EVENING
    return NIGHT


def optimal_time_of_day(place: PlaceKnowledge) -> str:
    """
    Map a place's free-text bestTimeToVisit hint to a time-of-day bucket.

    Keywords win over type; the type fallback puts forts and landmarks in the
    morning, beaches at sunset and nightlife at night.
    """
    hint = place.best_time_to_visit.lower()

    if "morning" in hint or "sunrise" in hint:
        return MORNING
    if "evening" in hint or "sunset" in hint:
        return EVENING
    if "night" in hint or place.type == PlaceCategory.nightlife:
        return NIGHT
    if "afternoon" in hint:
        return AFTERNOON

    if place.type in (PlaceCategory.fort, PlaceCategory.landmark):
        return MORNING
    if place.type == PlaceCategory.beach:
        return EVENING
    return FLEXIBLE


def opening_window(place: PlaceKnowledge, day_start: int, day_cutoff: int) -> tuple[int, int]:
    """
    (open, close) in minutes for the visit day.

    Unknown hours default to the day start and the day cutoff.  Overnight hours
    (close <= open, e.g. a bar open until 02:00) roll the close into tomorrow.
    """
    hours = place.opening_hours
    if hours is None:
        return day_start, day_cutoff
    open_m = parse_hhmm(hours.open)
    close_m = parse_hhmm(hours.close)
    if open_m is None or close_m is None:
        return day_start, day_cutoff
    if close_m <= open_m:
        close_m += 24 * 60
    return open_m, close_m
