"""
schemas/knowledge.py
--------------------
Pydantic models for the engine's input contract.

  PlaceKnowledge  -- one researched place (upstream research collaborator output)
  NearbyPlace     -- a dining candidate discovered near a place
  DateRange       -- inclusive trip dates
  Budget          -- optional trip budget

Field names are snake_case; the camelCase names used by the upstream JSON
("typicalDuration", "openingHours", ...) are accepted as aliases.  All models
are frozen: the engine never mutates its input and works on copies.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class PlaceCategory(str, Enum):
    accommodation = "accommodation"
    beach = "beach"
    landmark = "landmark"
    fort = "fort"
    restaurant = "restaurant"
    nightlife = "nightlife"
    activity = "activity"
    destination = "destination"


# Recommended categories for a well-rounded trip (summary.missingCategories).
RECOMMENDED_CATEGORIES: tuple[PlaceCategory, ...] = (
    PlaceCategory.beach,
    PlaceCategory.restaurant,
    PlaceCategory.landmark,
)

# Visit duration defaults by type, used when research produced no duration.
DEFAULT_DURATIONS: dict[PlaceCategory, int] = {
    PlaceCategory.accommodation: 0,
    PlaceCategory.beach:         180,
    PlaceCategory.landmark:      90,
    PlaceCategory.fort:          120,
    PlaceCategory.restaurant:    60,
    PlaceCategory.nightlife:     180,
    PlaceCategory.activity:      120,
    PlaceCategory.destination:   90,
}


class _Frozen(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class Coords(_Frozen):
    lat: float
    lng: float


def _finite_number(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _lenient_coords(value: Any, owner: str) -> Any:
    """
    Unusable coordinates (null, non-numeric, half-missing) become None, which
    the planners treat as distance 0.  Usable ones pass through unchanged.
    """
    if value is None or isinstance(value, Coords):
        return value
    if isinstance(value, Mapping) and _finite_number(value.get("lat")) and _finite_number(value.get("lng")):
        return value
    logger.warning("[knowledge] %s: unusable coordinates %r treated as missing", owner, value)
    return None


class OpeningHours(_Frozen):
    """Daily window as "HH:MM" strings.  close <= open means overnight."""
    open: str
    close: str
    days: list[str] = Field(default_factory=list)


class NearbyPlace(_Frozen):
    name: str
    type: str = "restaurant"
    distance: float = 0.0                      # km from the parent place
    coordinates: Optional[Coords] = None
    rating: Optional[float] = None
    price_level: Optional[int] = Field(default=None, alias="priceLevel")

    @field_validator("coordinates", mode="before")
    @classmethod
    def _usable_coords(cls, value, info):
        return _lenient_coords(value, info.data.get("name", "?"))

    @property
    def is_cafe(self) -> bool:
        return "cafe" in (self.type or "").lower()


class PlaceKnowledge(_Frozen):
    name: str = Field(min_length=1)
    type: PlaceCategory = PlaceCategory.destination
    coordinates: Optional[Coords] = None
    typical_duration: Optional[int] = Field(default=None, alias="typicalDuration")
    opening_hours: Optional[OpeningHours] = Field(default=None, alias="openingHours")
    entry_fee: Optional[float] = Field(default=None, alias="entryFee")
    best_time_to_visit: str = Field(default="", alias="bestTimeToVisit")
    crowd_peak_hours: list[str] = Field(default_factory=list, alias="crowdPeakHours")
    nearby_restaurants: list[NearbyPlace] = Field(default_factory=list, alias="nearbyRestaurants")

    # Descriptive research fields, carried but not used for scheduling.
    description: str = ""
    rating: Optional[float] = None
    price_level: Optional[int] = Field(default=None, alias="priceLevel")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if isinstance(value, PlaceCategory):
            return value
        try:
            return PlaceCategory(str(value).strip().lower())
        except ValueError:
            return PlaceCategory.destination

    @field_validator("coordinates", mode="before")
    @classmethod
    def _usable_coords(cls, value, info):
        return _lenient_coords(value, info.data.get("name", "?"))

    @field_validator("best_time_to_visit", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @property
    def duration_minutes(self) -> int:
        """Typical duration, falling back to the per-type default."""
        if self.typical_duration is not None and self.typical_duration >= 0:
            return self.typical_duration
        return DEFAULT_DURATIONS[self.type]


class DateRange(_Frozen):
    start: date
    end: date

    @property
    def num_days(self) -> int:
        """Inclusive day count; reversed ranges count the same span."""
        return abs((self.end - self.start).days) + 1


class Budget(_Frozen):
    total: float = Field(ge=0)
    currency: str = "INR"
    per_person: bool = Field(default=False, alias="perPerson")
