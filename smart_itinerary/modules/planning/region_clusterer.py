"""
modules/planning/region_clusterer.py
------------------------------------
Single-link spatial clustering of places into disjoint geographic regions.

A region is seeded by the first unassigned place and absorbs every other
unassigned place within REGION_RADIUS_KM (100 km) of that seed.  Regions are
returned largest first.

assign_regions_to_days() turns regions into per-day groups:
  - more regions than days  -> surplus regions merge into the day whose
                               centroid is nearest
  - fewer regions than days -> oversized regions are split by nearest-to-
                               centroid growth, then the largest group is
                               halved until every day slot is filled

Deterministic for a given input order; every loop is bounded.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence, TypeVar

from smart_itinerary import config
from smart_itinerary.schemas.knowledge import Coords, PlaceKnowledge
from smart_itinerary.modules.tool_usage.distance_tool import (
    centroid,
    coords_distance_km,
    place_distance_km,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def single_link_groups(items: Sequence[T], is_near: Callable[[T, T], bool]) -> list[list[T]]:
    """
    Group items around seeds: each unassigned item starts a group and pulls in
    every still-unassigned item near it.  Group order follows input order.
    """
    groups: list[list[T]] = []
    assigned = [False] * len(items)

    for i, seed in enumerate(items):
        if assigned[i]:
            continue
        assigned[i] = True
        group = [seed]
        for j in range(i + 1, len(items)):
            if not assigned[j] and is_near(seed, items[j]):
                assigned[j] = True
                group.append(items[j])
        groups.append(group)

    return groups


def cluster_centroid(places: Sequence[PlaceKnowledge]) -> Optional[Coords]:
    return centroid([p.coordinates for p in places])


def group_by_region(
    places: Sequence[PlaceKnowledge],
    radius_km: float = config.REGION_RADIUS_KM,
) -> list[list[PlaceKnowledge]]:
    """Regions of places within radius_km of their seed, largest first."""
    regions = single_link_groups(
        places, lambda a, b: place_distance_km(a, b) <= radius_km
    )
    # stable: equal-sized regions keep discovery order
    regions.sort(key=len, reverse=True)
    return regions


def split_region(region: Sequence[PlaceKnowledge], num_groups: int) -> list[list[PlaceKnowledge]]:
    """
    Split a region into up to num_groups proximity groups of ceil(n/k) places.

    Each group starts from the first unassigned place and grows by adding the
    unassigned place nearest to the group's current centroid.
    """
    if num_groups <= 0:
        return [list(region)] if region else []
    if len(region) <= num_groups:
        return [[p] for p in region]

    per_group = math.ceil(len(region) / num_groups)
    remaining = list(region)
    groups: list[list[PlaceKnowledge]] = []

    while remaining and len(groups) < num_groups:
        group = [remaining.pop(0)]
        while len(group) < per_group and remaining:
            center = cluster_centroid(group)
            nearest = min(
                range(len(remaining)),
                key=lambda k: coords_distance_km(center, remaining[k].coordinates),
            )
            group.append(remaining.pop(nearest))
        groups.append(group)

    if remaining:
        groups[-1].extend(remaining)
    return groups


def _merge_into_nearest(
    days: list[list[PlaceKnowledge]],
    extra: Sequence[Sequence[PlaceKnowledge]],
) -> None:
    """Append each extra group to the day whose centroid is nearest its own."""
    for group in extra:
        group_center = cluster_centroid(group)
        nearest = min(
            range(len(days)),
            key=lambda d: coords_distance_km(group_center, cluster_centroid(days[d])),
        )
        days[nearest].extend(group)


def assign_regions_to_days(
    places: Sequence[PlaceKnowledge],
    num_days: int,
    radius_km: float = config.REGION_RADIUS_KM,
    max_split_iterations: int = config.SPLIT_MAX_ITERATIONS,
) -> list[list[PlaceKnowledge]]:
    """
    Distribute places across num_days using region structure only (no time
    budget).  Always returns exactly num_days lists (some may be empty).
    """
    if num_days <= 0:
        return []
    if not places:
        return [[] for _ in range(num_days)]
    if num_days == 1:
        return [list(places)]
    if len(places) <= num_days:
        days = [[p] for p in places]
        return days + [[] for _ in range(num_days - len(days))]

    regions = group_by_region(places, radius_km)
    logger.info("[regions] %d distinct geographic regions for %d days", len(regions), num_days)

    days: list[list[PlaceKnowledge]] = []
    if len(regions) >= num_days:
        if len(regions) > num_days:
            logger.warning(
                "[regions] %d regions but only %d days; some regions will share days",
                len(regions), num_days,
            )
        days = [list(r) for r in regions[:num_days]]
        _merge_into_nearest(days, regions[num_days:])
    else:
        days_per_region = math.ceil(num_days / len(regions))
        for region in regions:
            if len(region) <= days_per_region or len(days) >= num_days - 1:
                days.append(list(region))
            else:
                slots = min(days_per_region, num_days - len(days))
                days.extend(split_region(region, slots))

        for _ in range(max_split_iterations):
            if len(days) >= num_days:
                break
            largest = max(range(len(days)), key=lambda d: len(days[d]))
            if len(days[largest]) <= 2:
                break
            group = days[largest]
            half = math.ceil(len(group) / 2)
            days[largest] = group[:half]
            days.append(group[half:])

        # splitting early regions can use up slots needed by later ones
        if len(days) > num_days:
            overflow = days[num_days:]
            days = days[:num_days]
            _merge_into_nearest(days, overflow)

    days = [d for d in days if d]
    return days + [[] for _ in range(num_days - len(days))]
