"""
modules/planning/day_bin_packer.py
----------------------------------
Time-budget-aware distribution of places across trip days.

Each day is a bin whose capacity is the effective daily budget
(08:00-21:00 minus lunch, dinner and rest buffers = 615 min).

  1. N x N travel-time matrix: haversine km at the bin-packing speed (25 km/h).
  2. Micro-clusters: single-link groups within 30 travel minutes.
  3. Cluster cost = member durations + sequential intra-cluster travel.
  4. First-fit-decreasing: clusters sorted by cost, largest first.
  5. Each cluster goes to the day with the most remaining time that still fits
     cost + travel from that day's last place; otherwise to the least-loaded
     day (overflow allowed).
  6. Rebalance (max 10 iterations): while the busiest day exceeds the budget
     by more than the overload ceiling (120 min), move the place nearest the
     lightest day's centroid whose duration fits that day's remaining budget.
  7. Each bin is ordered with route_orderer.order_route() and its used
     minutes recomputed from that final sequence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from smart_itinerary.schemas.knowledge import PlaceKnowledge
from smart_itinerary.schemas.settings import PlannerSettings
from smart_itinerary.modules.tool_usage.distance_tool import DistanceTool, coords_distance_km
from smart_itinerary.modules.planning.region_clusterer import cluster_centroid, single_link_groups
from smart_itinerary.modules.planning.route_orderer import order_route

logger = logging.getLogger(__name__)


@dataclass
class DayBin:
    places: list[PlaceKnowledge] = field(default_factory=list)
    used_minutes: int = 0


@dataclass
class PackingResult:
    bins: list[DayBin] = field(default_factory=list)
    rebalance_moves: int = 0
    pre_rebalance_minutes: int = 0     # sum of used_minutes after FFD
    post_rebalance_minutes: int = 0    # same sum after the rebalance moves

    @property
    def total_minutes(self) -> int:
        return sum(b.used_minutes for b in self.bins)


class DayBinPacker:
    """First-fit-decreasing packing of micro-clusters into day bins."""

    def __init__(self, settings: PlannerSettings | None = None) -> None:
        self.settings = settings or PlannerSettings()
        self.distance_tool = DistanceTool(self.settings.bin_packing_speed_kmh)

    # ── Public entry point ────────────────────────────────────────────────────

    def pack(self, places: Sequence[PlaceKnowledge], num_days: int) -> PackingResult:
        if num_days <= 0:
            return PackingResult()
        if not places:
            return PackingResult(bins=[DayBin() for _ in range(num_days)])

        if num_days == 1:
            ordered = order_route(places)
            used = self.sequence_minutes(ordered)
            return PackingResult(
                bins=[DayBin(ordered, used)], pre_rebalance_minutes=used, post_rebalance_minutes=used,
            )

        budget = self.settings.effective_day_minutes
        logger.info(
            "[bin_packer] planning %d places across %d days, daily budget %d min",
            len(places), num_days, budget,
        )

        index = {id(p): i for i, p in enumerate(places)}
        matrix = self.distance_tool.travel_time_matrix([p.coordinates for p in places])

        # ── Step 2-3: micro-clusters and their time cost ──────────────────────
        clusters = single_link_groups(
            list(range(len(places))),
            lambda i, j: matrix[i][j] <= self.settings.micro_cluster_minutes,
        )
        logger.info("[bin_packer] found %d micro-clusters", len(clusters))

        costed = [(members, self._cluster_minutes(members, places, matrix)) for members in clusters]
        # ── Step 4: FFD order (stable for equal costs) ────────────────────────
        costed.sort(key=lambda mc: mc[1], reverse=True)

        # ── Step 5: assign ───────────────────────────────────────────────────
        bins = [DayBin() for _ in range(num_days)]
        for members, cost in costed:
            best_day = -1
            best_remaining = -1
            for d, day in enumerate(bins):
                remaining = budget - day.used_minutes
                extra_travel = 0
                if day.places:
                    last = index[id(day.places[-1])]
                    extra_travel = matrix[last][members[0]]
                if cost + extra_travel <= remaining and remaining > best_remaining:
                    best_day = d
                    best_remaining = remaining
            if best_day == -1:
                best_day = min(range(num_days), key=lambda d: bins[d].used_minutes)

            bins[best_day].places.extend(places[i] for i in members)
            bins[best_day].used_minutes += cost

        result = PackingResult(bins=bins, pre_rebalance_minutes=sum(b.used_minutes for b in bins))

        # ── Step 6: rebalance ────────────────────────────────────────────────
        result.rebalance_moves = self._rebalance(bins)
        result.post_rebalance_minutes = sum(b.used_minutes for b in bins)

        # ── Step 7: order within each day, re-cost the final sequence ─────────
        for day in bins:
            day.places = order_route(day.places)
            day.used_minutes = self.sequence_minutes(day.places)

        for d, day in enumerate(bins, start=1):
            status = "ok" if day.used_minutes <= budget else "tight"
            logger.info(
                "[bin_packer] day %d: %d places, ~%.1fh (%s)",
                d, len(day.places), day.used_minutes / 60, status,
            )
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _duration(place: PlaceKnowledge) -> int:
        return place.duration_minutes

    def _cluster_minutes(
        self,
        members: list[int],
        places: Sequence[PlaceKnowledge],
        matrix: list[list[int]],
    ) -> int:
        activity = sum(self._duration(places[i]) for i in members)
        travel = sum(matrix[members[k - 1]][members[k]] for k in range(1, len(members)))
        return activity + travel

    def sequence_minutes(self, ordered: Sequence[PlaceKnowledge]) -> int:
        """Visit durations plus travel between consecutive places, in the given order."""
        activity = sum(self._duration(p) for p in ordered)
        travel = sum(
            self.distance_tool.travel_time_minutes(ordered[k - 1].coordinates, ordered[k].coordinates)
            for k in range(1, len(ordered))
        )
        return activity + travel

    def _rebalance(self, bins: list[DayBin]) -> int:
        """Move single places off overloaded days.  Returns the number of moves."""
        budget = self.settings.effective_day_minutes
        ceiling = self.settings.day_ceiling_minutes
        moves = 0

        for _ in range(self.settings.rebalance_max_iterations):
            max_idx = max(range(len(bins)), key=lambda d: bins[d].used_minutes)
            min_idx = min(range(len(bins)), key=lambda d: bins[d].used_minutes)
            source, target = bins[max_idx], bins[min_idx]

            if source.used_minutes <= ceiling:
                break
            if len(source.places) <= 1 or max_idx == min_idx:
                break

            anchor = cluster_centroid(target.places if target.places else source.places)
            best_i = -1
            best_dist = float("inf")
            for i, place in enumerate(source.places):
                duration = self._duration(place)
                if target.used_minutes + duration > budget:
                    continue
                dist = coords_distance_km(anchor, place.coordinates)
                if dist < best_dist:
                    best_dist = dist
                    best_i = i

            if best_i == -1:
                break

            moved = source.places.pop(best_i)
            duration = self._duration(moved)
            target.places.append(moved)
            source.used_minutes -= duration
            target.used_minutes += duration
            moves += 1
            logger.debug("[bin_packer] rebalance moved %r: day %d -> day %d", moved.name, max_idx + 1, min_idx + 1)

        return moves
