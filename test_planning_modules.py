"""
test_planning_modules.py
──────────────────────────────────────────────────────────────────────────────
Unit checks for the individual planning building blocks:

  PART 1 — Tools        time parsing, crowd levels, distances
  PART 2 — Validation   record repairs, de-duplication, type coercion
  PART 3 — Clustering   region grouping, merge / split into day groups
  PART 4 — Routing      time-of-day seeding, nearest-neighbour order
  PART 5 — Packing      first-fit-decreasing + bounded rebalance
  PART 6 — Scheduling   closing times, travel legs, cost estimates
  PART 7 — Meals        slot selection, restaurant choice, gap placement
  PART 8 — Advisors     fatigue level, adjustments, recommendations, summary

Run:
    python test_planning_modules.py     (banner output)
    pytest test_planning_modules.py
──────────────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import sys

from smart_itinerary.schemas.itinerary import MEAL, TRAVEL, VISIT, DayItinerary, PlaceRef, ScheduledActivity
from smart_itinerary.schemas.knowledge import (
    Budget,
    Coords,
    NearbyPlace,
    OpeningHours,
    PlaceCategory,
    PlaceKnowledge,
)
from smart_itinerary.schemas.settings import PlannerSettings
from smart_itinerary.modules.tool_usage.distance_tool import DistanceTool, haversine_km, km_to_minutes
from smart_itinerary.modules.tool_usage.time_tool import (
    format_hhmm,
    opening_window,
    optimal_time_of_day,
    parse_hhmm,
    parse_window,
)
from smart_itinerary.modules.validation import normalize_knowledge, validate_place
from smart_itinerary.modules.planning import (
    DayBinPacker,
    DayScheduleBuilder,
    MealPlanner,
    assign_regions_to_days,
    best_restaurant,
    crowd_level,
    day_recommendations,
    fatigue_level,
    group_by_region,
    missing_categories,
    order_route,
    split_region,
    suggest_adjustments,
)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _banner(title: str) -> None:
    width = 70
    print("\n" + "═" * width)
    print(f"  {title}")
    print("═" * width)

def _ok(msg: str)   -> None: print(f"  ✓  {msg}")
def _fail(msg: str) -> None: print(f"  ✗  {msg}"); sys.exit(1)


def _place(name: str, lat: float | None = None, lng: float | None = None, **kw) -> PlaceKnowledge:
    coords = Coords(lat=lat, lng=lng) if lat is not None else None
    return PlaceKnowledge(name=name, coordinates=coords, **kw)


def _visit(name: str, start: str, end: str, fatigue: int) -> ScheduledActivity:
    return ScheduledActivity(
        id=f"visit-{name}", place=PlaceRef(name=name, type="landmark"), day=1,
        time_slot="morning", start_time=start, end_time=end,
        duration=(parse_hhmm(end) or 0) - (parse_hhmm(start) or 0),
        type=VISIT, fatigue_impact=fatigue,
    )


_DINING = [
    NearbyPlace(name="Sunrise Cafe", type="cafe", distance=0.3, rating=4.5),
    NearbyPlace(name="Harbour Cafe", type="cafe", distance=0.2, rating=4.2),
    NearbyPlace(name="Spice Route", type="restaurant", distance=0.5, rating=4.6),
    NearbyPlace(name="Coastal Kitchen", type="restaurant", distance=0.1, rating=4.1),
]


# ─────────────────────────────────────────────────────────────────────────────
# PART 1 — Tools
# ─────────────────────────────────────────────────────────────────────────────

def test_hhmm_parsing():
    assert parse_hhmm("09:30") == 570
    assert parse_hhmm("24:00") == 1440
    assert parse_hhmm("9am") is None
    assert parse_hhmm("12:75") is None
    assert format_hhmm(570) == "09:30"
    assert parse_window("10:00-12:00") == (600, 720)
    assert parse_window("noon") is None


def test_opening_window_defaults_and_overnight():
    always = _place("Park")
    assert opening_window(always, 480, 1380) == (480, 1380)
    bar = _place("Bar", opening_hours=OpeningHours(open="20:00", close="03:00"))
    assert opening_window(bar, 480, 1380) == (1200, 1620)


def test_optimal_time_of_day_keywords_beat_type():
    assert optimal_time_of_day(_place("Fort", type="fort")) == "morning"
    assert optimal_time_of_day(_place("Beach", type="beach")) == "evening"
    assert optimal_time_of_day(_place("Beach", type="beach", best_time_to_visit="Early morning")) == "morning"
    assert optimal_time_of_day(_place("Club", type="nightlife")) == "night"
    assert optimal_time_of_day(_place("Market", best_time_to_visit="Afternoon")) == "afternoon"
    assert optimal_time_of_day(_place("Market")) == "flexible"


def test_crowd_levels():
    peaks = ["10:00-12:00"]
    assert crowd_level(600, peaks) == "high"
    assert crowd_level(560, peaks) == "medium"
    assert crowd_level(480, peaks) == "low"
    assert crowd_level(800, ["bad window"]) == "low"


def test_distance_tool():
    goa_to_mumbai = haversine_km(15.4909, 73.8278, 19.0760, 72.8777)
    assert 380 < goa_to_mumbai < 440
    assert km_to_minutes(50, 25) == 120
    assert km_to_minutes(0, 25) == 0

    matrix = DistanceTool(25).travel_time_matrix([Coords(lat=15.0, lng=73.0), None, Coords(lat=15.1, lng=73.0)])
    assert matrix[0][1] == 0 and matrix[1][2] == 0
    assert matrix[0][2] == matrix[2][0] > 0


# ─────────────────────────────────────────────────────────────────────────────
# PART 2 — Validation
# ─────────────────────────────────────────────────────────────────────────────

def test_validator_repairs_bad_fields():
    place = PlaceKnowledge.model_validate({
        "name": "Old Fort",
        "type": "fort",
        "coordinates": {"lat": 0, "lng": 0},
        "typicalDuration": -5,
        "openingHours": {"open": "9am", "close": "5pm"},
        "crowdPeakHours": ["10:00-12:00", "noon"],
    })
    result = validate_place(place)
    assert not result.valid
    assert result.repairs["coordinates"] is None
    assert result.repairs["typical_duration"] == 120
    assert result.repairs["opening_hours"] is None
    assert result.repairs["crowd_peak_hours"] == ["10:00-12:00"]


def test_normalize_drops_duplicates_and_keeps_order():
    cleaned = normalize_knowledge([
        {"name": "A", "type": "beach"},
        {"name": "B", "type": "museum"},
        {"name": "A", "type": "fort"},
    ])
    assert [p.name for p in cleaned] == ["A", "B"]
    assert cleaned[0].type == PlaceCategory.beach
    assert cleaned[0].typical_duration == 180
    assert cleaned[1].type == PlaceCategory.destination


# ─────────────────────────────────────────────────────────────────────────────
# PART 3 — Clustering
# ─────────────────────────────────────────────────────────────────────────────

def test_group_by_region_largest_first():
    places = [
        _place("Mumbai", 19.07, 72.88),
        _place("Calangute", 15.54, 73.76),
        _place("Panjim", 15.49, 73.82),
    ]
    regions = group_by_region(places)
    assert [[p.name for p in r] for r in regions] == [["Calangute", "Panjim"], ["Mumbai"]]


def test_assign_regions_merges_surplus_region_into_nearest_day():
    places = [
        _place("Calangute", 15.54, 73.76),
        _place("Panjim", 15.49, 73.82),
        _place("Mumbai", 19.07, 72.88),
        _place("Pune", 18.52, 73.86),
    ]
    days = assign_regions_to_days(places, 2)
    assert [[p.name for p in d] for d in days] == [["Calangute", "Panjim"], ["Mumbai", "Pune"]]


def test_assign_regions_splits_single_region_across_days():
    places = [_place(f"P{i}", 15.50 + i * 0.01, 73.80) for i in range(6)]
    days = assign_regions_to_days(places, 3)
    assert len(days) == 3
    assert all(len(d) == 2 for d in days)
    assert sorted(p.name for d in days for p in d) == sorted(p.name for p in places)


def test_assign_regions_edge_cases():
    assert assign_regions_to_days([], 3) == [[], [], []]
    assert assign_regions_to_days([_place("A", 15.0, 73.0)], 0) == []
    two = assign_regions_to_days([_place("A", 15.0, 73.0), _place("B", 15.0, 73.1)], 4)
    assert [len(d) for d in two] == [1, 1, 0, 0]


def test_split_region_sizes():
    places = [_place(f"P{i}", 15.50 + i * 0.01, 73.80) for i in range(7)]
    groups = split_region(places, 3)
    assert [len(g) for g in groups] == [3, 3, 1]


# ─────────────────────────────────────────────────────────────────────────────
# PART 4 — Routing
# ─────────────────────────────────────────────────────────────────────────────

def test_route_seeds_with_earliest_time_of_day():
    beach = _place("Beach", 15.50, 73.80, type="beach")
    fort = _place("Fort", 15.60, 73.80, type="fort")
    market = _place("Market", 15.51, 73.80)
    ordered = order_route([beach, market, fort])
    assert [p.name for p in ordered] == ["Fort", "Market", "Beach"]


# ─────────────────────────────────────────────────────────────────────────────
# PART 5 — Packing
# ─────────────────────────────────────────────────────────────────────────────

def test_bin_packer_separates_distant_place():
    near = [_place(f"Goa {i}", 15.50 + i * 0.002, 73.80, typical_duration=60) for i in range(5)]
    far = _place("Mumbai Gate", 18.92, 72.83, typical_duration=60)
    result = DayBinPacker().pack(near + [far], 2)
    day_of = {p.name: d for d, b in enumerate(result.bins) for p in b.places}
    assert day_of["Mumbai Gate"] != day_of["Goa 0"]
    assert sum(len(b.places) for b in result.bins) == 6


def test_bin_packer_rebalance_is_bounded_and_conserves_minutes():
    places = [_place(f"Stop {i}", typical_duration=200) for i in range(6)]
    settings = PlannerSettings()
    result = DayBinPacker(settings).pack(places, 3)
    assert result.rebalance_moves == 3
    assert result.rebalance_moves <= settings.rebalance_max_iterations
    assert result.post_rebalance_minutes <= result.pre_rebalance_minutes
    assert [b.used_minutes for b in result.bins] == [600, 400, 200]
    assert max(b.used_minutes for b in result.bins) <= settings.day_ceiling_minutes


def test_bin_usage_matches_ordered_route():
    places = [_place(f"Stop {i}", 15.50 + i * 0.002, 73.80, typical_duration=200) for i in range(6)]
    packer = DayBinPacker()
    result = packer.pack(places, 3)
    assert result.rebalance_moves == 3
    assert result.post_rebalance_minutes <= result.pre_rebalance_minutes
    for b in result.bins:
        assert b.used_minutes == packer.sequence_minutes(b.places)
    # travel between neighbours survives into the final totals
    assert result.total_minutes > 6 * 200


def test_bin_packer_degenerate_inputs():
    packer = DayBinPacker()
    assert packer.pack([], 2).bins[1].places == []
    assert packer.pack([_place("A", 15.0, 73.0)], 0).bins == []
    single = packer.pack([_place("A", 15.0, 73.0, typical_duration=30)], 1)
    assert single.bins[0].used_minutes == 30


def test_bin_packer_keeps_zero_and_typed_default_durations():
    packer = DayBinPacker()
    assert packer.pack([_place("Viewpoint", 15.0, 73.0, typical_duration=0)], 1).bins[0].used_minutes == 0
    beach = _place("Baga", 15.0, 73.0, type="beach")
    assert packer.pack([beach], 1).bins[0].used_minutes == beach.duration_minutes == 180


# ─────────────────────────────────────────────────────────────────────────────
# PART 6 — Scheduling
# ─────────────────────────────────────────────────────────────────────────────

def test_schedule_drops_place_that_closes_too_early():
    museum = _place(
        "Museum", 15.50, 73.80, type="landmark", typical_duration=120,
        opening_hours=OpeningHours(open="09:00", close="10:00"),
    )
    schedule = DayScheduleBuilder().build(1, "2026-11-10", [museum])
    assert schedule.dropped == ["Museum"]
    assert schedule.day.activities == []


def test_schedule_travel_leg_precedes_visit():
    fort = _place("Fort", 15.50, 73.80, type="fort", typical_duration=60)
    market = _place("Market", 15.60, 73.80, typical_duration=60)
    day = DayScheduleBuilder().build(1, "2026-11-10", [fort, market]).day

    assert [a.type for a in day.activities] == [VISIT, TRAVEL, VISIT]
    visit1, travel, visit2 = day.activities
    assert (visit1.start_time, visit1.end_time) == ("08:00", "09:00")
    # ~11.1 km -> round(33.4) = 33 min, by car
    assert travel.duration == 33
    assert travel.travel_from_prev.mode == "car"
    assert travel.end_time == visit2.start_time == "09:48"
    assert day.travel_distance == travel.travel_from_prev.distance


def test_nightlife_may_start_after_cutoff():
    late = OpeningHours(open="23:00", close="02:00")
    bar = _place("Late Bar", 15.50, 73.80, type="nightlife", typical_duration=45, opening_hours=late)
    schedule = DayScheduleBuilder().build(1, "2026-11-10", [bar])
    assert schedule.dropped == []
    assert schedule.day.activities[0].start_time == "23:00"

    lounge = _place("Late Lounge", 15.50, 73.80, typical_duration=45, opening_hours=late)
    assert DayScheduleBuilder().build(1, "2026-11-10", [lounge]).dropped == ["Late Lounge"]


def test_meal_gap_is_skipped_when_it_would_miss_closing():
    fort = _place("Fort", 15.500, 73.800, type="fort", typical_duration=195, nearby_restaurants=_DINING)
    museum = _place(
        "Museum", 15.501, 73.801, type="landmark", typical_duration=60,
        opening_hours=OpeningHours(open="09:00", close="13:30"),
    )
    schedule = DayScheduleBuilder().build(1, "2026-11-10", [fort, museum])
    assert schedule.dropped == []

    visits = schedule.day.activities_of(VISIT)
    assert (visits[0].start_time, visits[0].end_time) == ("08:00", "11:15")
    assert (visits[1].start_time, visits[1].end_time) == ("11:45", "12:45")
    assert schedule.day.activities_of(TRAVEL)[0].duration == 15


def test_cost_estimates_with_and_without_budget():
    fort = _place("Fort", type="fort")
    free = _place("Temple", type="landmark", entry_fee=0)
    no_budget = DayScheduleBuilder(budget=None, num_days=2)
    with_budget = DayScheduleBuilder(budget=Budget(total=10000), num_days=2)

    assert no_budget.estimate_cost(fort) == 100.0
    assert with_budget.estimate_cost(fort) == 100.0
    assert with_budget.estimate_cost(_place("Tower", type="landmark")) == 150.0
    assert no_budget.estimate_cost(free) == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# PART 7 — Meals
# ─────────────────────────────────────────────────────────────────────────────

def test_breakfast_goes_before_the_first_visit():
    fort = _place("Fort", 15.50, 73.80, type="fort", typical_duration=120, nearby_restaurants=_DINING)
    day = DayScheduleBuilder().build(1, "2026-11-10", [fort]).day
    day = MealPlanner().plan(day, [fort])

    meals = day.activities_of(MEAL)
    assert [m.id for m in meals] == ["breakfast-1"]
    assert meals[0].place.name == "Sunrise Cafe"
    assert (meals[0].start_time, meals[0].end_time) == ("07:15", "08:00")
    assert day.activities[0].type == MEAL


def test_lunch_fills_the_gap_held_by_the_scheduler():
    fort = _place("Reis Magos Fort", 15.500, 73.800, type="fort", typical_duration=180,
                  nearby_restaurants=_DINING)
    market = _place("Panjim Market", 15.505, 73.805, typical_duration=180)
    day = DayScheduleBuilder().build(1, "2026-11-10", [fort, market]).day

    market_visit = day.activities_of(VISIT)[1]
    assert market_visit.start_time == "12:45"

    day = MealPlanner().plan(day, [fort, market])
    by_id = {a.id: a for a in day.activities}
    assert by_id["breakfast-1"].place.name == "Sunrise Cafe"
    assert by_id["morningSnack-1"].place.name == "Harbour Cafe"
    assert by_id["morningSnack-1"].start_time == "11:00"
    assert by_id["lunch-1"].place.name == "Spice Route"
    assert (by_id["lunch-1"].start_time, by_id["lunch-1"].end_time) == ("11:30", "12:30")
    assert "dinner-1" not in by_id

    assert day.total_fatigue == 35 + 2 + 20 - 30
    assert day.total_cost == 100.0 + 100.0 + 250.0 + 100.0 + 400.0
    starts = [parse_hhmm(a.start_time) for a in day.activities]
    assert starts == sorted(starts)


def test_restaurant_ranking_type_then_rating_then_distance():
    pool = [
        NearbyPlace(name="Cafe X", type="cafe", distance=0.5, rating=4.0),
        NearbyPlace(name="Cafe Y", type="cafe", distance=0.2, rating=4.0),
        NearbyPlace(name="Thali House", type="restaurant", distance=0.1, rating=4.9),
    ]
    assert best_restaurant(pool, set(), prefer_cafe=True).name == "Cafe Y"
    assert best_restaurant(pool, set(), prefer_cafe=False).name == "Thali House"
    assert best_restaurant(pool, {"Cafe Y"}, prefer_cafe=True).name == "Cafe X"
    assert best_restaurant(pool, {"Cafe X", "Cafe Y"}, prefer_cafe=True).name == "Thali House"
    assert best_restaurant(pool, {p.name for p in pool}, prefer_cafe=True) is None


def test_no_meals_without_dining_or_activities():
    fort = _place("Fort", 15.5, 73.8, type="fort")
    day = DayScheduleBuilder().build(1, "2026-11-10", [fort]).day
    assert MealPlanner().plan(day, [fort]).activities_of(MEAL) == []
    empty = DayItinerary(day=2, date="2026-11-11")
    assert MealPlanner().plan(empty, [_place("X", nearby_restaurants=_DINING)]).activities == []


# ─────────────────────────────────────────────────────────────────────────────
# PART 8 — Advisors
# ─────────────────────────────────────────────────────────────────────────────

def test_fatigue_levels_and_adjustments():
    assert fatigue_level(20) == "light"
    assert fatigue_level(60) == "moderate"
    assert fatigue_level(90) == "heavy"
    assert fatigue_level(120) == "exhausting"

    day = DayItinerary(day=1, date="2026-11-10", total_fatigue=140, activities=[
        _visit("Trek", "08:00", "11:00", 40),
        _visit("Fort", "12:00", "14:00", 35),
    ])
    hints = suggest_adjustments(day)
    assert hints[0] == "Consider shortening or skipping Trek (saves 40 fatigue)"
    assert "Add a rest break in the afternoon" in hints
    assert suggest_adjustments(DayItinerary(day=1, date="2026-11-10", total_fatigue=80)) == []


def test_recommendation_for_day_without_restaurant():
    fort = _place("Fort", 15.5, 73.8, type="fort", nearby_restaurants=[
        NearbyPlace(name="Spice Route", distance=0.4, coordinates=Coords(lat=15.501, lng=73.801)),
    ])
    recs = day_recommendations([fort])
    assert len(recs) == 1
    out = recs[0].to_dict()
    assert out["name"] == "Spice Route"
    assert out["googleMapsUrl"].endswith("query=Spice+Route")
    assert "mlat=15.501" in out["mapUrl"]

    eatery = _place("Thali House", type="restaurant", nearby_restaurants=fort.nearby_restaurants)
    assert day_recommendations([fort, eatery]) == []


def test_missing_categories():
    assert missing_categories([_place("Baga", type="beach")]) == ["restaurant", "landmark"]


# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    _banner("PLANNING MODULE CHECKS")
    tests = [(n, f) for n, f in sorted(globals().items()) if n.startswith("test_") and callable(f)]
    for name, fn in tests:
        try:
            fn()
        except AssertionError as exc:
            _fail(f"{name}: {exc!r}")
        _ok(name)
    print()
    _ok(f"ALL {len(tests)} CHECKS PASSED")
