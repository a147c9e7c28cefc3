"""
config.py
---------
Central configuration for the smart itinerary engine.

Every empirically tuned scheduling constant lives here and can be overridden
through an environment variable (or a .env file next to this module).
PlannerSettings (schemas/settings.py) reads its defaults from these values;
callers that need a different locale profile pass their own PlannerSettings.

Time values are minutes (or minutes-from-midnight), distances are km,
speeds are km/h.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the package directory (if it exists).  Vars already set in
# the shell win over the file.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


# ── Day assignment ────────────────────────────────────────────────────────────
# "bin_packing" (time-budget FFD + rebalance) | "regions" (region merge/split)
DAY_ASSIGNMENT_STRATEGY: str = os.getenv("ITINERARY_DAY_ASSIGNMENT", "bin_packing")

# ── Clustering thresholds ─────────────────────────────────────────────────────
REGION_RADIUS_KM: float       = _env_float("ITINERARY_REGION_RADIUS_KM", 100.0)
MICRO_CLUSTER_MINUTES: float  = _env_float("ITINERARY_MICRO_CLUSTER_MINUTES", 30.0)

# ── Bin packing / rebalancing ─────────────────────────────────────────────────
OVERLOAD_CEILING_MINUTES: int = _env_int("ITINERARY_OVERLOAD_CEILING_MINUTES", 120)
REBALANCE_MAX_ITERATIONS: int = _env_int("ITINERARY_REBALANCE_MAX_ITERATIONS", 10)
SPLIT_MAX_ITERATIONS: int     = _env_int("ITINERARY_SPLIT_MAX_ITERATIONS", 50)

# ── Travel speeds (km/h) ──────────────────────────────────────────────────────
# Auto-rickshaw equivalent, used for the bin-packing travel matrix.
BIN_PACKING_SPEED_KMH: float  = _env_float("ITINERARY_BIN_PACKING_SPEED_KMH", 25.0)

# Scheduler travel legs: minutes per km (~20 km/h), floored at a minimum leg.
TRAVEL_MINUTES_PER_KM: float  = _env_float("ITINERARY_TRAVEL_MINUTES_PER_KM", 3.0)
MIN_TRAVEL_MINUTES: int       = _env_int("ITINERARY_MIN_TRAVEL_MINUTES", 15)
CAR_MODE_THRESHOLD_KM: float  = _env_float("ITINERARY_CAR_MODE_THRESHOLD_KM", 5.0)

# ── Day boundaries (minutes from midnight) ────────────────────────────────────
DAY_START_MINUTES: int        = _env_int("ITINERARY_DAY_START_MINUTES", 8 * 60)     # 08:00
DAY_END_MINUTES: int          = _env_int("ITINERARY_DAY_END_MINUTES", 21 * 60)      # 21:00
DAY_CUTOFF_MINUTES: int       = _env_int("ITINERARY_DAY_CUTOFF_MINUTES", 23 * 60)   # 23:00
DAY_HARD_END_MINUTES: int     = _env_int("ITINERARY_DAY_HARD_END_MINUTES", 24 * 60) # midnight

AFTERNOON_START_MINUTES: int  = 14 * 60
EVENING_START_MINUTES: int    = 17 * 60
NIGHT_START_MINUTES: int      = 21 * 60

# Buffers subtracted from the raw day to get the effective activity budget.
LUNCH_BUFFER_MINUTES: int     = _env_int("ITINERARY_LUNCH_BUFFER_MINUTES", 60)
DINNER_BUFFER_MINUTES: int    = _env_int("ITINERARY_DINNER_BUFFER_MINUTES", 75)
REST_BUFFER_MINUTES: int      = _env_int("ITINERARY_REST_BUFFER_MINUTES", 30)
VISIT_BUFFER_MINUTES: int     = _env_int("ITINERARY_VISIT_BUFFER_MINUTES", 15)

# ── Meals ─────────────────────────────────────────────────────────────────────
MEAL_FATIGUE: int             = -10
MEAL_SHIFT_BEFORE_MINUTES: int = _env_int("ITINERARY_MEAL_SHIFT_BEFORE_MINUTES", 60)
MEAL_SHIFT_AFTER_MINUTES: int  = _env_int("ITINERARY_MEAL_SHIFT_AFTER_MINUTES", 90)

# ── Fatigue advisor ───────────────────────────────────────────────────────────
DAILY_FATIGUE_BUDGET: int     = _env_int("ITINERARY_DAILY_FATIGUE_BUDGET", 100)

# ── Money ─────────────────────────────────────────────────────────────────────
DEFAULT_CURRENCY: str         = os.getenv("ITINERARY_DEFAULT_CURRENCY", "INR")
DEFAULT_COST_MULTIPLIER: float = 0.05   # share of daily budget for unknown types
DEFAULT_STATIC_COST: float    = 100.0

# ── Observability ─────────────────────────────────────────────────────────────
# Directory for StructuredLogger JSONL files.  Empty = performance logging off.
PERF_LOG_DIR: str             = os.getenv("ITINERARY_PERF_LOG_DIR", "")
