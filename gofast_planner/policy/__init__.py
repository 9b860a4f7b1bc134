# gofast_planner/policy/__init__.py
"""Domain policy: pure training rules with no I/O."""

from .pace import (
    PREDICTION_ADJUSTMENTS,
    format_pace,
    goal_pace_per_mile,
    parse_goal_time,
    parse_pace,
    predicted_race_pace,
)
from .phases import (
    DEFAULT_RUN_TYPES_BY_PHASE,
    PHASE_ORDER,
    RUN_TYPE_KEYS,
    default_run_types_for_phase,
    phase_index,
    phase_order_valid,
    sort_phases,
)
from .races import (
    RACE_TYPES,
    is_valid_race_type,
    race_distance_consistent,
    race_miles_for_type,
)
from .run_types import RUN_TYPES, is_valid_run_type, normalize_run_type

__all__ = [
    "PHASE_ORDER",
    "RUN_TYPE_KEYS",
    "DEFAULT_RUN_TYPES_BY_PHASE",
    "phase_order_valid",
    "phase_index",
    "sort_phases",
    "default_run_types_for_phase",
    "RUN_TYPES",
    "normalize_run_type",
    "is_valid_run_type",
    "RACE_TYPES",
    "race_miles_for_type",
    "is_valid_race_type",
    "race_distance_consistent",
    "parse_goal_time",
    "format_pace",
    "goal_pace_per_mile",
    "parse_pace",
    "predicted_race_pace",
    "PREDICTION_ADJUSTMENTS",
]
