# gofast_planner/policy/pace.py
"""Goal-time parsing and pace arithmetic."""

import re
from types import MappingProxyType

from gofast_planner.errors import InvalidInput

_TIME_PATTERN = re.compile(r"^\d{1,2}(:\d{1,2}){1,2}$")


def parse_goal_time(goal_time: str) -> int:
    """
    Parse "H:MM:SS" or "MM:SS" into total seconds.

    Raises:
        InvalidInput: If the string is not a positive time of that form
    """
    cleaned = goal_time.strip() if isinstance(goal_time, str) else ""
    if not _TIME_PATTERN.match(cleaned):
        raise InvalidInput(f"Invalid goal time format: {goal_time!r}")

    parts = [int(p) for p in cleaned.split(":")]
    if any(p >= 60 for p in parts[1:]):
        raise InvalidInput(f"Invalid goal time format: {goal_time!r}")

    if len(parts) == 3:
        total = parts[0] * 3600 + parts[1] * 60 + parts[2]
    else:
        total = parts[0] * 60 + parts[1]

    if total <= 0:
        raise InvalidInput(f"Goal time must be positive: {goal_time!r}")
    return total


def format_pace(seconds: float) -> str:
    """Format seconds as m:ss."""
    whole = int(seconds)
    minutes, secs = divmod(whole, 60)
    return f"{minutes}:{secs:02d}"


def goal_pace_per_mile(goal_time: str, miles: float) -> str:
    """Average pace per mile needed to hit goal_time over miles."""
    if miles <= 0:
        raise InvalidInput(f"Race distance must be positive: {miles}")
    return format_pace(parse_goal_time(goal_time) / miles)


# Seconds per mile slower than 5K pace at each race distance
PREDICTION_ADJUSTMENTS = MappingProxyType(
    {
        "marathon": 30,
        "half": 20,
        "10k": 10,
        "5k": 0,
    }
)

_PACE_PATTERN = re.compile(r"^(\d+):(\d{2})$")


def parse_pace(pace: str) -> int:
    """
    Parse an "m:ss" pace into seconds per mile.

    Raises:
        InvalidInput: If pace is empty or not m:ss with seconds under 60
    """
    cleaned = pace.strip() if isinstance(pace, str) else ""
    if not cleaned:
        raise InvalidInput("Pace is required")
    match = _PACE_PATTERN.match(cleaned)
    if not match or int(match.group(2)) >= 60:
        raise InvalidInput(f"Invalid pace format: {pace!r} (expected m:ss)")
    total = int(match.group(1)) * 60 + int(match.group(2))
    if total <= 0:
        raise InvalidInput(f"Pace must be positive: {pace!r}")
    return total


def predicted_race_pace(five_k_pace: str, race_type: str) -> str:
    """
    Predict race pace per mile from a recent 5K pace.

    Race types without an adjustment are predicted at 5K pace.
    """
    adjustment = PREDICTION_ADJUSTMENTS.get(race_type.strip().lower(), 0)
    return format_pace(parse_pace(five_k_pace) + adjustment)
