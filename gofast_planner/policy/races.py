# gofast_planner/policy/races.py
"""
Race type configuration.

Maps race types to their distance in miles.
"""

import math
from types import MappingProxyType

from gofast_planner.errors import UnknownRaceType

RACE_TYPES = MappingProxyType(
    {
        "marathon": 26.2,
        "half": 13.1,
        "10k": 6.2,
        "5k": 3.1,
        "10m": 10.0,
    }
)

# Recorded distances are compared to 0.01 mi
MILES_TOLERANCE = 0.01


def race_miles_for_type(race_type: str) -> float:
    """
    Get miles for a race type (case-insensitive).

    Raises:
        UnknownRaceType: If race_type has no canonical distance
    """
    normalized = race_type.strip().lower() if isinstance(race_type, str) else race_type
    try:
        return RACE_TYPES[normalized]
    except (KeyError, TypeError):
        raise UnknownRaceType(race_type, list(RACE_TYPES)) from None


def is_valid_race_type(race_type: str) -> bool:
    return isinstance(race_type, str) and race_type.strip().lower() in RACE_TYPES


def race_distance_consistent(race_type: str, miles: float) -> bool:
    """
    Check a recorded distance against the distance implied by its race type.

    Raises:
        UnknownRaceType: If race_type has no canonical distance
    """
    expected = race_miles_for_type(race_type)
    return math.isclose(float(miles), expected, abs_tol=MILES_TOLERANCE)
