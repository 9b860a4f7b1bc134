# gofast_planner/tools/races.py
"""Race registry tools: search and create."""

import logging

from pydantic import ValidationError

from gofast_planner.errors import InvalidInput
from gofast_planner.models.races import RaceRecord
from gofast_planner.models.responses import fail, ok
from gofast_planner.models.store import RaceRegistry
from gofast_planner.policy import race_miles_for_type
from gofast_planner.validation.sanitize import parse_date, sanitize_query

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


def race_to_dict(race: RaceRecord) -> dict:
    return race.model_dump(mode="json")


async def search_races(query: str, races: RaceRegistry) -> dict:
    """
    Case-insensitive substring search by race name.

    Returns:
        {"success": True, "races": [...]} with at most 20 races, soonest first
    """
    try:
        cleaned = sanitize_query(query)
        found = await races.search(cleaned, limit=SEARCH_LIMIT)
    except Exception as e:
        return fail(e)

    logger.info(f"Race search '{cleaned}' returned {len(found)} rows")
    return ok("races", [race_to_dict(r) for r in found])


async def create_race(
    name: str,
    race_type: str,
    race_date: str,
    races: RaceRegistry,
    miles: float | None = None,
    location: str | None = None,
) -> dict:
    """
    Add a race to the registry.

    An existing race with the same name (any case) and date is returned
    instead of creating a duplicate. Miles default to the race type's
    canonical distance.

    Returns:
        {"success": True, "race": {...}} or a failure envelope
    """
    try:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Race name is required")
        canonical_miles = race_miles_for_type(race_type)
        try:
            race = RaceRecord(
                name=name.strip(),
                race_type=race_type.strip().lower(),
                miles=canonical_miles if miles is None else miles,
                date=parse_date(race_date, label="race date"),
                location=(location.strip() or None) if isinstance(location, str) else location,
            )
        except ValidationError as e:
            raise InvalidInput(f"Invalid race: {e.errors()[0]['msg']}") from None
        stored = await races.create(race)
    except Exception as e:
        return fail(e)

    return ok("race", race_to_dict(stored))
