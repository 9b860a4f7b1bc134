# gofast_planner/validation/sanitize.py
"""
Input sanitization and validation utilities.

Every boundary operation passes caller input through here before it reaches
a registry, store or the pipeline.
"""

import logging
import re
from datetime import date

from gofast_planner.errors import InvalidInput, Unauthenticated
from gofast_planner.models.artifacts import ArtifactKind
from gofast_planner.models.plans import PlanStatus

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]{8,64}$")
_ATHLETE_PATTERN = re.compile(r"^[\w.@+-]{1,128}$")


def sanitize_id(value: str, label: str = "ID") -> str:
    """
    Validate a row identifier.

    IDs must be alphanumeric with hyphens only, 8-64 characters.

    Raises:
        InvalidInput: If the ID format is invalid
    """
    cleaned = value.strip() if isinstance(value, str) else ""
    if not _ID_PATTERN.match(cleaned):
        raise InvalidInput(
            f"Invalid {label} '{value}': must be 8-64 alphanumeric characters or hyphens"
        )
    return cleaned


def require_athlete(athlete_id: str | None) -> str:
    """
    Resolve the caller identity.

    Raises:
        Unauthenticated: If no athlete id was supplied
        InvalidInput: If the athlete id contains unexpected characters
    """
    cleaned = athlete_id.strip() if isinstance(athlete_id, str) else ""
    if not cleaned:
        raise Unauthenticated("Unauthorized")
    if not _ATHLETE_PATTERN.match(cleaned):
        raise InvalidInput(f"Invalid athlete id '{athlete_id}'")
    return cleaned


def sanitize_query(query: str, max_length: int = 100) -> str:
    """
    Clean a race search query.

    Raises:
        InvalidInput: If the query is empty after stripping
    """
    cleaned = query.strip() if isinstance(query, str) else ""
    if not cleaned:
        raise InvalidInput("Search query cannot be empty")
    if len(cleaned) > max_length:
        logger.warning(f"Search query truncated from {len(cleaned)} to {max_length} characters")
        cleaned = cleaned[:max_length]
    return cleaned


def parse_kind(kind: str) -> ArtifactKind:
    """
    Parse an artifact kind ("role", "rule_set", "must_haves", "return_format").

    Hyphens are accepted in place of underscores.

    Raises:
        InvalidInput: If kind is not one of the four artifact kinds
    """
    normalized = kind.strip().lower().replace("-", "_") if isinstance(kind, str) else ""
    try:
        return ArtifactKind(normalized)
    except ValueError:
        valid = ", ".join(k.value for k in ArtifactKind)
        raise InvalidInput(f"Invalid artifact kind '{kind}'. Must be one of: {valid}") from None


def parse_date(value: str, label: str = "date") -> date:
    """
    Parse an ISO date (YYYY-MM-DD).

    Raises:
        InvalidInput: If value is not an ISO date
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise InvalidInput(f"Invalid {label} '{value}': expected YYYY-MM-DD") from None


def parse_status(status: str) -> PlanStatus:
    """
    Parse a plan status.

    Raises:
        InvalidInput: If status is not active or archived
    """
    normalized = status.strip().lower() if isinstance(status, str) else ""
    try:
        return PlanStatus(normalized)
    except ValueError:
        valid = ", ".join(s.value for s in PlanStatus)
        raise InvalidInput(f"Invalid status '{status}'. Must be one of: {valid}") from None


def parse_preferred_days(days: list[int] | str | None) -> list[int]:
    """
    Parse preferred training days (1-7, Monday=1) from a list or "1,3,5".

    Raises:
        InvalidInput: If any day is not an integer 1-7
    """
    if days is None or days == "":
        return []
    items = days.split(",") if isinstance(days, str) else days
    parsed = []
    for item in items:
        try:
            day = int(item)
        except (TypeError, ValueError):
            raise InvalidInput(f"Invalid preferred day '{item}'") from None
        if not 1 <= day <= 7:
            raise InvalidInput(f"Preferred day must be 1-7 (Monday=1), got {day}")
        if day not in parsed:
            parsed.append(day)
    return parsed
