# gofast_planner/models/responses.py
"""
Response envelope used by every boundary operation.

Success: {"success": true, <payload-key>: ...}
Failure: {"success": false, "error": ..., "details": ..., "status": ...}
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from gofast_planner.errors import PlannerError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: bool = False
    error: str = Field(description="Human-readable error summary")
    details: dict[str, Any] | str | None = Field(
        default=None, description="Offending path, invariant or id when known"
    )
    status: int = Field(description="HTTP-style status class (400/401/404/503/500)")


class PlanSummary(BaseModel):
    """Plan header for listings."""

    id: str
    name: str
    race_id: str
    goal_time: str
    start_date: str
    total_weeks: int
    status: str
    created_at: str


def ok(key: str, payload: Any, **extra: Any) -> dict:
    """Build a success envelope carrying payload under key."""
    return {"success": True, key: payload, **extra}


def fail(error: Exception) -> dict:
    """
    Build a failure envelope from an exception.

    PlannerErrors keep their status class and structured detail; anything
    else is reported as an unclassified server error.
    """
    if isinstance(error, PlannerError):
        response = ErrorResponse(
            error=str(error),
            details=error.to_detail(),
            status=error.status_code,
        )
    else:
        logger.error(f"Unclassified error: {error}", exc_info=error)
        response = ErrorResponse(error="Server error", details=str(error), status=500)
    return response.model_dump()
