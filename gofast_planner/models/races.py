# gofast_planner/models/races.py
"""Race registry entries."""

from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class RaceRecord(BaseModel):
    """
    Canonical race catalog entry.

    miles is expected to match the distance implied by race_type, but the
    registry does not enforce it; the response validator does.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(default="", description="Registry identifier")
    name: str = Field(..., min_length=1)
    race_type: str = Field(..., min_length=1, description="marathon, half, 10k, 5k, 10m")
    miles: float = Field(..., gt=0)
    date: date
    location: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
