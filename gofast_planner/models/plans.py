# gofast_planner/models/plans.py
"""
Plan models: generation context, validated plan, and the persisted plan tree.

ValidatedPlan is pipeline-internal and only exists after both validation
stages pass. TrainingPlan is what the plan store persists.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gofast_planner.models.races import RaceRecord

PhaseName = Literal["base", "build", "peak", "taper"]
RunType = Literal["easy", "tempo", "intervals", "longRun"]


class GenerationContext(BaseModel):
    """Run-time facts for one generation request."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    race: RaceRecord
    goal_time: str = Field(..., min_length=1, description="H:MM:SS or MM:SS")
    plan_start_date: date
    total_weeks: int | None = Field(default=None, ge=1)
    current_weekly_mileage: float | None = Field(default=None, ge=0)
    preferred_days: list[int] = Field(default_factory=list)
    five_k_pace: str | None = None
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Additional placeholder values"
    )

    @field_validator("preferred_days")
    @classmethod
    def _check_days(cls, value: list[int]) -> list[int]:
        for day in value:
            if not 1 <= day <= 7:
                raise ValueError(f"Preferred day must be 1-7 (Monday=1), got {day}")
        return value

    @property
    def race_id(self) -> str:
        return self.race.id

    def resolved_total_weeks(self) -> int:
        """total_weeks if given, else whole weeks from plan start to race day."""
        if self.total_weeks is not None:
            return self.total_weeks
        days = (self.race.date - self.plan_start_date).days
        return max(1, math.ceil(days / 7))


class RunTypeToggles(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    easy: bool
    tempo: bool
    intervals: bool
    long_run: bool = Field(alias="longRun")


class PlannedRun(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RunType
    day_index: int | None = Field(default=None, ge=1, le=7)
    mileage: float | None = Field(default=None, ge=0)
    details: dict[str, Any] = Field(default_factory=dict)


class PlannedWeek(BaseModel):
    model_config = ConfigDict(frozen=True)

    week_index: int | None = None
    runs: list[PlannedRun]


class PlannedPhase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: PhaseName
    run_types: RunTypeToggles
    weeks: list[PlannedWeek]


class ValidatedPlan(BaseModel):
    """Fully checked plan structure; phases are in canonical order."""

    model_config = ConfigDict(frozen=True)

    phases: list[PlannedPhase]
    total_weeks: int

    @property
    def week_count(self) -> int:
        return sum(len(p.weeks) for p in self.phases)


class PlanStatus(str, Enum):
    """Lifecycle states of a persisted plan."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class RunRow:
    """A persisted run (workout)."""

    run_type: str
    week_index: int
    day_index: int | None
    date: date | None
    mileage: float | None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class WeekRow:
    """A persisted plan week, numbered 1..N across the whole plan."""

    week_index: int
    start_date: date
    runs: list[RunRow] = field(default_factory=list)


@dataclass
class PhaseRow:
    """A persisted phase with its run-type enablement."""

    name: str
    position: int
    start_date: date
    end_date: date
    run_types: dict[str, bool]
    weeks: list[WeekRow] = field(default_factory=list)


@dataclass
class TrainingPlan:
    """
    Persistable training plan tree linked to one race.

    Content is fixed at creation; only status changes afterwards.
    """

    athlete_id: str
    race_id: str
    name: str
    goal_time: str
    start_date: date
    total_weeks: int
    status: PlanStatus
    phases: list[PhaseRow]
    plan_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation for response envelopes."""
        return {
            "id": self.plan_id,
            "athlete_id": self.athlete_id,
            "race_id": self.race_id,
            "name": self.name,
            "goal_time": self.goal_time,
            "start_date": self.start_date.isoformat(),
            "total_weeks": self.total_weeks,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "phases": [
                {
                    "name": phase.name,
                    "position": phase.position,
                    "start_date": phase.start_date.isoformat(),
                    "end_date": phase.end_date.isoformat(),
                    "run_types": dict(phase.run_types),
                    "weeks": [
                        {
                            "week_index": week.week_index,
                            "start_date": week.start_date.isoformat(),
                            "runs": [
                                # Computed keys win over same-named model extras
                                {
                                    **run.details,
                                    "type": run.run_type,
                                    "day_index": run.day_index,
                                    "date": run.date.isoformat() if run.date else None,
                                    "mileage": run.mileage,
                                }
                                for run in week.runs
                            ],
                        }
                        for week in phase.weeks
                    ],
                }
                for phase in self.phases
            ],
        }
