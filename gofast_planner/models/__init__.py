# gofast_planner/models/__init__.py
"""
Data models for gofast-planner.

Provides configuration artifacts, race and plan models, persistence
contracts and response envelopes.
"""

from gofast_planner.models.artifacts import (
    ARTIFACT_MODELS,
    Artifact,
    ArtifactKind,
    MustHaves,
    ReturnFormat,
    Role,
    Rule,
    RuleSet,
)
from gofast_planner.models.plans import (
    GenerationContext,
    PhaseRow,
    PlannedPhase,
    PlannedRun,
    PlannedWeek,
    PlanStatus,
    RunRow,
    RunTypeToggles,
    TrainingPlan,
    ValidatedPlan,
    WeekRow,
)
from gofast_planner.models.races import RaceRecord
from gofast_planner.models.responses import ErrorResponse, PlanSummary, fail, ok
from gofast_planner.models.store import ConfigRegistry, PlanStore, RaceRegistry

__all__ = [
    # Artifacts
    "ArtifactKind",
    "Artifact",
    "ARTIFACT_MODELS",
    "Role",
    "Rule",
    "RuleSet",
    "MustHaves",
    "ReturnFormat",
    # Races and plans
    "RaceRecord",
    "GenerationContext",
    "RunTypeToggles",
    "PlannedRun",
    "PlannedWeek",
    "PlannedPhase",
    "ValidatedPlan",
    "PlanStatus",
    "RunRow",
    "WeekRow",
    "PhaseRow",
    "TrainingPlan",
    # Persistence contracts
    "ConfigRegistry",
    "RaceRegistry",
    "PlanStore",
    # Responses
    "ErrorResponse",
    "PlanSummary",
    "ok",
    "fail",
]
