# tests/unit/conftest.py
"""Shared fixtures: a half-marathon race, context, artifacts and plan documents."""

import json
from datetime import date

import pytest

from gofast_planner.models.artifacts import MustHaves, ReturnFormat, Role, RuleSet
from gofast_planner.models.plans import GenerationContext
from gofast_planner.models.races import RaceRecord

PHASES = ["base", "build", "peak", "taper"]

PLAN_SCHEMA = {
    "type": "object",
    "required": ["phases"],
    "properties": {
        "totalWeeks": {"type": "integer"},
        "phases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "weeks"],
                "properties": {
                    "name": {"type": "string"},
                    "weeks": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["runs"],
                            "properties": {
                                "runs": {
                                    "type": "array",
                                    "items": {"type": "object", "required": ["type"]},
                                }
                            },
                        },
                    },
                },
            },
        },
    },
}


@pytest.fixture
def race() -> RaceRecord:
    return RaceRecord(
        id="race0000abcd",
        name="Brooklyn Half",
        race_type="half",
        miles=13.1,
        date=date(2026, 4, 26),
        location="Brooklyn, NY",
    )


@pytest.fixture
def context(race: RaceRecord) -> GenerationContext:
    """8-week plan starting Monday 2026-03-02."""
    return GenerationContext(
        race=race,
        goal_time="1:45:00",
        plan_start_date=date(2026, 3, 2),
        total_weeks=8,
        current_weekly_mileage=20,
        preferred_days=[2, 4, 7],
    )


@pytest.fixture
def role() -> Role:
    return Role(
        id="role0000abcd",
        title="Running Coach",
        system_instructions="You are an expert running coach building a {totalWeeks}-week plan.",
    )


@pytest.fixture
def rule_set() -> RuleSet:
    return RuleSet(
        id="rules000abcd",
        name="Half marathon rules",
        rules=[
            {"text": "Start on {planStartDate}.", "topic": "Schedule"},
            {"text": "Train on {preferredDays}.", "topic": "Schedule"},
            {"text": "Increase weekly mileage by at most 10%.", "topic": "Volume"},
            "Finish with a taper.",
        ],
    )


@pytest.fixture
def must_haves() -> MustHaves:
    return MustHaves(
        id="musthaveabcd",
        fields={
            "phases[].name": "Phase name",
            "phases[].weeks[].runs[].type": "Run type",
            "phases[].weeks[].runs[].mileage": "Miles for the run",
        },
    )


@pytest.fixture
def return_format() -> ReturnFormat:
    return ReturnFormat(id="format00abcd", name="Plan JSON", schema=PLAN_SCHEMA)


@pytest.fixture
def plan_doc():
    """Factory for generation output documents (2 weeks per phase by default)."""

    def _make(phases=None, weeks_per_phase=2, run_types=("easy", "Long Run"), **extra) -> dict:
        names = PHASES if phases is None else phases
        doc = {
            "totalWeeks": weeks_per_phase * len(names),
            "phases": [
                {
                    "name": name,
                    "weeks": [
                        {
                            "runs": [
                                {"type": rt, "dayIndex": 2 + 5 * (i % 2), "mileage": 4 + i}
                                for i, rt in enumerate(run_types)
                            ]
                        }
                        for _ in range(weeks_per_phase)
                    ],
                }
                for name in names
            ],
        }
        doc.update(extra)
        return doc

    return _make


@pytest.fixture
def plan_json(plan_doc):
    """Factory returning plan documents serialized as backend text."""

    def _make(*args, **kwargs) -> str:
        return json.dumps(plan_doc(*args, **kwargs))

    return _make
