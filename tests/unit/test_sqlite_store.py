# tests/unit/test_sqlite_store.py
"""
Unit tests for the SQLite registries and plan store.

Tests append-only artifact versioning, race dedupe/search, and transactional
plan persistence scoped to the owning athlete.
"""

import asyncio
from datetime import date
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from gofast_planner.errors import ArtifactValidationError
from gofast_planner.models.artifacts import ArtifactKind
from gofast_planner.models.plans import (
    PhaseRow,
    PlanStatus,
    RunRow,
    TrainingPlan,
    WeekRow,
)
from gofast_planner.models.races import RaceRecord
from gofast_planner.models.sqlite_store import (
    SQLiteConfigRegistry,
    SQLitePlanStore,
    SQLiteRaceRegistry,
)


@pytest_asyncio.fixture
async def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "test_planner.db")
    registry = SQLiteConfigRegistry(path)
    await registry.initialize()
    return path


@pytest_asyncio.fixture
async def registry(db_path: str):
    r = SQLiteConfigRegistry(db_path)
    yield r
    await r.close()


@pytest.fixture
def races(db_path: str) -> SQLiteRaceRegistry:
    return SQLiteRaceRegistry(db_path)


@pytest.fixture
def plans(db_path: str) -> SQLitePlanStore:
    return SQLitePlanStore(db_path)


def _plan(race_id: str, athlete_id: str = "athlete-1") -> TrainingPlan:
    start = date(2026, 3, 2)
    return TrainingPlan(
        athlete_id=athlete_id,
        race_id=race_id,
        name="Brooklyn Half Training Plan",
        goal_time="1:45:00",
        start_date=start,
        total_weeks=1,
        status=PlanStatus.ACTIVE,
        phases=[
            PhaseRow(
                name="base",
                position=0,
                start_date=start,
                end_date=date(2026, 3, 8),
                run_types={"easy": True, "tempo": False, "intervals": False, "longRun": True},
                weeks=[
                    WeekRow(
                        week_index=1,
                        start_date=start,
                        runs=[
                            RunRow("easy", 1, 2, date(2026, 3, 3), 4.0, {"notes": "relaxed"}),
                            RunRow("longRun", 1, 7, date(2026, 3, 8), 8.0),
                        ],
                    )
                ],
            )
        ],
    )


# Config registry


@pytest.mark.asyncio
async def test_artifact_create_and_get(registry: SQLiteConfigRegistry):
    created = await registry.create(
        ArtifactKind.ROLE, {"title": "Coach", "system_instructions": "Coach runners."}
    )

    assert len(created.id) == 12
    assert created.version == 1

    fetched = await registry.get(ArtifactKind.ROLE, created.id)
    assert fetched is not None
    assert fetched.title == "Coach"
    assert fetched.system_instructions == "Coach runners."


@pytest.mark.asyncio
async def test_artifact_get_wrong_kind_returns_none(registry: SQLiteConfigRegistry):
    created = await registry.create(
        ArtifactKind.ROLE, {"title": "Coach", "system_instructions": "x"}
    )
    assert await registry.get(ArtifactKind.RULE_SET, created.id) is None
    assert await registry.get(ArtifactKind.ROLE, "doesnotexist") is None


@pytest.mark.asyncio
async def test_artifact_same_name_creates_new_version(registry: SQLiteConfigRegistry):
    v1 = await registry.create(ArtifactKind.RULE_SET, {"name": "Half", "rules": ["a"]})
    v2 = await registry.create(ArtifactKind.RULE_SET, {"name": "Half", "rules": ["a", "b"]})

    assert v1.id != v2.id
    assert (v1.version, v2.version) == (1, 2)

    # The original row is untouched
    original = await registry.get(ArtifactKind.RULE_SET, v1.id)
    assert [r.text for r in original.rules] == ["a"]


@pytest.mark.asyncio
async def test_artifact_server_fields_ignored(registry: SQLiteConfigRegistry):
    created = await registry.create(
        ArtifactKind.ROLE,
        {"id": "chosen-by-caller", "version": 9, "title": "Coach", "system_instructions": "x"},
    )
    assert created.id != "chosen-by-caller"
    assert created.version == 1


@pytest.mark.asyncio
async def test_artifact_list_newest_first(registry: SQLiteConfigRegistry):
    first = await registry.create(ArtifactKind.ROLE, {"title": "A", "system_instructions": "x"})
    second = await registry.create(ArtifactKind.ROLE, {"title": "B", "system_instructions": "x"})
    await registry.create(ArtifactKind.RULE_SET, {"name": "R", "rules": ["r"]})

    listed = await registry.list_all(ArtifactKind.ROLE)
    assert [a.id for a in listed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_artifact_invalid_payload_raises(registry: SQLiteConfigRegistry):
    with pytest.raises(ArtifactValidationError, match="rules"):
        await registry.create(ArtifactKind.RULE_SET, {"name": "Empty", "rules": []})

    assert await registry.list_all(ArtifactKind.RULE_SET) == []


@pytest.mark.asyncio
async def test_return_format_schema_roundtrip(registry: SQLiteConfigRegistry):
    schema = {"type": "object", "required": ["phases"]}
    created = await registry.create(
        ArtifactKind.RETURN_FORMAT,
        {"name": "Plan", "schema": schema, "example": {"phases": []}},
    )
    fetched = await registry.get(ArtifactKind.RETURN_FORMAT, created.id)
    assert fetched.json_schema == schema
    assert fetched.example == {"phases": []}


# Race registry


@pytest.mark.asyncio
async def test_race_create_dedupes_by_name_and_date(races: SQLiteRaceRegistry):
    first = await races.create(
        RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 5, 16))
    )
    again = await races.create(
        RaceRecord(name="BROOKLYN HALF", race_type="half", miles=13.1, date=date(2026, 5, 16))
    )
    other_year = await races.create(
        RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2027, 5, 15))
    )

    assert again.id == first.id
    assert other_year.id != first.id


@pytest.mark.asyncio
async def test_race_search_case_insensitive_date_ascending(races: SQLiteRaceRegistry):
    await races.create(RaceRecord(name="Chicago Marathon", race_type="marathon", miles=26.2, date=date(2026, 10, 11)))
    await races.create(RaceRecord(name="Boston Marathon", race_type="marathon", miles=26.2, date=date(2026, 4, 20)))
    await races.create(RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 5, 16)))

    found = await races.search("MARATHON")
    assert [r.name for r in found] == ["Boston Marathon", "Chicago Marathon"]


@pytest.mark.asyncio
async def test_race_search_limit_and_wildcards(races: SQLiteRaceRegistry):
    for day in range(1, 26):
        await races.create(RaceRecord(name=f"Park 5k #{day}", race_type="5k", miles=3.1, date=date(2026, 6, day)))

    assert len(await races.search("park")) == 20
    assert await races.search("%") == []


@pytest.mark.asyncio
async def test_race_get_missing(races: SQLiteRaceRegistry):
    assert await races.get("nope00000000") is None


# Plan store


@pytest.mark.asyncio
async def test_plan_create_and_get_roundtrip(races: SQLiteRaceRegistry, plans: SQLitePlanStore):
    race = await races.create(RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 4, 26)))
    plan_id = await plans.create(_plan(race.id))

    plan = await plans.get("athlete-1", plan_id)
    assert plan is not None
    assert plan.plan_id == plan_id
    assert plan.status == PlanStatus.ACTIVE
    assert plan.race_id == race.id
    assert len(plan.phases) == 1

    week = plan.phases[0].weeks[0]
    assert [r.run_type for r in week.runs] == ["easy", "longRun"]
    assert week.runs[0].date == date(2026, 3, 3)
    assert week.runs[0].details == {"notes": "relaxed"}
    assert plan.phases[0].run_types["longRun"] is True


@pytest.mark.asyncio
async def test_plan_get_scoped_to_athlete(races: SQLiteRaceRegistry, plans: SQLitePlanStore):
    race = await races.create(RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 4, 26)))
    plan_id = await plans.create(_plan(race.id, athlete_id="athlete-1"))

    assert await plans.get("someone-else", plan_id) is None
    assert await plans.list_for_athlete("someone-else") == []
    assert [p.plan_id for p in await plans.list_for_athlete("athlete-1")] == [plan_id]


@pytest.mark.asyncio
async def test_plan_with_missing_race_leaves_no_rows(plans: SQLitePlanStore, db_path: str):
    with pytest.raises(aiosqlite.IntegrityError):
        await plans.create(_plan("missing-race"))

    async with aiosqlite.connect(db_path) as db:
        for table in ("training_plans", "plan_phases", "plan_weeks", "plan_runs"):
            cursor = await db.execute(f"SELECT COUNT(*) FROM {table}")
            assert (await cursor.fetchone())[0] == 0


@pytest.mark.asyncio
async def test_plan_status_update(races: SQLiteRaceRegistry, plans: SQLitePlanStore):
    race = await races.create(RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 4, 26)))
    plan_id = await plans.create(_plan(race.id))

    archived = await plans.update_status("athlete-1", plan_id, PlanStatus.ARCHIVED)
    assert archived.status == PlanStatus.ARCHIVED
    # Content unchanged
    assert len(archived.phases[0].weeks[0].runs) == 2

    assert await plans.update_status("someone-else", plan_id, PlanStatus.ACTIVE) is None
    assert (await plans.get("athlete-1", plan_id)).status == PlanStatus.ARCHIVED


@pytest.mark.asyncio
async def test_concurrent_plan_writes(races: SQLiteRaceRegistry, plans: SQLitePlanStore):
    race = await races.create(RaceRecord(name="Brooklyn Half", race_type="half", miles=13.1, date=date(2026, 4, 26)))

    ids = await asyncio.gather(*(plans.create(_plan(race.id)) for _ in range(5)))

    assert len(set(ids)) == 5
    assert len(await plans.list_for_athlete("athlete-1")) == 5
