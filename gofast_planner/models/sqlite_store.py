# gofast_planner/models/sqlite_store.py
"""
SQLite-backed registries and plan store.

Provides async CRUD operations with WAL mode and IMMEDIATE transactions.
No persistent connections are held between calls.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

import aiosqlite
from pydantic import ValidationError

from gofast_planner.errors import ArtifactValidationError
from gofast_planner.models.artifacts import ARTIFACT_MODELS, Artifact, ArtifactKind
from gofast_planner.models.plans import (
    PhaseRow,
    PlanStatus,
    RunRow,
    TrainingPlan,
    WeekRow,
)
from gofast_planner.models.races import RaceRecord
from gofast_planner.models.schema import connect, init_db
from gofast_planner.models.store import ConfigRegistry, PlanStore, RaceRegistry

logger = logging.getLogger(__name__)

_SERVER_FIELDS = {"id", "version", "created_at"}


def generate_id() -> str:
    """
    Generate a unique row ID.

    Returns:
        12-character hex string (UUID4 truncated)
    """
    return uuid4().hex[:12]


def _format_validation_error(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in e.errors()
    )


class _SQLiteBase:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        """Create tables if needed (idempotent)."""
        await init_db(self._db_path)

    async def close(self) -> None:
        """
        Checkpoint WAL.

        Truncates WAL file to avoid unbounded growth.
        """
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("PRAGMA wal_checkpoint(TRUNCATE)")
                logger.info("WAL checkpoint completed")
        except aiosqlite.Error as e:
            logger.warning(f"WAL checkpoint failed: {e}")


class SQLiteConfigRegistry(_SQLiteBase, ConfigRegistry):
    """
    Append-only artifact storage.

    Creating an artifact whose name already exists for its kind stores a new
    row with the next version number; rows are never updated.
    """

    async def get(self, kind: ArtifactKind, artifact_id: str) -> Artifact | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM artifacts WHERE id = ? AND kind = ?",
                (artifact_id, ArtifactKind(kind).value),
            )
            row = await cursor.fetchone()

        if not row:
            return None
        return self._row_to_artifact(row)

    async def list_all(self, kind: ArtifactKind) -> list[Artifact]:
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM artifacts WHERE kind = ? "
                "ORDER BY created_at DESC, rowid DESC",
                (ArtifactKind(kind).value,),
            )
            rows = await cursor.fetchall()

        return [self._row_to_artifact(row) for row in rows]

    async def create(self, kind: ArtifactKind, payload: dict[str, Any]) -> Artifact:
        kind = ArtifactKind(kind)
        model = ARTIFACT_MODELS[kind]
        clean = {k: v for k, v in payload.items() if k not in _SERVER_FIELDS}

        try:
            artifact = model.model_validate(clean)
        except ValidationError as e:
            raise ArtifactValidationError(
                f"Invalid {kind.value}: {_format_validation_error(e)}"
            ) from None

        async with connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute(
                    "SELECT MAX(version) FROM artifacts WHERE kind = ? AND name = ?",
                    (kind.value, artifact.label),
                )
                row = await cursor.fetchone()
                version = (row[0] or 0) + 1

                artifact = artifact.model_copy(
                    update={"id": generate_id(), "version": version}
                )
                body = artifact.model_dump_json(by_alias=True, exclude=_SERVER_FIELDS)

                await db.execute(
                    "INSERT INTO artifacts (id, kind, name, version, payload, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        artifact.id,
                        kind.value,
                        artifact.label,
                        version,
                        body,
                        artifact.created_at.isoformat(),
                    ),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            f"Created {kind.value} {artifact.id} ('{artifact.label}' v{version})"
        )
        return artifact

    def _row_to_artifact(self, row: aiosqlite.Row) -> Artifact:
        model = ARTIFACT_MODELS[ArtifactKind(row["kind"])]
        data = json.loads(row["payload"])
        data.update(
            id=row["id"],
            version=row["version"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
        return model.model_validate(data)


class SQLiteRaceRegistry(_SQLiteBase, RaceRegistry):
    """Race catalog backed by the races table."""

    async def get(self, race_id: str) -> RaceRecord | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute("SELECT * FROM races WHERE id = ?", (race_id,))
            row = await cursor.fetchone()

        return self._row_to_race(row) if row else None

    async def search(self, query: str, limit: int = 20) -> list[RaceRecord]:
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM races WHERE name LIKE ? ESCAPE '\\' "
                "ORDER BY date ASC, name ASC LIMIT ?",
                (f"%{escaped}%", limit),
            )
            rows = await cursor.fetchall()

        return [self._row_to_race(row) for row in rows]

    async def create(self, race: RaceRecord) -> RaceRecord:
        async with connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute(
                    "SELECT * FROM races WHERE lower(name) = lower(?) AND date = ?",
                    (race.name, race.date.isoformat()),
                )
                existing = await cursor.fetchone()
                if existing:
                    await db.rollback()
                    logger.info(f"Race already in registry: {existing['id']}")
                    return self._row_to_race(existing)

                race = race.model_copy(update={"id": race.id or generate_id()})
                await db.execute(
                    "INSERT INTO races (id, name, race_type, miles, date, location, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        race.id,
                        race.name,
                        race.race_type,
                        race.miles,
                        race.date.isoformat(),
                        race.location,
                        race.created_at.isoformat(),
                    ),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(f"Created race {race.id} ('{race.name}', {race.race_type})")
        return race

    def _row_to_race(self, row: aiosqlite.Row) -> RaceRecord:
        return RaceRecord(
            id=row["id"],
            name=row["name"],
            race_type=row["race_type"],
            miles=row["miles"],
            date=date.fromisoformat(row["date"]),
            location=row["location"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLitePlanStore(_SQLiteBase, PlanStore):
    """
    Training plan persistence.

    A plan and all of its phase/week/run rows are written in a single
    IMMEDIATE transaction; any failure rolls the whole tree back.
    """

    async def create(self, plan: TrainingPlan) -> str:
        plan_id = plan.plan_id or generate_id()
        now = datetime.now(timezone.utc).isoformat()

        async with connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                await db.execute(
                    """
                    INSERT INTO training_plans (
                        id, athlete_id, race_id, name, goal_time, start_date,
                        total_weeks, status, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        plan_id,
                        plan.athlete_id,
                        plan.race_id,
                        plan.name,
                        plan.goal_time,
                        plan.start_date.isoformat(),
                        plan.total_weeks,
                        plan.status.value,
                        plan.created_at.isoformat(),
                        now,
                    ),
                )

                for phase in plan.phases:
                    cursor = await db.execute(
                        "INSERT INTO plan_phases (plan_id, name, position, start_date, end_date, run_types) "
                        "VALUES (?, ?, ?, ?, ?, ?)",
                        (
                            plan_id,
                            phase.name,
                            phase.position,
                            phase.start_date.isoformat(),
                            phase.end_date.isoformat(),
                            json.dumps(phase.run_types),
                        ),
                    )
                    phase_id = cursor.lastrowid

                    for week in phase.weeks:
                        cursor = await db.execute(
                            "INSERT INTO plan_weeks (phase_id, week_index, start_date) "
                            "VALUES (?, ?, ?)",
                            (phase_id, week.week_index, week.start_date.isoformat()),
                        )
                        week_id = cursor.lastrowid

                        await db.executemany(
                            "INSERT INTO plan_runs (week_id, position, run_type, day_index, date, mileage, details) "
                            "VALUES (?, ?, ?, ?, ?, ?, ?)",
                            [
                                (
                                    week_id,
                                    position,
                                    run.run_type,
                                    run.day_index,
                                    run.date.isoformat() if run.date else None,
                                    run.mileage,
                                    json.dumps(run.details),
                                )
                                for position, run in enumerate(week.runs)
                            ],
                        )

                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            f"Persisted plan {plan_id} for athlete {plan.athlete_id} "
            f"({plan.total_weeks} weeks, race {plan.race_id})"
        )
        return plan_id

    async def get(self, athlete_id: str, plan_id: str) -> TrainingPlan | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM training_plans WHERE id = ? AND athlete_id = ?",
                (plan_id, athlete_id),
            )
            header = await cursor.fetchone()
            if not header:
                return None

            cursor = await db.execute(
                "SELECT * FROM plan_phases WHERE plan_id = ? ORDER BY position",
                (plan_id,),
            )
            phase_rows = await cursor.fetchall()

            phases = []
            for phase_row in phase_rows:
                cursor = await db.execute(
                    "SELECT * FROM plan_weeks WHERE phase_id = ? ORDER BY week_index",
                    (phase_row["id"],),
                )
                weeks = []
                for week_row in await cursor.fetchall():
                    run_cursor = await db.execute(
                        "SELECT * FROM plan_runs WHERE week_id = ? ORDER BY position",
                        (week_row["id"],),
                    )
                    runs = [
                        RunRow(
                            run_type=r["run_type"],
                            week_index=week_row["week_index"],
                            day_index=r["day_index"],
                            date=date.fromisoformat(r["date"]) if r["date"] else None,
                            mileage=r["mileage"],
                            details=json.loads(r["details"]) if r["details"] else {},
                        )
                        for r in await run_cursor.fetchall()
                    ]
                    weeks.append(
                        WeekRow(
                            week_index=week_row["week_index"],
                            start_date=date.fromisoformat(week_row["start_date"]),
                            runs=runs,
                        )
                    )

                phases.append(
                    PhaseRow(
                        name=phase_row["name"],
                        position=phase_row["position"],
                        start_date=date.fromisoformat(phase_row["start_date"]),
                        end_date=date.fromisoformat(phase_row["end_date"]),
                        run_types=json.loads(phase_row["run_types"]),
                        weeks=weeks,
                    )
                )

        return self._row_to_plan(header, phases)

    async def list_for_athlete(self, athlete_id: str) -> list[TrainingPlan]:
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM training_plans WHERE athlete_id = ? "
                "ORDER BY created_at DESC, rowid DESC",
                (athlete_id,),
            )
            rows = await cursor.fetchall()

        return [self._row_to_plan(row, []) for row in rows]

    async def update_status(
        self, athlete_id: str, plan_id: str, status: PlanStatus
    ) -> TrainingPlan | None:
        async with connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute(
                    "UPDATE training_plans SET status = ?, updated_at = ? "
                    "WHERE id = ? AND athlete_id = ?",
                    (
                        PlanStatus(status).value,
                        datetime.now(timezone.utc).isoformat(),
                        plan_id,
                        athlete_id,
                    ),
                )
                updated = cursor.rowcount
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        if not updated:
            return None
        logger.info(f"Plan {plan_id} status -> {PlanStatus(status).value}")
        return await self.get(athlete_id, plan_id)

    def _row_to_plan(self, row: aiosqlite.Row, phases: list[PhaseRow]) -> TrainingPlan:
        return TrainingPlan(
            plan_id=row["id"],
            athlete_id=row["athlete_id"],
            race_id=row["race_id"],
            name=row["name"],
            goal_time=row["goal_time"],
            start_date=date.fromisoformat(row["start_date"]),
            total_weeks=row["total_weeks"],
            status=PlanStatus(row["status"]),
            phases=phases,
            created_at=datetime.fromisoformat(row["created_at"]),
        )
