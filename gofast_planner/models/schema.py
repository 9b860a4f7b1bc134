# gofast_planner/models/schema.py
"""
Database schema definition for SQLite persistence.

Provides DDL for configuration artifacts, races and training plans, plus
schema initialization.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

logger = logging.getLogger(__name__)

# Schema version for future migrations
SCHEMA_VERSION = 1

ARTIFACTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS artifacts (
    id TEXT PRIMARY KEY,
    kind TEXT NOT NULL CHECK(kind IN ('role', 'rule_set', 'must_haves', 'return_format')),
    name TEXT NOT NULL,
    version INTEGER NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE(kind, name, version)
)
"""

RACES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS races (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    race_type TEXT NOT NULL,
    miles REAL NOT NULL,
    date TEXT NOT NULL,
    location TEXT,
    created_at TEXT NOT NULL
)
"""

PLANS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS training_plans (
    id TEXT PRIMARY KEY,
    athlete_id TEXT NOT NULL,
    race_id TEXT NOT NULL REFERENCES races(id),
    name TEXT NOT NULL,
    goal_time TEXT NOT NULL,
    start_date TEXT NOT NULL,
    total_weeks INTEGER NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('active', 'archived')),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

PHASES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS plan_phases (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    plan_id TEXT NOT NULL REFERENCES training_plans(id) ON DELETE CASCADE,
    name TEXT NOT NULL CHECK(name IN ('base', 'build', 'peak', 'taper')),
    position INTEGER NOT NULL,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    run_types TEXT NOT NULL
)
"""

WEEKS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS plan_weeks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    phase_id INTEGER NOT NULL REFERENCES plan_phases(id) ON DELETE CASCADE,
    week_index INTEGER NOT NULL,
    start_date TEXT NOT NULL
)
"""

RUNS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS plan_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    week_id INTEGER NOT NULL REFERENCES plan_weeks(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    run_type TEXT NOT NULL CHECK(run_type IN ('easy', 'tempo', 'intervals', 'longRun')),
    day_index INTEGER,
    date TEXT,
    mileage REAL,
    details TEXT
)
"""

INDEX_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_artifacts_kind_created ON artifacts(kind, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_races_date ON races(date)",
    "CREATE INDEX IF NOT EXISTS idx_plans_athlete ON training_plans(athlete_id, created_at)",
]


async def _get_schema_version(db: aiosqlite.Connection) -> int:
    """
    Get current schema version from database.

    Returns:
        Schema version (0 if no version table exists)
    """
    try:
        cursor = await db.execute("SELECT version FROM schema_version LIMIT 1")
        row = await cursor.fetchone()
        return row[0] if row else 0
    except aiosqlite.OperationalError:
        return 0


async def _set_schema_version(db: aiosqlite.Connection, version: int) -> None:
    await db.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER)")
    await db.execute("DELETE FROM schema_version")
    await db.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))


@asynccontextmanager
async def connect(db_path: str) -> AsyncIterator[aiosqlite.Connection]:
    """
    Open a connection with row access by name and foreign keys enforced.

    Foreign keys are a per-connection setting in SQLite, so every connection
    goes through here.
    """
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        await db.execute("PRAGMA busy_timeout=5000")
        yield db


async def init_db(db_path: str) -> None:
    """
    Initialize database schema with WAL mode and optimal settings.

    Settings:
        - WAL mode: Concurrent reads + writes
        - synchronous=NORMAL: Good durability/performance balance
    """
    async with connect(db_path) as db:
        await db.execute("PRAGMA journal_mode=WAL")
        await db.execute("PRAGMA synchronous=NORMAL")

        for ddl in (
            ARTIFACTS_TABLE_SQL,
            RACES_TABLE_SQL,
            PLANS_TABLE_SQL,
            PHASES_TABLE_SQL,
            WEEKS_TABLE_SQL,
            RUNS_TABLE_SQL,
            *INDEX_SQL,
        ):
            await db.execute(ddl)

        current_version = await _get_schema_version(db)
        if current_version < SCHEMA_VERSION:
            await _set_schema_version(db, SCHEMA_VERSION)
            logger.info(f"New database initialized at v{SCHEMA_VERSION}")

        await db.commit()

    logger.info(f"Initialized database at {db_path} (schema v{SCHEMA_VERSION})")
