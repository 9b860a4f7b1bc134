# gofast_planner/server.py
"""
FastMCP server instance with tool registration.

CRITICAL: configure_logging() is called first to prevent stdout pollution.
All logging goes to stderr as JSON.
"""

# Configure logging FIRST before any other imports
from gofast_planner.logging_config import configure_logging

configure_logging()

# Now safe to import everything else
import logging
from typing import Any

from fastmcp import FastMCP

from gofast_planner.config.loader import load_config
from gofast_planner.config.schema import PlannerConfig
from gofast_planner.lifecycle import ServerLifecycle
from gofast_planner.tools.artifacts import create_artifact as _create_artifact
from gofast_planner.tools.artifacts import get_artifact as _get_artifact
from gofast_planner.tools.artifacts import list_artifacts as _list_artifacts
from gofast_planner.tools.generate_plan import generate_plan as _generate_plan
from gofast_planner.tools.plans import get_plan as _get_plan
from gofast_planner.tools.plans import list_plans as _list_plans
from gofast_planner.tools.plans import update_plan_status as _update_plan_status
from gofast_planner.tools.races import create_race as _create_race
from gofast_planner.tools.races import search_races as _search_races

logger = logging.getLogger(__name__)

mcp = FastMCP("gofast-planner")

# Lifecycle manager (initialized by __main__.py)
_lifecycle: ServerLifecycle | None = None


def get_lifecycle() -> ServerLifecycle:
    """
    Get the running lifecycle.

    Raises:
        RuntimeError: If lifecycle not initialized (should never happen)
    """
    if _lifecycle is None:
        raise RuntimeError("Server lifecycle not initialized. Call initialize_lifecycle() first.")
    return _lifecycle


async def initialize_lifecycle(config: PlannerConfig | None = None) -> ServerLifecycle:
    """
    Initialize the server lifecycle (stores + LLM client + pipeline).

    Must be called before any tool calls. Called by __main__.py on startup.

    Args:
        config: PlannerConfig instance (loaded from the config file if None)
    """
    global _lifecycle

    actual_config = config or load_config()
    logger.info(f"Loaded configuration: provider={actual_config.provider}")

    _lifecycle = ServerLifecycle(actual_config)
    await _lifecycle.startup()
    return _lifecycle


@mcp.tool()
async def list_artifacts(kind: str) -> dict:
    """List configuration artifacts of one kind (role, rule_set, must_haves, return_format), newest first."""
    return await _list_artifacts(kind, registry=get_lifecycle().registry)


@mcp.tool()
async def get_artifact(kind: str, artifact_id: str) -> dict:
    """Get one configuration artifact by kind and id."""
    return await _get_artifact(kind, artifact_id, registry=get_lifecycle().registry)


@mcp.tool()
async def create_artifact(kind: str, payload: dict[str, Any]) -> dict:
    """Create a configuration artifact. Reusing a name stores a new version."""
    return await _create_artifact(kind, payload, registry=get_lifecycle().registry)


@mcp.tool()
async def search_races(query: str) -> dict:
    """Search races by name (case-insensitive substring), up to 20, soonest first."""
    return await _search_races(query, races=get_lifecycle().races)


@mcp.tool()
async def create_race(
    name: str,
    race_type: str,
    race_date: str,
    miles: float | None = None,
    location: str | None = None,
) -> dict:
    """Add a race (marathon, half, 10k, 5k, 10m). Returns the existing race if name and date match."""
    return await _create_race(
        name, race_type, race_date, races=get_lifecycle().races, miles=miles, location=location
    )


@mcp.tool()
async def generate_plan(
    athlete_id: str,
    role_id: str,
    rule_set_id: str,
    must_haves_id: str,
    return_format_id: str,
    race_id: str,
    goal_time: str,
    plan_start_date: str,
    total_weeks: int | None = None,
    current_weekly_mileage: float | None = None,
    preferred_days: list[int] | None = None,
    five_k_pace: str | None = None,
) -> dict:
    """Generate, validate and save a training plan for a race from the selected artifacts."""
    lifecycle = get_lifecycle()
    return await _generate_plan(
        athlete_id,
        role_id,
        rule_set_id,
        must_haves_id,
        return_format_id,
        race_id,
        goal_time,
        plan_start_date,
        pipeline=lifecycle.pipeline,
        races=lifecycle.races,
        total_weeks=total_weeks,
        current_weekly_mileage=current_weekly_mileage,
        preferred_days=preferred_days,
        five_k_pace=five_k_pace,
    )


@mcp.tool()
async def get_plan(athlete_id: str, plan_id: str) -> dict:
    """Get a training plan with all phases, weeks and runs."""
    return await _get_plan(athlete_id, plan_id, plans=get_lifecycle().plans)


@mcp.tool()
async def list_plans(athlete_id: str) -> dict:
    """List an athlete's training plans, newest first."""
    return await _list_plans(athlete_id, plans=get_lifecycle().plans)


@mcp.tool()
async def update_plan_status(athlete_id: str, plan_id: str, status: str) -> dict:
    """Set a training plan's status to active or archived."""
    return await _update_plan_status(athlete_id, plan_id, status, plans=get_lifecycle().plans)


logger.info("MCP server initialized with 9 tools")
