# gofast_planner/tools/plans.py
"""
Training plan tools.

Plans are read back scoped to the owning athlete; the only mutation after
creation is a status change between active and archived.
"""

import logging

from gofast_planner.errors import NotFound
from gofast_planner.models.plans import TrainingPlan
from gofast_planner.models.responses import PlanSummary, fail, ok
from gofast_planner.models.store import PlanStore
from gofast_planner.validation.sanitize import parse_status, require_athlete, sanitize_id

logger = logging.getLogger(__name__)


def plan_summary(plan: TrainingPlan) -> dict:
    return PlanSummary(
        id=plan.plan_id or "",
        name=plan.name,
        race_id=plan.race_id,
        goal_time=plan.goal_time,
        start_date=plan.start_date.isoformat(),
        total_weeks=plan.total_weeks,
        status=plan.status.value,
        created_at=plan.created_at.isoformat(),
    ).model_dump()


async def get_plan(athlete_id: str | None, plan_id: str, plans: PlanStore) -> dict:
    """
    Fetch a full plan tree owned by the caller.

    Returns:
        {"success": True, "plan": {...}} or a failure envelope (404 if not owned)
    """
    try:
        owner = require_athlete(athlete_id)
        clean_id = sanitize_id(plan_id, label="plan ID")
        plan = await plans.get(owner, clean_id)
        if plan is None:
            raise NotFound(f"Plan '{clean_id}' not found")
    except Exception as e:
        return fail(e)

    return ok("plan", plan.to_dict())


async def list_plans(athlete_id: str | None, plans: PlanStore) -> dict:
    """
    List the caller's plans, newest first.

    Returns:
        {"success": True, "plans": [...], "total": n}
    """
    try:
        owner = require_athlete(athlete_id)
        found = await plans.list_for_athlete(owner)
    except Exception as e:
        return fail(e)

    return ok("plans", [plan_summary(p) for p in found], total=len(found))


async def update_plan_status(
    athlete_id: str | None, plan_id: str, status: str, plans: PlanStore
) -> dict:
    """
    Move a plan between active and archived.

    Returns:
        {"success": True, "plan": {...}} or a failure envelope
    """
    try:
        owner = require_athlete(athlete_id)
        clean_id = sanitize_id(plan_id, label="plan ID")
        new_status = parse_status(status)
        plan = await plans.update_status(owner, clean_id, new_status)
        if plan is None:
            raise NotFound(f"Plan '{clean_id}' not found")
    except Exception as e:
        return fail(e)

    return ok("plan", plan.to_dict())
