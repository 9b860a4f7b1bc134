# gofast_planner/tools/generate_plan.py
"""
generate_plan tool implementation.

Builds the generation context from caller input and runs the pipeline
synchronously; the response carries either the persisted plan or the stage
and structured reason it was rejected.
"""

import logging

from pydantic import ValidationError

from gofast_planner.errors import InvalidInput, NotFound
from gofast_planner.models.plans import GenerationContext
from gofast_planner.models.responses import fail, ok
from gofast_planner.models.store import RaceRegistry
from gofast_planner.planning.assembler import ArtifactSelection
from gofast_planner.planning.pipeline import PlanGenerationPipeline
from gofast_planner.policy import parse_goal_time, parse_pace
from gofast_planner.validation.sanitize import (
    parse_date,
    parse_preferred_days,
    require_athlete,
    sanitize_id,
)

logger = logging.getLogger(__name__)


async def generate_plan(
    athlete_id: str | None,
    role_id: str,
    rule_set_id: str,
    must_haves_id: str,
    return_format_id: str,
    race_id: str,
    goal_time: str,
    plan_start_date: str,
    pipeline: PlanGenerationPipeline,
    races: RaceRegistry,
    total_weeks: int | None = None,
    current_weekly_mileage: float | None = None,
    preferred_days: list[int] | str | None = None,
    five_k_pace: str | None = None,
) -> dict:
    """
    Generate and persist a training plan for a race.

    Args:
        athlete_id: Caller identity (required)
        role_id: Role artifact id
        rule_set_id: RuleSet artifact id
        must_haves_id: MustHaves artifact id
        return_format_id: ReturnFormat artifact id
        race_id: Race registry id
        goal_time: Goal finish time, H:MM:SS or MM:SS
        plan_start_date: First day of week 1 (YYYY-MM-DD)
        pipeline: Plan generation pipeline
        races: Race registry
        total_weeks: Plan length (derived from the race date if omitted)
        current_weekly_mileage: Athlete's current weekly volume
        preferred_days: Training days 1-7 (Monday=1), list or "1,3,5"
        five_k_pace: Recent 5K pace, m:ss

    Returns:
        {"success": True, "plan": {...}, "fingerprint": ...} or a failure
        envelope with "stage" set to the pipeline stage that rejected it
    """
    try:
        owner = require_athlete(athlete_id)
        selection = ArtifactSelection(
            role_id=sanitize_id(role_id, label="role ID"),
            rule_set_id=sanitize_id(rule_set_id, label="rule set ID"),
            must_haves_id=sanitize_id(must_haves_id, label="must-haves ID"),
            return_format_id=sanitize_id(return_format_id, label="return format ID"),
        )
        clean_race_id = sanitize_id(race_id, label="race ID")
        parse_goal_time(goal_time)
        start = parse_date(plan_start_date, label="plan start date")
        if five_k_pace is not None:
            parse_pace(five_k_pace)
            five_k_pace = five_k_pace.strip()

        race = await races.get(clean_race_id)
        if race is None:
            raise NotFound(f"Race '{clean_race_id}' not found")
        if start >= race.date:
            raise InvalidInput(
                f"Plan start date {start.isoformat()} must be before race day "
                f"{race.date.isoformat()}"
            )

        try:
            context = GenerationContext(
                race=race,
                goal_time=goal_time.strip(),
                plan_start_date=start,
                total_weeks=total_weeks,
                current_weekly_mileage=current_weekly_mileage,
                preferred_days=parse_preferred_days(preferred_days),
                five_k_pace=five_k_pace,
            )
        except ValidationError as e:
            raise InvalidInput(f"Invalid generation input: {e.errors()[0]['msg']}") from None
    except Exception as e:
        return fail(e)

    result = await pipeline.execute(owner, selection, context)
    if not result.success:
        return {**fail(result.error), "stage": result.failed_stage}

    return ok("plan", result.plan.to_dict(), fingerprint=result.fingerprint)
