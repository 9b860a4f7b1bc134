# gofast_planner/planning/materializer.py
"""Maps a ValidatedPlan onto the persistable TrainingPlan tree."""

import logging
from datetime import date, timedelta

from gofast_planner.errors import MaterializationError
from gofast_planner.models.plans import (
    GenerationContext,
    PhaseRow,
    PlanStatus,
    RunRow,
    TrainingPlan,
    ValidatedPlan,
    WeekRow,
)
from gofast_planner.models.races import RaceRecord
from gofast_planner.models.store import RaceRegistry

logger = logging.getLogger(__name__)


def week_start(plan_start: date, week_index: int) -> date:
    """Start date of 1-based week_index."""
    return plan_start + timedelta(days=7 * (week_index - 1))


def run_date(start_of_week: date, day_index: int | None) -> date | None:
    """Date of a run on 1-based day_index of its week (None if unscheduled)."""
    if day_index is None:
        return None
    return start_of_week + timedelta(days=day_index - 1)


def build_training_plan(
    plan: ValidatedPlan,
    context: GenerationContext,
    race: RaceRecord,
    athlete_id: str,
) -> TrainingPlan:
    """
    Pure mapping from a validated plan to a dated TrainingPlan tree.

    Weeks are renumbered 1..N across phases in order; the model's own
    weekIndex values are not trusted for dating.
    """
    start = context.plan_start_date
    phase_rows = []
    week_number = 0

    for position, phase in enumerate(plan.phases):
        week_rows = []
        for week in phase.weeks:
            week_number += 1
            starts = week_start(start, week_number)
            week_rows.append(
                WeekRow(
                    week_index=week_number,
                    start_date=starts,
                    runs=[
                        RunRow(
                            run_type=run.type,
                            week_index=week_number,
                            day_index=run.day_index,
                            date=run_date(starts, run.day_index),
                            mileage=run.mileage,
                            details=dict(run.details),
                        )
                        for run in week.runs
                    ],
                )
            )

        if week_rows:
            phase_start = week_rows[0].start_date
            phase_end = week_rows[-1].start_date + timedelta(days=6)
        else:
            # Empty phase sits at the boundary with the next one
            phase_start = week_start(start, week_number + 1)
            phase_end = phase_start

        phase_rows.append(
            PhaseRow(
                name=phase.name,
                position=position,
                start_date=phase_start,
                end_date=phase_end,
                run_types=phase.run_types.model_dump(by_alias=True),
                weeks=week_rows,
            )
        )

    return TrainingPlan(
        athlete_id=athlete_id,
        race_id=race.id,
        name=f"{race.name} Training Plan",
        goal_time=context.goal_time,
        start_date=start,
        total_weeks=plan.total_weeks,
        status=PlanStatus.ACTIVE,
        phases=phase_rows,
    )


class PlanMaterializer:
    """Checks the race still exists, then maps the plan onto persisted rows."""

    def __init__(self, races: RaceRegistry):
        self._races = races

    async def materialize(
        self, plan: ValidatedPlan, context: GenerationContext, athlete_id: str
    ) -> TrainingPlan:
        """
        Build the TrainingPlan for a validated plan.

        Raises:
            MaterializationError: If the context race id is not in the registry
        """
        race = await self._races.get(context.race_id)
        if race is None:
            logger.warning(f"Race {context.race_id} not found at materialization")
            raise MaterializationError(
                f"Race '{context.race_id}' not found", race_missing=True
            )

        training_plan = build_training_plan(plan, context, race, athlete_id)
        logger.info(
            f"Materialized plan for race={race.id}: {len(training_plan.phases)} phases, "
            f"{training_plan.total_weeks} weeks"
        )
        return training_plan
