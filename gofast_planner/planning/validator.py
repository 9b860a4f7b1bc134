# gofast_planner/planning/validator.py
"""
Two-stage response validation.

Stage 1 (structural) parses the raw output and checks it against the selected
ReturnFormat schema and the plan shape. Stage 2 (semantic) applies the domain
policy. Structural failures mean the schema needs fixing; semantic failures
mean the rules need fixing, so the two stages raise different errors.

Only two normalizations are applied: run-type spelling variants become the
canonical token, and missing run-type toggles are filled from the per-phase
defaults. Everything else is rejected as-is.
"""

import logging
from collections.abc import Iterable
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import ValidationError

from gofast_planner.errors import DomainInvariantViolation, SchemaMismatch
from gofast_planner.models.artifacts import MustHaves, ReturnFormat
from gofast_planner.models.plans import (
    GenerationContext,
    PlannedPhase,
    PlannedRun,
    PlannedWeek,
    RunTypeToggles,
    ValidatedPlan,
)
from gofast_planner.planning.extraction import extract_json
from gofast_planner.policy import (
    PHASE_ORDER,
    default_run_types_for_phase,
    is_valid_race_type,
    normalize_run_type,
    phase_order_valid,
    race_distance_consistent,
    race_miles_for_type,
)

logger = logging.getLogger(__name__)

_RUN_KEYS = ("type", "dayIndex", "mileage")


def render_path(parts: Iterable[Any]) -> str:
    """Render ["phases", 0, "weeks"] as "phases[0].weeks" ("$" for the root)."""
    rendered = ""
    for part in parts:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered or "$"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def find_missing_path(document: Any, path: str) -> str | None:
    """
    Locate the first unsatisfied value for a must-have path.

    A "[]" suffix steps into every element of a list; an empty list
    satisfies the rest of the path vacuously.

    Returns:
        Concrete path of the first missing or null value, or None if satisfied
    """
    nodes: list[tuple[Any, str]] = [(document, "")]
    for segment in path.split("."):
        each = segment.endswith("[]")
        key = segment[:-2] if each else segment
        next_nodes = []
        for value, where in nodes:
            here = f"{where}.{key}" if where else key
            if not isinstance(value, dict) or value.get(key) is None:
                return here
            child = value[key]
            if not each:
                next_nodes.append((child, here))
                continue
            if not isinstance(child, list):
                return here
            for i, item in enumerate(child):
                if item is None:
                    return f"{here}[{i}]"
                next_nodes.append((item, f"{here}[{i}]"))
        nodes = next_nodes
    return None


class ResponseValidator:
    """Turns raw backend text into a ValidatedPlan or a typed rejection."""

    def validate(
        self,
        raw_text: str,
        return_format: ReturnFormat,
        must_haves: MustHaves,
        context: GenerationContext,
    ) -> ValidatedPlan:
        """
        Run both stages.

        Raises:
            SchemaMismatch: Structural failure, with the offending path
            DomainInvariantViolation: Semantic failure, with the invariant name
        """
        document = self.check_structure(raw_text, return_format)
        plan = self.check_semantics(document, must_haves, context)
        logger.info(f"Validated plan: {len(plan.phases)} phases, {plan.total_weeks} weeks")
        return plan

    # Stage 1

    def check_structure(self, raw_text: str, return_format: ReturnFormat) -> dict[str, Any]:
        """
        Parse raw output and check it against the declared schema and plan shape.

        Returns:
            The parsed document

        Raises:
            SchemaMismatch: If parsing, schema or shape checks fail
        """
        try:
            document = extract_json(raw_text)
        except ValueError as e:
            logger.warning(f"Unparseable output: {e}")
            raise SchemaMismatch("$", "output is not valid JSON") from e

        errors = sorted(
            Draft202012Validator(return_format.json_schema).iter_errors(document),
            key=lambda err: list(err.absolute_path),
        )
        if errors:
            first = errors[0]
            path = render_path(first.absolute_path)
            logger.warning(
                f"Schema mismatch ({len(errors)} errors) against "
                f"{return_format.name} v{return_format.version}; first at {path}"
            )
            raise SchemaMismatch(path, first.message)

        self._check_shape(document)
        return document

    def _check_shape(self, document: Any) -> None:
        if not isinstance(document, dict):
            raise SchemaMismatch("$", "top-level value must be an object")
        total = document.get("totalWeeks")
        if total is not None and not (isinstance(total, int) and not isinstance(total, bool)):
            raise SchemaMismatch("totalWeeks", "must be an integer")

        phases = document.get("phases")
        if not isinstance(phases, list):
            raise SchemaMismatch("phases", "must be a list of phases")

        for i, phase in enumerate(phases):
            where = f"phases[{i}]"
            if not isinstance(phase, dict):
                raise SchemaMismatch(where, "phase must be an object")
            if not isinstance(phase.get("name"), str):
                raise SchemaMismatch(f"{where}.name", "phase name must be a string")
            toggles = phase.get("runTypes")
            if toggles is not None:
                if not isinstance(toggles, dict):
                    raise SchemaMismatch(f"{where}.runTypes", "must be an object")
                for key, flag in toggles.items():
                    if not isinstance(flag, bool):
                        raise SchemaMismatch(f"{where}.runTypes.{key}", "must be a boolean")
            weeks = phase.get("weeks")
            if not isinstance(weeks, list):
                raise SchemaMismatch(f"{where}.weeks", "must be a list of weeks")
            for j, week in enumerate(weeks):
                self._check_week_shape(week, f"{where}.weeks[{j}]")

    def _check_week_shape(self, week: Any, where: str) -> None:
        if not isinstance(week, dict):
            raise SchemaMismatch(where, "week must be an object")
        runs = week.get("runs")
        if not isinstance(runs, list):
            raise SchemaMismatch(f"{where}.runs", "must be a list of runs")
        for k, run in enumerate(runs):
            run_where = f"{where}.runs[{k}]"
            if not isinstance(run, dict):
                raise SchemaMismatch(run_where, "run must be an object")
            if not isinstance(run.get("type"), str):
                raise SchemaMismatch(f"{run_where}.type", "run type must be a string")
            day = run.get("dayIndex")
            if day is not None and not (
                isinstance(day, int) and not isinstance(day, bool) and 1 <= day <= 7
            ):
                raise SchemaMismatch(f"{run_where}.dayIndex", "must be an integer 1-7")
            mileage = run.get("mileage")
            if mileage is not None and not (_is_number(mileage) and mileage >= 0):
                raise SchemaMismatch(f"{run_where}.mileage", "must be a non-negative number")

    # Stage 2

    def check_semantics(
        self,
        document: dict[str, Any],
        must_haves: MustHaves,
        context: GenerationContext,
    ) -> ValidatedPlan:
        """
        Apply the domain policy to a structurally valid document.

        Raises:
            DomainInvariantViolation: On the first broken invariant
        """
        self._check_must_haves(document, must_haves)

        names = [phase["name"] for phase in document["phases"]]
        if not phase_order_valid(names):
            logger.warning(f"Phase order rejected: {names}")
            raise DomainInvariantViolation(
                "phase_order",
                names,
                f"phases must be exactly {list(PHASE_ORDER)}, got {names}",
                path="phases",
            )

        phases = [
            self._build_phase(phase, f"phases[{i}]")
            for i, phase in enumerate(document["phases"])
        ]

        self._check_race_distance(context)
        total_weeks = self._check_total_weeks(document, phases, context)

        try:
            return ValidatedPlan(phases=phases, total_weeks=total_weeks)
        except ValidationError as e:
            raise SchemaMismatch("$", str(e)) from e

    def _check_must_haves(self, document: dict[str, Any], must_haves: MustHaves) -> None:
        for path in must_haves.required_paths:
            missing = find_missing_path(document, path)
            if missing is not None:
                logger.warning(f"Must-have path {path} missing at {missing}")
                raise DomainInvariantViolation(
                    "must_haves",
                    path,
                    f"required field '{path}' is missing or null at '{missing}'",
                    path=missing,
                )

    def _build_phase(self, phase: dict[str, Any], where: str) -> PlannedPhase:
        toggles = default_run_types_for_phase(phase["name"])
        for key, flag in (phase.get("runTypes") or {}).items():
            canonical = normalize_run_type(key)
            if canonical is None:
                raise DomainInvariantViolation(
                    "run_type",
                    key,
                    f"unknown run type '{key}' in run-type toggles",
                    path=f"{where}.runTypes.{key}",
                )
            toggles[canonical] = flag

        weeks = []
        for j, week in enumerate(phase["weeks"]):
            runs = [
                self._build_run(run, f"{where}.weeks[{j}].runs[{k}]")
                for k, run in enumerate(week["runs"])
            ]
            weeks.append(PlannedWeek(week_index=week.get("weekIndex"), runs=runs))

        return PlannedPhase(
            name=phase["name"],
            run_types=RunTypeToggles(**toggles),
            weeks=weeks,
        )

    def _build_run(self, run: dict[str, Any], where: str) -> PlannedRun:
        token = run["type"]
        canonical = normalize_run_type(token)
        if canonical is None:
            logger.warning(f"Unknown run type {token!r} at {where}")
            raise DomainInvariantViolation(
                "run_type",
                token,
                f"'{token}' is not one of easy, tempo, intervals, longRun",
                path=f"{where}.type",
            )
        return PlannedRun(
            type=canonical,
            day_index=run.get("dayIndex"),
            mileage=run.get("mileage"),
            details={k: v for k, v in run.items() if k not in _RUN_KEYS},
        )

    def _check_race_distance(self, context: GenerationContext) -> None:
        race = context.race
        if not is_valid_race_type(race.race_type):
            raise DomainInvariantViolation(
                "race_distance",
                race.race_type,
                f"race '{race.name}' has unknown race type '{race.race_type}'",
                path="race.race_type",
            )
        if not race_distance_consistent(race.race_type, race.miles):
            expected = race_miles_for_type(race.race_type)
            logger.warning(
                f"Race {race.id} distance {race.miles} disagrees with {race.race_type}"
            )
            raise DomainInvariantViolation(
                "race_distance",
                race.miles,
                f"race '{race.name}' records {race.miles} mi but "
                f"{race.race_type} is {expected} mi",
                path="race.miles",
            )

    def _check_total_weeks(
        self,
        document: dict[str, Any],
        phases: list[PlannedPhase],
        context: GenerationContext,
    ) -> int:
        week_count = sum(len(p.weeks) for p in phases)
        if week_count == 0:
            raise DomainInvariantViolation(
                "total_weeks", 0, "plan contains no weeks", path="phases"
            )

        declared = document.get("totalWeeks")
        if declared is not None and declared != week_count:
            raise DomainInvariantViolation(
                "total_weeks",
                declared,
                f"totalWeeks is {declared} but phases contain {week_count} weeks",
                path="totalWeeks",
            )
        if context.total_weeks is not None and context.total_weeks != week_count:
            raise DomainInvariantViolation(
                "total_weeks",
                week_count,
                f"plan has {week_count} weeks but {context.total_weeks} were requested",
                path="phases",
            )
        return week_count
