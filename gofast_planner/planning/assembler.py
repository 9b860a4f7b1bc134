# gofast_planner/planning/assembler.py
"""
Prompt assembly for plan generation.

Composes one Role, RuleSet, MustHaves and ReturnFormat plus run-time context
into an ordered chat request. Assembly is deterministic: identical inputs give
byte-identical messages, so the fingerprint can key caches and fixtures.
"""

import asyncio
import hashlib
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from gofast_planner.errors import MissingArtifact
from gofast_planner.models.artifacts import (
    ArtifactKind,
    MustHaves,
    ReturnFormat,
    Role,
    RuleSet,
)
from gofast_planner.models.plans import GenerationContext
from gofast_planner.models.store import ConfigRegistry
from gofast_planner.policy import goal_pace_per_mile, predicted_race_pace

logger = logging.getLogger(__name__)

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class ArtifactSelection:
    """Ids of the four artifacts chosen for one generation run."""

    role_id: str
    rule_set_id: str
    must_haves_id: str
    return_format_id: str


@dataclass(frozen=True)
class AssembledPrompt:
    """
    A ready-to-send generation request.

    Attributes:
        messages: Chat messages (system role text, then one user message)
        return_format: ReturnFormat the output will be checked against
        must_haves: MustHaves whose paths the output must contain
        context: Context the prompt was built from
    """

    messages: list[dict[str, str]]
    return_format: ReturnFormat
    must_haves: MustHaves
    context: GenerationContext

    @property
    def fingerprint(self) -> str:
        """SHA-256 of the canonical message serialization."""
        canonical = json.dumps(
            self.messages, sort_keys=True, ensure_ascii=False, separators=(",", ":")
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _fmt_number(value: float) -> str:
    return f"{value:g}"


def context_values(context: GenerationContext) -> dict[str, str]:
    """
    Placeholder values derived from the context.

    Keys match the {placeholder} names usable in role and rule text.
    """
    race = context.race
    values = {
        "raceName": race.name,
        "raceType": race.race_type,
        "raceMiles": _fmt_number(race.miles),
        "raceDate": race.date.isoformat(),
        "goalTime": context.goal_time,
        "goalPace": goal_pace_per_mile(context.goal_time, race.miles),
        "planStartDate": context.plan_start_date.isoformat(),
        "totalWeeks": str(context.resolved_total_weeks()),
    }
    if race.location:
        values["raceLocation"] = race.location
    if context.preferred_days:
        values["preferredDays"] = ", ".join(DAY_NAMES[d - 1] for d in context.preferred_days)
    if context.current_weekly_mileage is not None:
        values["currentWeeklyMileage"] = _fmt_number(context.current_weekly_mileage)
    if context.five_k_pace:
        values["fiveKPace"] = context.five_k_pace
        values["predictedRacePace"] = predicted_race_pace(
            context.five_k_pace, race.race_type
        )
    for key in sorted(context.extra):
        values.setdefault(key, str(context.extra[key]))
    return values


def interpolate(text: str, values: dict[str, str]) -> str:
    """Replace {key} placeholders; unknown keys are left as written."""
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), text)


def _rules_block(rule_set: RuleSet, values: dict[str, str]) -> str:
    lines = ["## Training Rules"]
    if rule_set.description:
        lines.append(interpolate(rule_set.description, values))
    current_topic = None
    for rule in rule_set.rules:
        if rule.topic and rule.topic != current_topic:
            lines.append("")
            lines.append(f"### {rule.topic}")
        current_topic = rule.topic
        lines.append(f"- {interpolate(rule.text, values)}")
    return "\n".join(lines)


def _must_haves_block(must_haves: MustHaves) -> str:
    lines = ["## Required Fields", "Every one of these paths must be present and non-null:"]
    for path, description in must_haves.fields.items():
        lines.append(f"- {path}: {description}" if description else f"- {path}")
    return "\n".join(lines)


def _return_format_block(return_format: ReturnFormat) -> str:
    schema = json.dumps(return_format.json_schema, indent=2, sort_keys=True)
    lines = [
        "## Return Format Schema",
        "Return EXACT JSON ONLY: a single json object matching this schema, "
        "with no prose and no code fences.",
        schema,
    ]
    if return_format.example is not None:
        lines.append("")
        lines.append("## Example Output")
        lines.append(json.dumps(return_format.example, indent=2, sort_keys=True))
    return "\n".join(lines)


def _inputs_block(context: GenerationContext, values: dict[str, str]) -> str:
    race = context.race
    race_line = (
        f"- Race: {race.name} ({race.race_type}, {values['raceMiles']} mi) "
        f"on {values['raceDate']}"
    )
    if race.location:
        race_line += f" in {race.location}"

    lines = [
        "## Inputs",
        race_line,
        f"- Goal time: {context.goal_time}",
        f"- Goal pace: {values['goalPace']}/mi",
        f"- Plan start date: {values['planStartDate']}",
        f"- Total weeks: {values['totalWeeks']}",
    ]
    if "preferredDays" in values:
        lines.append(f"- Preferred days: {values['preferredDays']}")
    if "currentWeeklyMileage" in values:
        lines.append(f"- Current weekly mileage: {values['currentWeeklyMileage']}")
    if "fiveKPace" in values:
        lines.append(f"- 5K pace: {values['fiveKPace']}/mi")
        lines.append(f"- Predicted race pace: {values['predictedRacePace']}/mi")
    for key in sorted(context.extra):
        lines.append(f"- {key}: {context.extra[key]}")
    return "\n".join(lines)


def assemble_prompt(
    role: Role,
    rule_set: RuleSet,
    must_haves: MustHaves,
    return_format: ReturnFormat,
    context: GenerationContext,
) -> AssembledPrompt:
    """
    Build the generation request from resolved artifacts.

    Block order: role text (system), then rules in stored order, required
    field paths, the literal return-format schema and the context facts.

    Raises:
        InvalidInput: If the context goal time cannot be parsed
    """
    values = context_values(context)
    user_content = "\n\n".join(
        [
            _rules_block(rule_set, values),
            _must_haves_block(must_haves),
            _return_format_block(return_format),
            _inputs_block(context, values),
        ]
    )
    messages = [
        {"role": "system", "content": interpolate(role.system_instructions, values)},
        {"role": "user", "content": user_content},
    ]
    return AssembledPrompt(
        messages=messages,
        return_format=return_format,
        must_haves=must_haves,
        context=context,
    )


class PromptAssembler:
    """Resolves artifact ids against the registry and assembles the request."""

    def __init__(self, registry: ConfigRegistry):
        self._registry = registry

    async def resolve(
        self, selection: ArtifactSelection
    ) -> tuple[Role, RuleSet, MustHaves, ReturnFormat]:
        """
        Fetch the four selected artifacts concurrently.

        Raises:
            MissingArtifact: If any id does not resolve for its kind
        """
        wanted = [
            (ArtifactKind.ROLE, selection.role_id),
            (ArtifactKind.RULE_SET, selection.rule_set_id),
            (ArtifactKind.MUST_HAVES, selection.must_haves_id),
            (ArtifactKind.RETURN_FORMAT, selection.return_format_id),
        ]
        found = await asyncio.gather(
            *(self._registry.get(kind, artifact_id) for kind, artifact_id in wanted)
        )
        for (kind, artifact_id), artifact in zip(wanted, found):
            if artifact is None:
                logger.warning(f"Artifact not found: {kind.value} {artifact_id}")
                raise MissingArtifact(kind.value, artifact_id)
        role, rule_set, must_haves, return_format = found
        return role, rule_set, must_haves, return_format

    async def assemble(
        self, selection: ArtifactSelection, context: GenerationContext
    ) -> AssembledPrompt:
        """
        Resolve the selection and build the request.

        Raises:
            MissingArtifact: If any selected id does not resolve
            InvalidInput: If the context goal time cannot be parsed
        """
        role, rule_set, must_haves, return_format = await self.resolve(selection)
        prompt = assemble_prompt(role, rule_set, must_haves, return_format, context)
        logger.info(
            f"Assembled prompt role={role.id} rules={len(rule_set.rules)} "
            f"must_haves={len(must_haves.fields)} fingerprint={prompt.fingerprint[:12]}"
        )
        return prompt
