# gofast_planner/models/artifacts.py
"""
Configuration artifacts consumed by the generation pipeline.

Exactly four kinds exist (Role, RuleSet, MustHaves, ReturnFormat). Artifacts
are append-only: a new version is a new row, existing rows never change.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ArtifactKind(str, Enum):
    """The closed set of configuration artifact kinds."""

    ROLE = "role"
    RULE_SET = "rule_set"
    MUST_HAVES = "must_haves"
    RETURN_FORMAT = "return_format"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _Artifact(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str = Field(default="", description="Registry identifier (assigned on create)")
    version: int = Field(default=1, ge=1, description="Version within kind + name")
    created_at: datetime = Field(default_factory=_now)

    @property
    def label(self) -> str:
        """Name used for versioning and listings."""
        return getattr(self, "name")


class Role(_Artifact):
    """Persona / system-prompt fragment."""

    title: str = Field(..., min_length=1, description="Short persona title")
    system_instructions: str = Field(
        ..., min_length=1, description="System message text"
    )

    @property
    def label(self) -> str:
        return self.title


class Rule(BaseModel):
    """A single rule, optionally grouped under a topic."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    text: str = Field(..., min_length=1)
    topic: str | None = None


class RuleSet(_Artifact):
    """Ordered rules; order is preserved in the assembled prompt."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    rules: list[Rule] = Field(..., min_length=1)

    @field_validator("rules", mode="before")
    @classmethod
    def _coerce_plain_rules(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"text": r} if isinstance(r, str) else r for r in value]
        return value


class MustHaves(_Artifact):
    """
    Field paths that must be present and non-null in generation output.

    Paths are dotted; "[]" steps into every element of a list,
    e.g. "phases[].weeks[].runs[].mileage". Values are human descriptions
    shown to the model. Payloads may name the field "requiredPaths".
    """

    name: str = Field(default="must-haves", min_length=1)
    fields: dict[str, str] = Field(
        ..., min_length=1, validation_alias=AliasChoices("fields", "requiredPaths")
    )

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_path_list(cls, value: Any) -> Any:
        if isinstance(value, list):
            return {path: "" for path in value}
        return value

    @field_validator("fields")
    @classmethod
    def _check_paths(cls, value: dict[str, str]) -> dict[str, str]:
        for path in value:
            if not path or any(not seg for seg in path.replace("[]", "").split(".")):
                raise ValueError(f"Malformed field path: {path!r}")
        return value

    @property
    def required_paths(self) -> list[str]:
        return list(self.fields)


class ReturnFormat(_Artifact):
    """The JSON Schema generation output must satisfy."""

    name: str = Field(..., min_length=1)
    json_schema: dict[str, Any] = Field(..., alias="schema")
    example: dict[str, Any] | None = None

    @field_validator("json_schema")
    @classmethod
    def _check_schema(cls, value: dict[str, Any]) -> dict[str, Any]:
        try:
            Draft202012Validator.check_schema(value)
        except SchemaError as e:
            raise ValueError(f"Invalid JSON schema: {e.message}") from None
        return value


ARTIFACT_MODELS: dict[ArtifactKind, type[_Artifact]] = {
    ArtifactKind.ROLE: Role,
    ArtifactKind.RULE_SET: RuleSet,
    ArtifactKind.MUST_HAVES: MustHaves,
    ArtifactKind.RETURN_FORMAT: ReturnFormat,
}

Artifact = Role | RuleSet | MustHaves | ReturnFormat
