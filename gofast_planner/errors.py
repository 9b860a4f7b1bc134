# gofast_planner/errors.py
"""
Error taxonomy for the plan-generation pipeline.

Every error carries an HTTP-style status class and a structured detail dict so
boundary operations can report exactly which artifact, path or invariant needs
fixing.
"""

from typing import Any


class PlannerError(Exception):
    """Base exception for all planner errors."""

    status_code = 500

    def to_detail(self) -> dict[str, Any]:
        """Structured detail for response envelopes."""
        return {"type": type(self).__name__, "message": str(self)}


class InvalidInput(PlannerError, ValueError):
    """Malformed caller input."""

    status_code = 400


class InvalidPhase(InvalidInput):
    """Phase name is not one of the canonical phases."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Invalid phase name: {name!r}")

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "phase": self.name}


class UnknownRaceType(InvalidInput):
    """Race type has no canonical distance."""

    def __init__(self, race_type: Any, supported: list[str]) -> None:
        self.race_type = race_type
        super().__init__(
            f"Unknown race type: {race_type!r}. Supported: {', '.join(supported)}"
        )

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "race_type": self.race_type}


class ArtifactValidationError(InvalidInput):
    """Configuration artifact payload failed validation on create."""


class Unauthenticated(PlannerError):
    """No caller identity was supplied."""

    status_code = 401


class NotFound(PlannerError):
    """A requested row does not exist."""

    status_code = 404


class MissingArtifact(PlannerError):
    """A referenced configuration artifact id did not resolve."""

    status_code = 404

    def __init__(self, kind: str, artifact_id: str) -> None:
        self.kind = kind
        self.artifact_id = artifact_id
        super().__init__(f"{kind} '{artifact_id}' not found")

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "kind": self.kind, "id": self.artifact_id}


class GenerationFailure(PlannerError):
    """The generative backend failed to produce usable output."""

    status_code = 503

    REASONS = ("transport", "timeout", "provider", "empty")

    def __init__(self, reason: str, message: str) -> None:
        if reason not in self.REASONS:
            raise ValueError(f"Unknown generation failure reason: {reason}")
        self.reason = reason
        super().__init__(f"Generation failed ({reason}): {message}")

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "reason": self.reason}


class SchemaMismatch(PlannerError):
    """Generated output does not match the declared return format."""

    status_code = 503

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Schema mismatch at '{path}': {message}")

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "path": self.path}


class DomainInvariantViolation(PlannerError):
    """Generated output breaks a training-plan invariant."""

    status_code = 503

    def __init__(
        self, invariant: str, value: Any, message: str, path: str | None = None
    ) -> None:
        self.invariant = invariant
        self.value = value
        self.path = path
        super().__init__(f"Invariant '{invariant}' violated: {message}")

    def to_detail(self) -> dict[str, Any]:
        return {
            **super().to_detail(),
            "invariant": self.invariant,
            "value": self.value,
            "path": self.path,
        }


class MaterializationError(PlannerError):
    """A validated plan could not be turned into persisted rows."""

    def __init__(self, message: str, race_missing: bool = False) -> None:
        self.race_missing = race_missing
        self.status_code = 404 if race_missing else 500
        super().__init__(message)
