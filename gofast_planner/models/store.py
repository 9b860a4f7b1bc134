# gofast_planner/models/store.py
"""
Collaborator contracts for persistence.

The pipeline only reads the configuration and race registries; the plan store
owns transactional discipline for the final write.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gofast_planner.models.artifacts import Artifact, ArtifactKind
    from gofast_planner.models.plans import PlanStatus, TrainingPlan
    from gofast_planner.models.races import RaceRecord


class ConfigRegistry(ABC):
    """Append-only store of Role, RuleSet, MustHaves and ReturnFormat rows."""

    @abstractmethod
    async def get(self, kind: "ArtifactKind", artifact_id: str) -> "Artifact | None":
        """
        Get an artifact by kind and id.

        Returns:
            The artifact, or None if no row of that kind has that id
        """
        pass

    @abstractmethod
    async def list_all(self, kind: "ArtifactKind") -> "list[Artifact]":
        """
        List artifacts of one kind.

        Returns:
            Artifacts ordered by creation time (newest first)
        """
        pass

    @abstractmethod
    async def create(self, kind: "ArtifactKind", payload: dict[str, Any]) -> "Artifact":
        """
        Validate and store a new artifact row.

        Raises:
            ArtifactValidationError: If payload is not a valid artifact of kind
        """
        pass


class RaceRegistry(ABC):
    """Race catalog lookups."""

    @abstractmethod
    async def get(self, race_id: str) -> "RaceRecord | None":
        pass

    @abstractmethod
    async def search(self, query: str, limit: int = 20) -> "list[RaceRecord]":
        """Case-insensitive substring search by name, date ascending."""
        pass

    @abstractmethod
    async def create(self, race: "RaceRecord") -> "RaceRecord":
        """
        Store a race, or return the existing row with the same name and date.
        """
        pass


class PlanStore(ABC):
    """Training plan persistence, scoped to the owning athlete on read."""

    @abstractmethod
    async def create(self, plan: "TrainingPlan") -> str:
        """
        Persist a plan with all phase/week/run rows in one transaction.

        Returns:
            The new plan id
        """
        pass

    @abstractmethod
    async def get(self, athlete_id: str, plan_id: str) -> "TrainingPlan | None":
        pass

    @abstractmethod
    async def list_for_athlete(self, athlete_id: str) -> "list[TrainingPlan]":
        """Plans owned by athlete_id, newest first (headers only, no phases)."""
        pass

    @abstractmethod
    async def update_status(
        self, athlete_id: str, plan_id: str, status: "PlanStatus"
    ) -> "TrainingPlan | None":
        pass
