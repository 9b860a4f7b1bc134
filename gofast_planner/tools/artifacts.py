# gofast_planner/tools/artifacts.py
"""
Configuration artifact tools.

List, fetch and create Role, RuleSet, MustHaves and ReturnFormat rows.
"""

import logging
from typing import Any

from gofast_planner.errors import InvalidInput, NotFound
from gofast_planner.models.artifacts import Artifact, ArtifactKind
from gofast_planner.models.responses import fail, ok
from gofast_planner.models.store import ConfigRegistry
from gofast_planner.validation.sanitize import parse_kind, sanitize_id

logger = logging.getLogger(__name__)


def artifact_to_dict(kind: ArtifactKind, artifact: Artifact) -> dict[str, Any]:
    """JSON-friendly artifact with its kind attached."""
    return {"kind": kind.value, **artifact.model_dump(mode="json", by_alias=True)}


async def list_artifacts(kind: str, registry: ConfigRegistry) -> dict:
    """
    List artifacts of one kind, newest first.

    Args:
        kind: role, rule_set, must_haves or return_format
        registry: Configuration registry

    Returns:
        {"success": True, "items": [...], "total": n} or a failure envelope
    """
    try:
        parsed = parse_kind(kind)
        items = await registry.list_all(parsed)
    except Exception as e:
        return fail(e)

    return ok("items", [artifact_to_dict(parsed, a) for a in items], total=len(items))


async def get_artifact(kind: str, artifact_id: str, registry: ConfigRegistry) -> dict:
    """
    Fetch one artifact by kind and id.

    Returns:
        {"success": True, "item": {...}} or a failure envelope (404 if missing)
    """
    try:
        parsed = parse_kind(kind)
        clean_id = sanitize_id(artifact_id, label=f"{parsed.value} ID")
        artifact = await registry.get(parsed, clean_id)
        if artifact is None:
            raise NotFound(f"{parsed.value} '{clean_id}' not found")
    except Exception as e:
        return fail(e)

    return ok("item", artifact_to_dict(parsed, artifact))


async def create_artifact(
    kind: str, payload: dict[str, Any], registry: ConfigRegistry
) -> dict:
    """
    Validate and store a new artifact (a new version if the name exists).

    Returns:
        {"success": True, "item": {...}} or a failure envelope (400 if invalid)
    """
    try:
        parsed = parse_kind(kind)
        if not isinstance(payload, dict):
            raise InvalidInput("Artifact payload must be a JSON object")
        artifact = await registry.create(parsed, payload)
    except Exception as e:
        return fail(e)

    return ok("item", artifact_to_dict(parsed, artifact))
