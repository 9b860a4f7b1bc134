# gofast_planner/policy/phases.py
"""
Training phase policy.

Central source of truth for phase ordering and per-phase run-type defaults.
Everything that creates, sorts or validates phases goes through here.
"""

from collections.abc import Callable, Iterable, Sequence
from types import MappingProxyType
from typing import Any, TypeVar

from gofast_planner.errors import InvalidPhase

T = TypeVar("T")

PHASE_ORDER: tuple[str, ...] = ("base", "build", "peak", "taper")

RUN_TYPE_KEYS: tuple[str, ...] = ("easy", "tempo", "intervals", "longRun")

# Read-only policy table, never per-request configuration
DEFAULT_RUN_TYPES_BY_PHASE = MappingProxyType(
    {
        "base": MappingProxyType(
            {"easy": True, "tempo": False, "intervals": False, "longRun": True}
        ),
        "build": MappingProxyType(
            {"easy": True, "tempo": True, "intervals": True, "longRun": True}
        ),
        "peak": MappingProxyType(
            {"easy": True, "tempo": True, "intervals": True, "longRun": True}
        ),
        "taper": MappingProxyType(
            {"easy": True, "tempo": True, "intervals": False, "longRun": True}
        ),
    }
)


def phase_order_valid(sequence: Sequence[str]) -> bool:
    """True iff sequence is exactly base, build, peak, taper."""
    return tuple(sequence) == PHASE_ORDER


def phase_index(name: str) -> int:
    """
    Get the 0-based position of a phase, for sorting.

    Raises:
        InvalidPhase: If name is not a canonical phase
    """
    try:
        return PHASE_ORDER.index(name)
    except ValueError:
        raise InvalidPhase(name) from None


def _phase_name(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("name")
    return getattr(item, "name")


def sort_phases(
    phases: Iterable[T], key: Callable[[T], str] | None = None
) -> list[T]:
    """
    Stable sort of phases (names, dicts or objects with .name) by canonical order.

    Unknown names propagate InvalidPhase instead of being dropped.
    """
    get_name = key or _phase_name
    return sorted(phases, key=lambda p: phase_index(get_name(p)))


def default_run_types_for_phase(phase_name: str) -> dict[str, bool]:
    """
    Get the default run-type enablement for a phase (a fresh, mutable copy).

    Raises:
        InvalidPhase: If phase_name is not canonical
    """
    phase_index(phase_name)
    return dict(DEFAULT_RUN_TYPES_BY_PHASE[phase_name])
