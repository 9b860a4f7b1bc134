# gofast_planner/policy/run_types.py
"""Run-type vocabulary: easy, tempo, intervals, longRun."""

import re

RUN_TYPES: tuple[str, ...] = ("easy", "tempo", "intervals", "longRun")

_SEPARATORS = re.compile(r"[\s_\-]+")

_CANONICAL_BY_FOLDED = {t.lower(): t for t in RUN_TYPES}


def normalize_run_type(token: str) -> str | None:
    """
    Map a run-type token to its canonical form.

    Case, whitespace, underscores and hyphens are ignored, so "Long Run",
    "long_run" and "longrun" all become "longRun".

    Returns:
        Canonical token, or None if the token is not a known run type
    """
    if not isinstance(token, str):
        return None
    folded = _SEPARATORS.sub("", token.strip()).lower()
    return _CANONICAL_BY_FOLDED.get(folded)


def is_valid_run_type(token: str) -> bool:
    return normalize_run_type(token) is not None
