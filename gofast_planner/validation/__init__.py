# gofast_planner/validation/__init__.py
"""Input validation and sanitization utilities."""

from .sanitize import (
    parse_date,
    parse_kind,
    parse_preferred_days,
    parse_status,
    require_athlete,
    sanitize_id,
    sanitize_query,
)

__all__ = [
    "sanitize_id",
    "sanitize_query",
    "require_athlete",
    "parse_kind",
    "parse_date",
    "parse_status",
    "parse_preferred_days",
]
