# gofast_planner/config/__init__.py
"""Configuration system for gofast-planner."""

from .loader import get_config_path, get_db_path, load_config
from .schema import (
    GenerationConfig,
    LMStudioConfig,
    OllamaConfig,
    PlannerConfig,
    StorageConfig,
)

__all__ = [
    "PlannerConfig",
    "OllamaConfig",
    "LMStudioConfig",
    "GenerationConfig",
    "StorageConfig",
    "load_config",
    "get_config_path",
    "get_db_path",
]
