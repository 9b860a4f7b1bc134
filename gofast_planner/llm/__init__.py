# gofast_planner/llm/__init__.py
"""LLM integration module with Ollama and LM Studio clients and retry policy."""

from .client import OllamaClient
from .factory import create_llm_client
from .lm_studio import LMStudioClient
from .retry import is_transient, transient_retry

__all__ = [
    "OllamaClient",
    "LMStudioClient",
    "create_llm_client",
    "is_transient",
    "transient_retry",
]
