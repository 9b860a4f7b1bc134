# gofast_planner/llm/factory.py
"""Builds the generative backend selected by config.provider."""

import logging

from gofast_planner.config.schema import PlannerConfig

from .client import OllamaClient
from .lm_studio import LMStudioClient

logger = logging.getLogger(__name__)


def create_llm_client(config: PlannerConfig) -> OllamaClient | LMStudioClient:
    """
    Create the backend client for plan generation.

    LM Studio needs the optional ``openai`` dependency; LMStudioClient raises
    ImportError with install instructions when it is missing.

    Raises:
        ValueError: If config.provider names no known backend
    """
    if config.provider == "ollama":
        settings = config.ollama
        client = OllamaClient(settings.base_url, settings.model, timeout=settings.timeout)
    elif config.provider == "lm_studio":
        settings = config.lm_studio
        client = LMStudioClient(
            settings.base_url,
            settings.model,
            api_key=settings.api_key,
            timeout=settings.timeout,
            max_tokens=settings.max_tokens,
        )
    else:
        raise ValueError(f"Unknown provider: {config.provider}")

    logger.info(f"Using {config.provider} backend at {settings.base_url} (model={settings.model})")
    return client
