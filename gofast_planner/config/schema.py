# gofast_planner/config/schema.py
"""
Pydantic configuration models for gofast-planner.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OllamaConfig(BaseModel):
    """Ollama server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:11434", description="Ollama API base URL"
    )
    model: str = Field(
        default="qwen2.5:14b-instruct",
        description="Ollama model to use for plan generation",
    )
    timeout: int = Field(
        default=300, description="HTTP timeout in seconds (generous for model loading)"
    )


class LMStudioConfig(BaseModel):
    """LM Studio (or any OpenAI-compatible) server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:1234/v1", description="OpenAI-compatible API base URL"
    )
    model: str = Field(default="local-model", description="Model to use for plan generation")
    api_key: str = Field(default="lm-studio", description="API key sent to the server")
    timeout: int = Field(default=300, description="HTTP timeout in seconds")
    max_tokens: int = Field(
        default=8000, ge=1, description="Completion token cap (long plans need room)"
    )


class GenerationConfig(BaseModel):
    """Generation invoker behavior."""

    model_config = ConfigDict(extra="ignore")

    timeout: float = Field(
        default=180.0,
        gt=0,
        description="Upper bound in seconds on one generation call, retry included",
    )
    retry_min_wait: float = Field(
        default=2.0, ge=0, description="Minimum backoff before the transient retry"
    )
    retry_max_wait: float = Field(
        default=10.0, ge=0, description="Maximum backoff before the transient retry"
    )
    json_mode: bool = Field(
        default=True, description="Ask the backend for JSON-only output"
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class StorageConfig(BaseModel):
    """Persistence configuration."""

    model_config = ConfigDict(extra="ignore")

    db_path: str | None = Field(
        default=None,
        description="SQLite database path (None = planner.db in the user config dir)",
    )


class PlannerConfig(BaseModel):
    """Root configuration for gofast-planner."""

    model_config = ConfigDict(extra="ignore")

    provider: Literal["ollama", "lm_studio"] = Field(
        default="ollama", description="Generative backend to use"
    )
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = Field(default_factory=LMStudioConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
