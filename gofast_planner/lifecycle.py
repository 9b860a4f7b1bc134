# gofast_planner/lifecycle.py
"""
Server lifecycle management.

Wires the stores, LLM client and pipeline from config, and coordinates
startup (DB initialization, backend health check) and shutdown.
"""

import logging

from gofast_planner.config.loader import get_db_path
from gofast_planner.config.schema import PlannerConfig
from gofast_planner.llm.client import OllamaClient
from gofast_planner.llm.factory import create_llm_client
from gofast_planner.llm.lm_studio import LMStudioClient
from gofast_planner.models.sqlite_store import (
    SQLiteConfigRegistry,
    SQLitePlanStore,
    SQLiteRaceRegistry,
)
from gofast_planner.planning.invoker import GenerationInvoker
from gofast_planner.planning.pipeline import PlanGenerationPipeline

logger = logging.getLogger(__name__)


class ServerLifecycle:
    """
    Server lifecycle coordinator.

    Manages:
        - Store creation and database initialization
        - LLM client creation and health check on startup
        - Graceful shutdown (WAL checkpoint)
    """

    def __init__(self, config: PlannerConfig, db_path: str | None = None) -> None:
        """
        Initialize server lifecycle manager.

        Args:
            config: Root PlannerConfig
            db_path: SQLite path override (defaults to the configured path)
        """
        db_path = db_path or get_db_path(config)
        self._registry = SQLiteConfigRegistry(db_path)
        self._races = SQLiteRaceRegistry(db_path)
        self._plans = SQLitePlanStore(db_path)

        self._llm_client = create_llm_client(config)
        generation = config.generation
        self._invoker = GenerationInvoker(
            self._llm_client,
            timeout=generation.timeout,
            json_mode=generation.json_mode,
            temperature=generation.temperature,
            retry_min_wait=generation.retry_min_wait,
            retry_max_wait=generation.retry_max_wait,
        )
        self._pipeline = PlanGenerationPipeline(
            self._registry, self._races, self._plans, self._invoker
        )
        logger.info(f"Created ServerLifecycle with db_path={db_path} provider={config.provider}")

    @property
    def registry(self) -> SQLiteConfigRegistry:
        return self._registry

    @property
    def races(self) -> SQLiteRaceRegistry:
        return self._races

    @property
    def plans(self) -> SQLitePlanStore:
        return self._plans

    @property
    def pipeline(self) -> PlanGenerationPipeline:
        return self._pipeline

    @property
    def llm_client(self) -> OllamaClient | LMStudioClient:
        """Get the LLM client (for inspection/testing)."""
        return self._llm_client

    async def startup(self, check_backend: bool = True) -> None:
        """
        Start the server lifecycle.

        Steps:
            1. Initialize database schema
            2. Check the generative backend is reachable (warning only)
        """
        logger.info("Starting server lifecycle...")
        await self._registry.initialize()

        if check_backend and not await self._llm_client.health_check():
            logger.warning(
                "Generative backend unreachable; generate_plan will fail until it is up"
            )

        logger.info("Server lifecycle started")

    async def shutdown(self) -> None:
        """Close the database (WAL checkpoint)."""
        logger.info("Shutting down server lifecycle...")
        await self._registry.close()
        logger.info("Server lifecycle shutdown complete")
