# tests/unit/test_lifecycle.py
"""Tests for ServerLifecycle wiring and the server's lifecycle accessors."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gofast_planner import server
from gofast_planner.config.schema import PlannerConfig
from gofast_planner.lifecycle import ServerLifecycle


def _mock_client(healthy: bool = True) -> MagicMock:
    client = MagicMock()
    client.model = "test-model"
    client.health_check = AsyncMock(return_value=healthy)
    return client


@pytest.fixture
def config(tmp_path) -> PlannerConfig:
    return PlannerConfig(
        storage={"db_path": str(tmp_path / "server.db")},
        generation={"timeout": 42, "json_mode": False, "temperature": 0.1},
    )


class TestServerLifecycle:
    def test_wires_stores_and_invoker_from_config(self, config):
        client = _mock_client()
        with patch("gofast_planner.lifecycle.create_llm_client", return_value=client):
            lifecycle = ServerLifecycle(config)

        assert lifecycle.llm_client is client
        invoker = lifecycle.pipeline._invoker
        assert invoker._timeout == 42
        assert invoker._json_mode is False
        assert invoker._temperature == 0.1

    @pytest.mark.asyncio
    async def test_startup_initializes_db_and_checks_backend(self, config, tmp_path):
        client = _mock_client()
        with patch("gofast_planner.lifecycle.create_llm_client", return_value=client):
            lifecycle = ServerLifecycle(config)

        await lifecycle.startup()

        assert (tmp_path / "server.db").exists()
        client.health_check.assert_awaited_once()
        assert await lifecycle.plans.list_for_athlete("anyone") == []
        await lifecycle.shutdown()

    @pytest.mark.asyncio
    async def test_unhealthy_backend_only_warns(self, config):
        client = _mock_client(healthy=False)
        with patch("gofast_planner.lifecycle.create_llm_client", return_value=client):
            lifecycle = ServerLifecycle(config)

        await lifecycle.startup()
        await lifecycle.shutdown()

    @pytest.mark.asyncio
    async def test_startup_can_skip_backend_check(self, config):
        client = _mock_client()
        with patch("gofast_planner.lifecycle.create_llm_client", return_value=client):
            lifecycle = ServerLifecycle(config)

        await lifecycle.startup(check_backend=False)

        client.health_check.assert_not_awaited()
        await lifecycle.shutdown()


class TestServerAccessors:
    def test_get_lifecycle_before_init_raises(self):
        with patch.object(server, "_lifecycle", None):
            with pytest.raises(RuntimeError, match="not initialized"):
                server.get_lifecycle()

    @pytest.mark.asyncio
    async def test_initialize_lifecycle_sets_global(self, config):
        with patch.object(server, "_lifecycle", None):
            with patch("gofast_planner.lifecycle.create_llm_client", return_value=_mock_client()):
                lifecycle = await server.initialize_lifecycle(config)

            assert server.get_lifecycle() is lifecycle
            await lifecycle.shutdown()
