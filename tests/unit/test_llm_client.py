# tests/unit/test_llm_client.py
"""Tests for the Ollama and LM Studio clients, the retry policy and the factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from ollama import ResponseError

from gofast_planner.config.schema import PlannerConfig
from gofast_planner.llm import LMStudioClient, OllamaClient, create_llm_client, is_transient
from gofast_planner.planning.invoker import classify_failure


def _ollama() -> OllamaClient:
    return OllamaClient(base_url="http://localhost:11434", model="qwen2.5:14b-instruct")


def _make_lm_studio(**kwargs) -> LMStudioClient:
    """Create LMStudioClient with openai patched out."""
    with patch("gofast_planner.llm.lm_studio.AsyncOpenAI"):
        client = LMStudioClient(**kwargs)
    return client


class TestOllamaClientHealthCheck:
    @pytest.mark.asyncio
    async def test_health_check_success_model_available(self):
        client = _ollama()

        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = {"models": [{"model": "qwen2.5:14b-instruct"}]}

            assert await client.health_check() is True
            mock_list.assert_called_once()

    @pytest.mark.asyncio
    async def test_health_check_model_not_pulled_still_true(self):
        client = _ollama()

        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = {"models": [{"name": "llama2:7b"}]}

            assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_server_down(self):
        client = _ollama()

        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.side_effect = ConnectionError("Connection refused")

            assert await client.health_check() is False


class TestOllamaClientGenerate:
    @pytest.mark.asyncio
    async def test_generate_streams_and_accumulates(self):
        client = _ollama()
        chunks = [
            {"message": {"content": '{"phases"'}},
            {"message": {"content": ": []}"}},
            {"message": {"content": ""}},
        ]

        async def mock_stream():
            for chunk in chunks:
                yield chunk

        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = mock_stream()

            result = await client.generate([{"role": "user", "content": "plan"}], json_mode=True)

        assert result == '{"phases": []}'
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["format"] == "json"
        assert kwargs["stream"] is True
        assert kwargs["model"] == "qwen2.5:14b-instruct"
        assert kwargs["options"] is None

    @pytest.mark.asyncio
    async def test_generate_passes_temperature_without_json_mode(self):
        client = _ollama()

        async def mock_stream():
            yield {"message": {"content": "ok"}}

        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = mock_stream()

            await client.generate([{"role": "user", "content": "x"}], temperature=0.2)

        kwargs = mock_chat.call_args.kwargs
        assert kwargs["format"] == ""
        assert kwargs["options"] == {"temperature": 0.2}

    @pytest.mark.asyncio
    async def test_generate_propagates_provider_errors(self):
        client = _ollama()

        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.side_effect = ResponseError("model not found", 404)

            with pytest.raises(ResponseError):
                await client.generate([{"role": "user", "content": "x"}])


class TestLMStudioClient:
    @pytest.mark.asyncio
    async def test_generate_json_mode(self):
        client = _make_lm_studio(model="local-model", max_tokens=8000)

        def _chunk(content):
            chunk = MagicMock()
            chunk.choices = [MagicMock()]
            chunk.choices[0].delta.content = content
            return chunk

        async def mock_stream():
            for part in ['{"phases"', ": []}", None]:
                yield _chunk(part)

        client._client.chat.completions.create = AsyncMock(return_value=mock_stream())

        result = await client.generate([{"role": "user", "content": "x"}], json_mode=True, temperature=0.7)

        assert result == '{"phases": []}'
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["max_tokens"] == 8000
        assert kwargs["temperature"] == 0.7
        assert kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_connection_error_becomes_connection_error(self):
        class FakeAPIConnectionError(Exception):
            pass

        class FakeAPITimeoutError(FakeAPIConnectionError):
            pass

        client = _make_lm_studio()
        client._client.chat.completions.create = AsyncMock(side_effect=FakeAPIConnectionError("down"))

        with patch("gofast_planner.llm.lm_studio.APIConnectionError", FakeAPIConnectionError), \
             patch("gofast_planner.llm.lm_studio.APITimeoutError", FakeAPITimeoutError):
            with pytest.raises(ConnectionError):
                await client.generate([{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_api_timeout_becomes_timeout_error(self):
        class FakeAPIConnectionError(Exception):
            pass

        class FakeAPITimeoutError(FakeAPIConnectionError):
            pass

        client = _make_lm_studio()
        client._client.chat.completions.create = AsyncMock(side_effect=FakeAPITimeoutError("slow"))

        with patch("gofast_planner.llm.lm_studio.APIConnectionError", FakeAPIConnectionError), \
             patch("gofast_planner.llm.lm_studio.APITimeoutError", FakeAPITimeoutError):
            with pytest.raises(TimeoutError) as exc_info:
                await client.generate([{"role": "user", "content": "x"}])

        assert not isinstance(exc_info.value, ConnectionError)
        assert classify_failure(exc_info.value).reason == "timeout"

    def test_missing_openai_raises_import_error(self):
        with patch("gofast_planner.llm.lm_studio.AsyncOpenAI", None):
            with pytest.raises(ImportError, match="lm-studio"):
                LMStudioClient()


class TestRetryPolicy:
    @pytest.mark.parametrize(
        "error",
        [
            ConnectionError("reset"),
            httpx.ConnectError("refused"),
            ResponseError("busy", 503),
            ResponseError("rate limited", 429),
            ResponseError("gateway", 502),
        ],
    )
    def test_transient(self, error):
        assert is_transient(error)

    @pytest.mark.parametrize(
        "error",
        [
            ResponseError("not found", 404),
            ResponseError("bad request", 400),
            ResponseError("model requires more system memory", 500),
            ValueError("bad json"),
        ],
    )
    def test_not_transient(self, error):
        assert not is_transient(error)


class TestFactory:
    def test_default_is_ollama(self):
        client = create_llm_client(PlannerConfig())
        assert isinstance(client, OllamaClient)
        assert client.model == "qwen2.5:14b-instruct"

    def test_lm_studio(self):
        config = PlannerConfig(provider="lm_studio", lm_studio={"model": "my-model", "max_tokens": 4000})
        with patch("gofast_planner.llm.lm_studio.AsyncOpenAI"):
            client = create_llm_client(config)
        assert isinstance(client, LMStudioClient)
        assert client.model == "my-model"
        assert client.max_tokens == 4000
