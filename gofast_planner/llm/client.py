# gofast_planner/llm/client.py
"""Ollama client with health checks and streaming JSON generation."""

import logging

import httpx
from ollama import AsyncClient

logger = logging.getLogger(__name__)


class OllamaClient:
    """
    Async Ollama client.

    Handles:
    - Health checks (server + model availability)
    - Streaming generation with content accumulation
    - JSON output mode

    Retries are owned by the generation invoker, not the client.
    """

    def __init__(self, base_url: str, model: str, timeout: int = 300):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (e.g., "http://localhost:11434")
            model: Model name (e.g., "qwen2.5:14b-instruct")
            timeout: HTTP timeout in seconds (generous for model loading)
        """
        self.base_url = base_url
        self.model = model
        self.client = AsyncClient(host=base_url, timeout=httpx.Timeout(timeout))

    async def health_check(self) -> bool:
        """
        Check Ollama server health and model availability.

        Returns:
            True if server is reachable (the model can be pulled on demand).
            False if server is down or unreachable.
        """
        try:
            models_response = await self.client.list()
            available_models = [
                m.get("model") or m.get("name") for m in models_response.get("models", [])
            ]

            model_base = self.model.split(":")[0]
            if not any(m and (model_base in m or self.model == m) for m in available_models):
                logger.warning(
                    f"Model {self.model} not found in available models. "
                    f"It can be pulled on demand during generation."
                )
            return True

        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

    async def generate(
        self,
        messages: list[dict],
        json_mode: bool = False,
        temperature: float | None = None,
    ) -> str:
        """
        Generate a response from Ollama with streaming.

        Args:
            messages: Chat messages in format [{"role": "user", "content": "..."}]
            json_mode: Constrain output to a JSON value
            temperature: Sampling temperature (server default if None)

        Returns:
            Full accumulated response text.

        Raises:
            ResponseError: On API errors
            httpx.TransportError / ConnectionError: When the server is unreachable
        """
        logger.info(f"Generating with model={self.model}, messages={len(messages)}")

        options = {"temperature": temperature} if temperature is not None else None
        accumulated = []
        async for chunk in await self.client.chat(
            model=self.model,
            messages=messages,
            stream=True,
            format="json" if json_mode else "",
            options=options,
        ):
            if content := chunk.get("message", {}).get("content"):
                accumulated.append(content)

        result = "".join(accumulated)
        logger.info(f"Generated {len(result)} chars")
        return result
