# gofast_planner/llm/lm_studio.py
"""LM Studio client using OpenAI-compatible API."""

import logging

import httpx

try:
    from openai import APIConnectionError, APITimeoutError, AsyncOpenAI
except ImportError:
    AsyncOpenAI = None  # type: ignore[assignment,misc]
    APIConnectionError = None  # type: ignore[assignment,misc]
    APITimeoutError = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)


class LMStudioClient:
    """
    Async LM Studio client using the OpenAI-compatible API.

    LM Studio exposes an OpenAI-compatible endpoint at http://localhost:1234/v1.
    Requires: pip install gofast-planner[lm-studio]
    """

    def __init__(
        self,
        base_url: str = "http://localhost:1234/v1",
        model: str = "local-model",
        api_key: str = "lm-studio",
        timeout: int = 300,
        max_tokens: int = 8000,
    ):
        """
        Initialize LM Studio client.

        Args:
            base_url:   LM Studio API base URL
            model:      Model name
            api_key:    API key (LM Studio accepts any value)
            timeout:    Request timeout in seconds
            max_tokens: Completion token cap
        """
        if AsyncOpenAI is None:
            raise ImportError(
                "openai package required for LM Studio support. "
                "Install with: pip install gofast-planner[lm-studio]"
            )

        self.base_url = base_url
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    async def health_check(self) -> bool:
        """
        Check LM Studio server health by listing available models.

        Returns:
            True if server is reachable, False otherwise.
        """
        try:
            async with httpx.AsyncClient(timeout=5.0) as http:
                response = await http.get(f"{self.base_url}/models")
            return response.status_code == 200
        except Exception as e:
            logger.error(f"LM Studio health check failed: {e}")
            return False

    async def generate(
        self,
        messages: list[dict],
        json_mode: bool = False,
        temperature: float | None = None,
    ) -> str:
        """
        Generate a streaming response from LM Studio.

        Args:
            messages:    Chat messages in format [{"role": "user", "content": "..."}]
            json_mode:   Request a JSON object response format
            temperature: Sampling temperature (server default if None)

        Returns:
            Full accumulated response text.

        Raises:
            ConnectionError: When the server is unreachable
            openai.APIStatusError: On provider-side errors (carries status_code)
        """
        logger.info(f"LMStudio.generate: model={self.model}, messages={len(messages)}")

        kwargs: dict = {"max_tokens": self.max_tokens}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if temperature is not None:
            kwargs["temperature"] = temperature

        accumulated = []
        try:
            stream = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
                **kwargs,
            )
            async for chunk in stream:
                delta = chunk.choices[0].delta if chunk.choices else None
                if delta and delta.content:
                    accumulated.append(delta.content)
        # APITimeoutError subclasses APIConnectionError
        except APITimeoutError as e:
            raise TimeoutError(f"LM Studio timed out after {self.timeout}s: {e}") from e
        except APIConnectionError as e:
            raise ConnectionError(f"LM Studio unreachable at {self.base_url}: {e}") from e

        result = "".join(accumulated)
        logger.info(f"LMStudio.generate: {len(result)} chars")
        return result
