# gofast_planner/planning/invoker.py
"""
Generation invoker: one bounded call to the generative backend.

Transient transport failures get exactly one retry. Content is never
retried here; deciding what to do with bad output belongs to the caller.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol

import httpx

from gofast_planner.errors import GenerationFailure
from gofast_planner.llm.retry import is_transient, transient_retry
from gofast_planner.planning.assembler import AssembledPrompt

logger = logging.getLogger(__name__)


class GenerativeBackend(Protocol):
    """What the invoker needs from an LLM client."""

    model: str

    async def generate(
        self,
        messages: list[dict],
        json_mode: bool = False,
        temperature: float | None = None,
    ) -> str: ...


@dataclass(frozen=True)
class RawGenerationOutput:
    """Unvalidated backend output."""

    text: str
    model: str
    elapsed_s: float


def classify_failure(error: Exception) -> GenerationFailure:
    """Map a backend exception onto a GenerationFailure reason."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return GenerationFailure("timeout", str(error) or "backend timed out")
    if is_transient(error) and getattr(error, "status_code", None) is None:
        return GenerationFailure("transport", str(error) or type(error).__name__)
    return GenerationFailure("provider", str(error) or type(error).__name__)


class GenerationInvoker:
    """
    Sends assembled prompts to a backend with a timeout and one transient retry.

    Args:
        client: OllamaClient, LMStudioClient or any GenerativeBackend
        timeout: Upper bound in seconds on the whole call, retry included
        json_mode: Ask the backend for JSON output
        temperature: Sampling temperature passed to the backend
        retry_min_wait: Minimum backoff before the retry
        retry_max_wait: Maximum backoff before the retry
    """

    def __init__(
        self,
        client: GenerativeBackend,
        timeout: float = 180.0,
        json_mode: bool = True,
        temperature: float | None = None,
        retry_min_wait: float = 2.0,
        retry_max_wait: float = 10.0,
    ):
        self._client = client
        self._timeout = timeout
        self._json_mode = json_mode
        self._temperature = temperature
        self._generate = transient_retry(retry_min_wait, retry_max_wait)(self._generate_once)

    async def _generate_once(self, messages: list[dict]) -> str:
        return await self._client.generate(
            messages, json_mode=self._json_mode, temperature=self._temperature
        )

    async def invoke(self, prompt: AssembledPrompt) -> RawGenerationOutput:
        """
        Generate raw output for an assembled prompt.

        Returns:
            RawGenerationOutput with the backend text

        Raises:
            GenerationFailure: transport, timeout, provider or empty output
        """
        start = time.monotonic()
        logger.info(
            f"Invoking backend model={self._client.model} "
            f"fingerprint={prompt.fingerprint[:12]} timeout={self._timeout}s"
        )
        try:
            text = await asyncio.wait_for(
                self._generate(prompt.messages), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Backend call exceeded {self._timeout}s")
            raise GenerationFailure(
                "timeout", f"no response within {self._timeout}s"
            ) from None
        except Exception as e:
            failure = classify_failure(e)
            logger.warning(f"Backend call failed: {failure}")
            raise failure from e

        elapsed = time.monotonic() - start
        if not text or not text.strip():
            logger.warning("Backend returned empty output")
            raise GenerationFailure("empty", "backend returned no content")
        if "{" not in text:
            logger.warning(f"Backend output contains no JSON object ({len(text)} chars)")
            raise GenerationFailure("empty", "backend output contains no JSON object")

        logger.info(f"Backend returned {len(text)} chars in {elapsed:.1f}s")
        return RawGenerationOutput(text=text, model=self._client.model, elapsed_s=elapsed)
