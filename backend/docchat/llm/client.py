"""Inference client for grounded answers over an OpenAI-compatible API.

Security: API key comes from settings only, never hardcoded.
Every failure (transport, timeout, non-2xx, missing reply field) is logged as
an InferenceFailure and answered with the deterministic fallback phrase. The
end user never sees provider error detail.
"""

import asyncio
import logging
import time
from typing import Literal, Protocol

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from backend.docchat.config import Settings
from backend.docchat.errors import InferenceFailure
from backend.docchat.prompts.builder import ModelRequest
from backend.docchat.prompts.templates import FALLBACK_REPLY
from backend.docchat.utils.metrics import metrics

logger = logging.getLogger(__name__)


class Completion(BaseModel):
    """Reply text plus where it came from."""

    text: str
    source: Literal["model", "fallback", "stub"]
    failure_reason: str | None = None


class InferenceClient(Protocol):
    """Protocol for inference client implementations."""

    async def complete(self, request: ModelRequest) -> Completion:
        """Send a request and return a reply. Never raises for service failures.

        Args:
            request: Composed model request (system + user messages)

        Returns:
            Completion whose text is the model reply, or FALLBACK_REPLY
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


class DeterministicStubClient:
    """Deterministic stub client for testing (no API key required)."""

    async def complete(self, request: ModelRequest) -> Completion:
        return Completion(text=FALLBACK_REPLY, source="stub")

    async def aclose(self) -> None:
        return None


class OpenAIClient:
    """Chat completions client for any OpenAI-compatible endpoint (Groq by default)."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_key: Provider API key (read from settings)
            base_url: OpenAI-compatible API root, e.g. https://api.groq.com/openai/v1
            timeout: Deadline in seconds for the whole call, retries and backoff included
            max_retries: SDK retries on connection errors and 5xx/429, within the deadline
            http_client: Optional httpx client (for testing with mocks)
        """
        self.timeout = timeout
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            http_client=http_client,
        )

    async def complete(self, request: ModelRequest) -> Completion:
        start = time.perf_counter()
        try:
            text = await self._generate(request)
        except InferenceFailure as failure:
            latency_ms = (time.perf_counter() - start) * 1000
            metrics.record_inference("failure", latency_ms)
            metrics.inc_inference_failure(failure.reason)
            log_data = {"reason": failure.reason, "latency_ms": round(latency_ms, 2)}
            logger.warning(
                f"Inference failed ({failure.reason}), using fallback reply",
                extra={"structured": log_data},
            )
            return Completion(text=FALLBACK_REPLY, source="fallback", failure_reason=failure.reason)

        metrics.record_inference("success", (time.perf_counter() - start) * 1000)
        return Completion(text=text, source="model")

    async def _generate(self, request: ModelRequest) -> str:
        """Call the provider and pull the reply text out of the response.

        Raises:
            InferenceFailure: With a short machine-readable reason
        """
        try:
            async with asyncio.timeout(self.timeout):
                response = await self.client.chat.completions.create(
                    model=request.model,
                    messages=[m.model_dump() for m in request.messages],  # type: ignore[misc]
                    temperature=request.temperature,
                    max_tokens=request.max_tokens,
                )
        except (TimeoutError, openai.APITimeoutError) as e:
            raise InferenceFailure("timeout") from e
        except openai.APIStatusError as e:
            logger.error(f"Inference API returned {e.status_code}: {e.message}")
            raise InferenceFailure(f"http_{e.status_code}") from e
        except openai.APIConnectionError as e:
            logger.error(f"Inference API unreachable: {e}")
            raise InferenceFailure("transport") from e
        except Exception as e:
            logger.error(f"Inference API call failed: {type(e).__name__}: {e}")
            raise InferenceFailure("client_error") from e

        # Response shape is not trusted: any field may be absent
        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)

        if not isinstance(content, str) or not content.strip():
            raise InferenceFailure("missing_reply")

        return content.strip()

    async def aclose(self) -> None:
        await self.client.close()


def get_inference_client(settings: Settings) -> InferenceClient:
    """Factory function to get appropriate inference client based on config.

    Returns:
        OpenAIClient if API key is configured, DeterministicStubClient otherwise
    """
    api_key = settings.inference_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI-compatible inference at {settings.inference_base_url}")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            base_url=settings.inference_base_url,
            timeout=settings.inference_timeout_seconds,
            max_retries=settings.inference_max_retries,
        )

    logger.warning("No inference API key configured, using deterministic stub client")
    return DeterministicStubClient()
