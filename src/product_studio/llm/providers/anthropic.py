"""Anthropic Messages API provider."""

import os
import time
from typing import Any

from anthropic import APIConnectionError, APIStatusError, APITimeoutError, AsyncAnthropic

from ..errors import AuthenticationError, LLMError, LLMTimeoutError, ProviderError, error_for_status
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider

# Anthropic stop reasons mapped to the OpenAI vocabulary used in LLMResponse
_FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
}


class AnthropicProvider(LLMProvider):
    """Anthropic provider.

    There is no JSON mode here; prompts already demand a bare JSON object and
    the generation service tolerates stray prose around it.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str | None = None,
    ):
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._timeout = timeout
        self._default_model = default_model or os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-5")
        self._client: AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialized SDK client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, request: LLMRequest) -> LLMResponse:
        start_time = time.perf_counter()
        try:
            response = await self.client.messages.create(**self._build_request(request))
        except APITimeoutError as e:
            raise LLMTimeoutError(
                f"Anthropic request timed out after {self._timeout}s", provider=self.name
            ) from e
        except APIConnectionError as e:
            raise ProviderError(f"Failed to connect to Anthropic: {e}", provider=self.name) from e
        except APIStatusError as e:
            raise error_for_status(
                self.name,
                e.status_code,
                e.message,
                request_id=e.request_id,
                retry_after=e.response.headers.get("retry-after"),
            ) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        text = "\n".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise LLMError("Anthropic returned an empty completion", provider=self.name, request_id=response.id)

        return LLMResponse(
            text=text,
            model=response.model,
            provider=self.name,
            finish_reason=_FINISH_REASONS.get(response.stop_reason, response.stop_reason or "stop"),
            usage=Usage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
            ),
            latency_ms=latency_ms,
            request_id=response.id,
        )

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        # System prompt is a top-level parameter, not a message
        system = "\n\n".join(m.content for m in request.messages if m.role == "system")
        payload: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": [
                {"role": m.role, "content": m.content} for m in request.messages if m.role != "system"
            ],
            "max_tokens": request.max_tokens or 4096,
            # Anthropic accepts 0-1
            "temperature": min(request.temperature, 1.0),
        }
        if system:
            payload["system"] = system
        return payload
