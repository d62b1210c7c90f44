"""OpenAI Chat Completions provider."""

import os
import time
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..errors import AuthenticationError, LLMError, LLMTimeoutError, ProviderError, error_for_status
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider


class OpenAIProvider(LLMProvider):
    """OpenAI provider. JSON mode maps to ``response_format={"type": "json_object"}``."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str | None = None,
    ):
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = timeout
        self._default_model = default_model or os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized SDK client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, request: LLMRequest) -> LLMResponse:
        start_time = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(**self._build_request(request))
        except APITimeoutError as e:
            raise LLMTimeoutError(
                f"OpenAI request timed out after {self._timeout}s", provider=self.name
            ) from e
        except APIConnectionError as e:
            raise ProviderError(f"Failed to connect to OpenAI: {e}", provider=self.name) from e
        except APIStatusError as e:
            raise error_for_status(
                self.name,
                e.status_code,
                e.message,
                request_id=e.request_id,
                retry_after=e.response.headers.get("retry-after"),
            ) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        choice = response.choices[0]
        if not choice.message.content:
            raise LLMError("OpenAI returned an empty completion", provider=self.name, request_id=response.id)

        usage = Usage()
        if response.usage is not None:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )
        return LLMResponse(
            text=choice.message.content,
            model=response.model,
            provider=self.name,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            latency_ms=latency_ms,
            request_id=response.id,
        )

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "temperature": request.temperature,
        }
        if request.max_tokens:
            payload["max_tokens"] = request.max_tokens
        if request.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload
