"""LLM client with provider fallback.

Providers are tried in order; the first success wins. There is no retry
within a provider: a failure moves straight on to the next one, and when
all have failed the caller gets a single ``AllProvidersFailedError``.
"""

import logging
import os
import uuid

from .errors import AllProvidersFailedError, LLMError
from .models import LLMRequest, LLMResponse
from .providers.anthropic import AnthropicProvider
from .providers.base import LLMProvider
from .providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class LLMClient:
    """Tries each configured provider in order.

    Configuration (env vars):
    - LLM_DEFAULT_PROVIDER: Provider tried first (default: "openai")
    - LLM_TIMEOUT_SECONDS: Request timeout (default: 60)
    """

    DEFAULT_PROVIDER = "openai"
    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        providers: list[LLMProvider] | None = None,
        default_provider: str | None = None,
        timeout: float | None = None,
    ):
        timeout = (
            timeout
            if timeout is not None
            else float(os.environ.get("LLM_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT))
        )
        if providers is None:
            providers = [
                OpenAIProvider(timeout=timeout),
                AnthropicProvider(timeout=timeout),
            ]
        self._providers: dict[str, LLMProvider] = {p.name: p for p in providers}

        first = default_provider or os.environ.get("LLM_DEFAULT_PROVIDER", self.DEFAULT_PROVIDER)
        self._order = [name for name in self._providers if name == first]
        self._order.extend(name for name in self._providers if name != first)

    @property
    def provider_order(self) -> list[str]:
        return list(self._order)

    def get_provider(self, name: str) -> LLMProvider:
        if name not in self._providers:
            raise ValueError(f"Unknown provider: {name}. Available: {list(self._providers)}")
        return self._providers[name]

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate a completion, falling back across providers.

        Raises:
            AllProvidersFailedError: If no provider succeeded.
        """
        correlation_id = str(uuid.uuid4())
        last_error: LLMError | None = None

        for name in self._order:
            provider = self._providers[name]
            if not provider.is_configured:
                logger.debug(f"Provider {name} not configured, skipping [{correlation_id}]")
                continue
            try:
                response = await provider.generate(request)
            except LLMError as e:
                last_error = e
                logger.warning(f"Provider {name} failed: {e}. Trying fallback. [{correlation_id}]")
                continue

            logger.info(
                f"LLM request succeeded via {response.provider}/{response.model} "
                f"in {response.latency_ms}ms [{correlation_id}]"
            )
            return response

        if last_error is None:
            raise AllProvidersFailedError("No AI providers configured")
        raise AllProvidersFailedError(
            f"All AI providers failed: {last_error}", provider=last_error.provider
        ) from last_error


_default_client: LLMClient | None = None


def get_client() -> LLMClient:
    """Get the default LLM client singleton."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client


def set_client(client: LLMClient | None) -> None:
    """Replace the default client (for testing)."""
    global _default_client
    _default_client = client
