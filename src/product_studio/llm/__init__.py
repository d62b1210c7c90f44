"""LLM provider abstraction layer.

Vendor-neutral interface over OpenAI and Anthropic with provider fallback.
"""

from .client import LLMClient, get_client, set_client
from .errors import (
    AllProvidersFailedError,
    AuthenticationError,
    InvalidRequestError,
    LLMError,
    LLMTimeoutError,
    ProviderError,
    RateLimitError,
)
from .models import ChatMessage, LLMRequest, LLMResponse, Usage

__all__ = [
    "LLMClient",
    "get_client",
    "set_client",
    "LLMRequest",
    "LLMResponse",
    "ChatMessage",
    "Usage",
    "LLMError",
    "AllProvidersFailedError",
    "AuthenticationError",
    "RateLimitError",
    "LLMTimeoutError",
    "InvalidRequestError",
    "ProviderError",
]
