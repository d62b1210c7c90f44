"""LLM error hierarchy.

Provider SDK errors are translated into these so callers never depend on a
vendor package. The client falls back to the next provider on any of them.
"""


class LLMError(Exception):
    """Base exception for LLM operations."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


class AuthenticationError(LLMError):
    """401/403, or no API key configured."""


class RateLimitError(LLMError):
    """429 - Rate limit exceeded."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        provider: str | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message, provider, request_id)
        self.retry_after = retry_after


class LLMTimeoutError(LLMError):
    """Request exceeded the configured timeout."""


class InvalidRequestError(LLMError):
    """400/404 - Malformed request or unknown model."""


class ProviderError(LLMError):
    """5xx or connection failure on the provider side."""


class AllProvidersFailedError(LLMError):
    """Every configured provider failed, or none is configured."""


def error_for_status(
    provider: str,
    status_code: int,
    message: str,
    request_id: str | None = None,
    retry_after: str | None = None,
) -> LLMError:
    """Map an HTTP status from a provider API to an ``LLMError``."""
    if status_code in (401, 403):
        return AuthenticationError(
            f"{provider} rejected the API key: {message}", provider=provider, request_id=request_id
        )
    if status_code == 429:
        try:
            delay = float(retry_after) if retry_after else None
        except ValueError:
            delay = None
        return RateLimitError(
            f"{provider} rate limit exceeded: {message}",
            retry_after=delay,
            provider=provider,
            request_id=request_id,
        )
    if status_code in (400, 404, 422):
        return InvalidRequestError(
            f"Invalid request to {provider}: {message}", provider=provider, request_id=request_id
        )
    if status_code >= 500:
        return ProviderError(
            f"{provider} server error ({status_code}): {message}",
            provider=provider,
            request_id=request_id,
        )
    return LLMError(f"{provider} error ({status_code}): {message}", provider=provider, request_id=request_id)
