"""Interface every LLM provider implements."""

from abc import ABC, abstractmethod

from ..models import LLMRequest, LLMResponse


class LLMProvider(ABC):
    """A single LLM vendor."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier: 'openai', 'anthropic', etc."""
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""
        ...

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request.

        Raises:
            LLMError: Any provider failure, translated from the vendor SDK.
        """
        ...
