"""Vendor-neutral LLM request and response models."""

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(BaseModel):
    """Vendor-neutral completion request.

    ``model`` is left to the provider default when None. ``json_mode`` asks
    providers that support it for a bare JSON object.
    """

    messages: list[ChatMessage]
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int | None = None
    json_mode: bool = False

    @classmethod
    def from_prompt(cls, prompt: str, system: str | None = None, **kwargs) -> "LLMRequest":
        """Single-turn request from a user prompt and optional system prompt."""
        messages = []
        if system:
            messages.append(ChatMessage(role="system", content=system))
        messages.append(ChatMessage(role="user", content=prompt))
        return cls(messages=messages, **kwargs)


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMResponse(BaseModel):
    """Vendor-neutral completion response."""

    text: str
    model: str
    provider: str
    finish_reason: str = "stop"
    usage: Usage = Field(default_factory=Usage)
    latency_ms: int = 0
    request_id: str | None = None
