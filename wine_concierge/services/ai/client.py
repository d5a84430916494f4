"""Language model client interface and provider abstraction."""

import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Literal

from pydantic import BaseModel

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


class AIProvider(str, Enum):
    """Supported AI providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class ChatMessage(BaseModel):
    """A single chat message sent to the model."""

    role: Literal["system", "user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    """Text reply from a chat-completion call."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMErrorKind(str, Enum):
    """Classification of a failed model call."""

    CLIENT = "client"  # bad request, unauthenticated, forbidden
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    TRANSPORT = "transport"  # timeouts, connection resets
    EMPTY = "empty"  # call succeeded but carried no text


class LLMError(Exception):
    """
    A failed language model call.

    Carries a structured kind (and HTTP status when there was one) so callers
    can decide whether to retry without inspecting the message text.
    """

    def __init__(
        self,
        message: str,
        kind: LLMErrorKind = LLMErrorKind.TRANSPORT,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Client-side faults will fail the same way on every attempt."""
        return self.kind != LLMErrorKind.CLIENT

    @classmethod
    def from_status(cls, message: str, status_code: int) -> "LLMError":
        """Build an error from an HTTP status returned by a provider."""
        return cls(message, kind=classify_status(status_code), status_code=status_code)


def classify_status(status_code: int) -> LLMErrorKind:
    """
    Map an HTTP status code to an error kind.

    408 and 409 are treated as transient, matching provider SDK retry rules.
    """
    if status_code == 429:
        return LLMErrorKind.RATE_LIMITED
    if status_code in (408, 409):
        return LLMErrorKind.TRANSPORT
    if 400 <= status_code < 500:
        return LLMErrorKind.CLIENT
    return LLMErrorKind.SERVER


class LLMClient(ABC):
    """Abstract base class for chat-completion providers."""

    provider: AIProvider
    model: str

    @abstractmethod
    def chat(self, messages: list[ChatMessage]) -> LLMResponse:
        """
        Send a conversation and return the model's reply.

        Args:
            messages: Ordered conversation, optionally starting with a system message.

        Returns:
            LLMResponse with the reply text.

        Raises:
            LLMError: On any provider or transport failure.
        """
        pass


def get_llm_client(
    provider: AIProvider | str,
    api_key: str,
    model: str | None = None,
) -> LLMClient:
    """
    Factory function to get a client for the specified provider.

    Args:
        provider: The AI provider to use.
        api_key: The API key for the provider.
        model: Optional model name override.

    Returns:
        An LLMClient instance for the specified provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if isinstance(provider, str):
        try:
            provider = AIProvider(provider.lower())
        except ValueError:
            raise ValueError(f"Unsupported AI provider: {provider}")

    if provider == AIProvider.ANTHROPIC:
        from wine_concierge.services.ai.providers.anthropic import AnthropicClient

        return AnthropicClient(api_key=api_key, model=model)
    elif provider == AIProvider.OPENAI:
        from wine_concierge.services.ai.providers.openai import OpenAIClient

        return OpenAIClient(api_key=api_key, model=model)
    else:
        raise ValueError(f"Unsupported AI provider: {provider}")


def create_llm_client_from_env() -> LLMClient:
    """
    Create a client from environment variables.

    Reads AI_PROVIDER (default "anthropic"), AI_MODEL and the provider's
    API key variable.

    Raises:
        ValueError: If the provider's API key is not set.
    """
    provider = os.environ.get("AI_PROVIDER", "anthropic").lower()
    model = os.environ.get("AI_MODEL") or None

    if provider == "anthropic":
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")
    elif provider == "openai":
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is required")
    else:
        raise ValueError(f"Unsupported AI provider: {provider}")

    return get_llm_client(provider, api_key, model)
