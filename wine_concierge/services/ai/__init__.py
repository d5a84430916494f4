"""Language model client services for Wine Concierge."""

from wine_concierge.services.ai.client import (
    AIProvider,
    ChatMessage,
    LLMClient,
    LLMError,
    LLMErrorKind,
    LLMResponse,
    create_llm_client_from_env,
    get_llm_client,
)

__all__ = [
    "AIProvider",
    "ChatMessage",
    "LLMClient",
    "LLMError",
    "LLMErrorKind",
    "LLMResponse",
    "create_llm_client_from_env",
    "get_llm_client",
]
