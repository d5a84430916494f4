"""Application services for Wine Concierge."""

from wine_concierge.services.ai import (
    LLMClient,
    LLMError,
    create_llm_client_from_env,
)

__all__ = [
    "LLMClient",
    "LLMError",
    "create_llm_client_from_env",
]
