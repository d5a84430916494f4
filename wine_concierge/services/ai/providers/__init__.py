"""Language model provider implementations."""

from wine_concierge.services.ai.providers.anthropic import AnthropicClient
from wine_concierge.services.ai.providers.openai import OpenAIClient

__all__ = ["AnthropicClient", "OpenAIClient"]
