"""Anthropic (Claude) provider implementation."""

import logging

from wine_concierge.services.ai.client import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    AIProvider,
    ChatMessage,
    LLMClient,
    LLMError,
    LLMErrorKind,
    LLMResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-haiku-20240307"


class AnthropicClient(LLMClient):
    """Anthropic Claude chat client."""

    provider = AIProvider.ANTHROPIC

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        """
        Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key.
            model: Model name (defaults to claude-3-haiku-20240307).
            max_tokens: Maximum tokens in the reply.
            temperature: Sampling temperature.
        """
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic package is required. Install with: pip install anthropic"
            )

        self._sdk = anthropic
        # Retries are owned by the enrichment retry policy
        self.client = anthropic.Anthropic(api_key=api_key, max_retries=0)
        self.model = model or DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature

    def chat(self, messages: list[ChatMessage]) -> LLMResponse:
        """
        Send messages to Claude.

        The system message, if any, is passed separately as Anthropic requires.
        """
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        conversation = [
            {"role": m.role, "content": m.content} for m in messages if m.role != "system"
        ]

        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": conversation,
        }
        if system:
            kwargs["system"] = system

        try:
            response = self.client.messages.create(**kwargs)
        except self._sdk.APIStatusError as e:
            logger.error(f"Anthropic API error ({e.status_code}): {e}")
            raise LLMError.from_status(f"Anthropic API error: {e.status_code}", e.status_code) from e
        except self._sdk.APIConnectionError as e:
            # APITimeoutError is a subclass of APIConnectionError
            logger.error(f"Anthropic connection error: {e}")
            raise LLMError(f"Anthropic connection error: {e}", kind=LLMErrorKind.TRANSPORT) from e

        text = "".join(
            getattr(block, "text", "") for block in response.content if block.type == "text"
        )
        if not text:
            raise LLMError("Invalid Anthropic response format", kind=LLMErrorKind.EMPTY)

        logger.debug(f"Anthropic reply ({len(text)} chars): {text[:500]}")

        return LLMResponse(
            content=text,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
