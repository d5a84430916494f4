"""OpenAI provider implementation."""

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

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIClient(LLMClient):
    """OpenAI GPT chat client."""

    provider = AIProvider.OPENAI

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: OpenAI API key.
            model: Model name (defaults to gpt-4o-mini).
            max_tokens: Maximum tokens in the reply.
            temperature: Sampling temperature.
        """
        try:
            import openai
        except ImportError:
            raise ImportError(
                "openai package is required. Install with: pip install openai"
            )

        self._sdk = openai
        self.client = openai.OpenAI(api_key=api_key, max_retries=0)
        self.model = model or DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature

    def chat(self, messages: list[ChatMessage]) -> LLMResponse:
        """Send messages to the chat completions endpoint."""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": m.role, "content": m.content} for m in messages],
            )
        except self._sdk.APIStatusError as e:
            logger.error(f"OpenAI API error ({e.status_code}): {e}")
            raise LLMError.from_status(f"OpenAI API error: {e.status_code}", e.status_code) from e
        except self._sdk.APIConnectionError as e:
            logger.error(f"OpenAI connection error: {e}")
            raise LLMError(f"OpenAI connection error: {e}", kind=LLMErrorKind.TRANSPORT) from e

        if not response.choices or not response.choices[0].message.content:
            raise LLMError("Invalid OpenAI response format", kind=LLMErrorKind.EMPTY)

        text = response.choices[0].message.content
        logger.debug(f"OpenAI reply ({len(text)} chars): {text[:500]}")

        usage = response.usage
        return LLMResponse(
            content=text,
            model=response.model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
