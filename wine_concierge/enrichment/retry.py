"""Bounded retry with exponential backoff for language model calls."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from wine_concierge.enrichment.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY_MS
from wine_concierge.services.ai.client import ChatMessage, LLMClient, LLMError, LLMResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """
    Retry a call that fails with LLMError.

    Attempt k (0-based) that fails with a retryable error is followed by a
    delay of base_delay_ms * 2**k. Client errors are raised on the first
    attempt. There is no jitter and no cap on the delay.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt index."""
        return self.base_delay_ms * (2**attempt) / 1000

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        Invoke fn, retrying retryable LLMErrors.

        Raises:
            LLMError: The first non-retryable error, or the last error once
                attempts are exhausted.
        """
        last_error: LLMError | None = None

        for attempt in range(self.max_attempts):
            try:
                return fn(*args, **kwargs)
            except LLMError as e:
                last_error = e

                if not e.retryable:
                    logger.error(f"LLM call rejected ({e.kind.value}), not retrying: {e}")
                    raise

                if attempt == self.max_attempts - 1:
                    break

                delay = self.delay_for(attempt)
                logger.warning(
                    f"LLM call failed (attempt {attempt + 1}/{self.max_attempts}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                self._sleep(delay)

        logger.error(f"LLM call failed after {self.max_attempts} attempts: {last_error}")
        raise last_error


def call_with_retry(
    client: LLMClient,
    messages: list[ChatMessage],
    policy: RetryPolicy | None = None,
) -> LLMResponse:
    """
    Send a chat request through a retry policy.

    Args:
        client: The language model client.
        messages: The conversation to send.
        policy: Retry policy (defaults to RetryPolicy()).

    Returns:
        The model's reply.
    """
    policy = policy or RetryPolicy()
    return policy.call(client.chat, messages)
