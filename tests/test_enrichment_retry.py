"""Tests for the language model retry policy."""

from unittest.mock import MagicMock

import pytest

from wine_concierge.enrichment.retry import RetryPolicy, call_with_retry
from wine_concierge.services.ai.client import (
    ChatMessage,
    LLMError,
    LLMErrorKind,
    LLMResponse,
)


def _response(text: str = "{}") -> LLMResponse:
    return LLMResponse(content=text, model="test-model")


class TestRetryPolicy:
    """Tests for RetryPolicy.call."""

    def test_success_first_attempt(self) -> None:
        sleeps: list[float] = []
        policy = RetryPolicy(max_attempts=3, base_delay_ms=1000, sleep=sleeps.append)
        fn = MagicMock(return_value="ok")

        assert policy.call(fn, "a", key="b") == "ok"
        fn.assert_called_once_with("a", key="b")
        assert sleeps == []

    def test_exponential_backoff_then_success(self) -> None:
        """Two server errors then a reply: delays of 1s and 2s."""
        sleeps: list[float] = []
        policy = RetryPolicy(max_attempts=3, base_delay_ms=1000, sleep=sleeps.append)
        fn = MagicMock(
            side_effect=[
                LLMError("boom", kind=LLMErrorKind.SERVER, status_code=500),
                LLMError("boom", kind=LLMErrorKind.SERVER, status_code=503),
                "ok",
            ]
        )

        assert policy.call(fn) == "ok"
        assert fn.call_count == 3
        assert sleeps == [1.0, 2.0]

    def test_exhausted_raises_last_error(self) -> None:
        sleeps: list[float] = []
        policy = RetryPolicy(max_attempts=3, base_delay_ms=100, sleep=sleeps.append)
        errors = [LLMError(f"fail {i}", kind=LLMErrorKind.TRANSPORT) for i in range(3)]
        fn = MagicMock(side_effect=errors)

        with pytest.raises(LLMError) as exc_info:
            policy.call(fn)

        assert exc_info.value is errors[-1]
        assert fn.call_count == 3
        # No sleep after the final attempt
        assert sleeps == [0.1, 0.2]

    def test_client_error_not_retried(self) -> None:
        sleeps: list[float] = []
        policy = RetryPolicy(max_attempts=3, sleep=sleeps.append)
        fn = MagicMock(side_effect=LLMError("bad key", kind=LLMErrorKind.CLIENT, status_code=401))

        with pytest.raises(LLMError) as exc_info:
            policy.call(fn)

        assert exc_info.value.status_code == 401
        assert fn.call_count == 1
        assert sleeps == []

    def test_rate_limit_is_retried(self) -> None:
        policy = RetryPolicy(max_attempts=2, base_delay_ms=0, sleep=lambda _: None)
        fn = MagicMock(side_effect=[LLMError.from_status("slow down", 429), "ok"])

        assert policy.call(fn) == "ok"
        assert fn.call_count == 2

    def test_other_exceptions_propagate_immediately(self) -> None:
        policy = RetryPolicy(max_attempts=3, sleep=lambda _: None)
        fn = MagicMock(side_effect=RuntimeError("unexpected"))

        with pytest.raises(RuntimeError):
            policy.call(fn)
        assert fn.call_count == 1

    def test_single_attempt(self) -> None:
        sleeps: list[float] = []
        policy = RetryPolicy(max_attempts=1, sleep=sleeps.append)
        fn = MagicMock(side_effect=LLMError("down", kind=LLMErrorKind.SERVER))

        with pytest.raises(LLMError):
            policy.call(fn)
        assert fn.call_count == 1
        assert sleeps == []

    def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_delay_for(self) -> None:
        policy = RetryPolicy(base_delay_ms=500)
        assert [policy.delay_for(k) for k in range(4)] == [0.5, 1.0, 2.0, 4.0]


class TestCallWithRetry:
    """Tests for call_with_retry."""

    def test_passes_messages_to_client(self) -> None:
        client = MagicMock()
        client.chat.return_value = _response('{"ratings": []}')
        messages = [ChatMessage(role="user", content="hi")]

        response = call_with_retry(client, messages, RetryPolicy(sleep=lambda _: None))

        client.chat.assert_called_once_with(messages)
        assert response.content == '{"ratings": []}'

    def test_retries_empty_reply(self) -> None:
        client = MagicMock()
        client.chat.side_effect = [LLMError("empty", kind=LLMErrorKind.EMPTY), _response()]

        response = call_with_retry(client, [], RetryPolicy(sleep=lambda _: None))

        assert response.content == "{}"
        assert client.chat.call_count == 2
