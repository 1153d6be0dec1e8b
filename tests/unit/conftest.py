"""Unit test fixtures (mocks and stubs).

Provides error shapes and operation stubs for testing without a network.
"""

import errno
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from bot_resilience.exceptions import DiscordRateLimitError, TelegramApiError


class CodedError(Exception):
    """Error carrying a system-style string `code`, as socket layers raise."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


@pytest.fixture
def coded_error():
    """Factory fixture for errors carrying a `code` attribute."""
    def _create(code: str = "ECONNRESET", message: str = "read failed") -> CodedError:
        return CodedError(message, code)

    return _create


@pytest.fixture
def connection_reset() -> ConnectionResetError:
    return ConnectionResetError(errno.ECONNRESET, "Connection reset by peer")


@pytest.fixture
def telegram_rate_limit() -> TelegramApiError:
    """429 as raised directly by a Bot API client (top-level parameters)."""
    return TelegramApiError(
        "Too Many Requests: retry after 2",
        error_code=429,
        parameters={"retry_after": 2},
    )


@pytest.fixture
def telegram_chat_not_found() -> TelegramApiError:
    return TelegramApiError("Bad Request: chat not found", error_code=400)


@pytest.fixture
def discord_rate_limit() -> DiscordRateLimitError:
    return DiscordRateLimitError(retry_after=2)


@pytest.fixture
def failing_operation():
    """Factory fixture: AsyncMock raising each of `errors` in turn, then returning `result`.

    Usage:
        op = failing_operation([err1, err2], result="ok")
    """
    def _create(errors: list[BaseException], result=None) -> AsyncMock:
        side_effect = list(errors)
        if result is not None:
            side_effect.append(result)
        return AsyncMock(side_effect=side_effect)

    return _create


@pytest.fixture
def mock_runtime() -> SimpleNamespace:
    """Host runtime exposing an `error` sink."""
    return SimpleNamespace(error=Mock())
