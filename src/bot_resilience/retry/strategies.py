"""
Retry-after extraction strategies.

Bot API clients surface a server-mandated wait in different places
depending on the client library and its version. Each strategy knows one
wrapping convention and implements the same small protocol; the runners
try them in order and the first one whose container is present decides.

Strategy chain (Telegram):
    1. TopLevelParametersStrategy: err.parameters.retry_after
    2. ResponseParametersStrategy: err.response.parameters.retry_after
    3. NestedErrorParametersStrategy: err.error.parameters.retry_after

Discord:
    DiscordRateLimitStrategy: DiscordRateLimitError.retry_after

All values are seconds; `first_retry_after_ms` converts to milliseconds.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from bot_resilience.exceptions import DiscordRateLimitError

_MISSING = object()


def _member(obj: Any, name: str) -> Any:
    """Read `name` from a mapping key or an attribute, else _MISSING."""
    if obj is None:
        return _MISSING
    if isinstance(obj, Mapping):
        return obj.get(name, _MISSING)
    return getattr(obj, name, _MISSING)


def _is_container(value: Any) -> bool:
    return value is not _MISSING and value is not None and not isinstance(value, (str, bytes, int, float))


def _as_seconds(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


class RetryAfterStrategy(Protocol):
    """
    Protocol for retry-after extraction.

    `applies` tells whether the error uses this strategy's wrapping
    convention; `try_extract_retry_after` returns the mandated wait in
    seconds, or None when the value is absent or not a finite number.
    """

    name: str

    def applies(self, err: Any) -> bool:
        ...

    def try_extract_retry_after(self, err: Any) -> float | None:
        ...


class _ParametersPathStrategy:
    """Follows `path` down to a `parameters` object holding `retry_after`."""

    path: tuple[str, ...] = ()
    name = "parameters"

    def _parameters(self, err: Any) -> Any:
        current = err
        for part in self.path:
            current = _member(current, part)
            if not _is_container(current):
                return _MISSING
        parameters = _member(current, "parameters")
        return parameters if _is_container(parameters) else _MISSING

    def applies(self, err: Any) -> bool:
        return self._parameters(err) is not _MISSING

    def try_extract_retry_after(self, err: Any) -> float | None:
        parameters = self._parameters(err)
        if parameters is _MISSING:
            return None
        return _as_seconds(_member(parameters, "retry_after"))


class TopLevelParametersStrategy(_ParametersPathStrategy):
    """`err.parameters.retry_after` (Bot API error raised directly)."""

    path = ()
    name = "parameters"


class ResponseParametersStrategy(_ParametersPathStrategy):
    """`err.response.parameters.retry_after` (error wrapping the raw response)."""

    path = ("response",)
    name = "response.parameters"


class NestedErrorParametersStrategy(_ParametersPathStrategy):
    """`err.error.parameters.retry_after` (error wrapping another error)."""

    path = ("error",)
    name = "error.parameters"


class DiscordRateLimitStrategy:
    """Reads `retry_after` off a DiscordRateLimitError."""

    name = "discord.rate_limit"

    def applies(self, err: Any) -> bool:
        return isinstance(err, DiscordRateLimitError)

    def try_extract_retry_after(self, err: Any) -> float | None:
        if not isinstance(err, DiscordRateLimitError):
            return None
        return _as_seconds(err.retry_after)


TELEGRAM_RETRY_AFTER_STRATEGIES: tuple[RetryAfterStrategy, ...] = (
    TopLevelParametersStrategy(),
    ResponseParametersStrategy(),
    NestedErrorParametersStrategy(),
)

DISCORD_RETRY_AFTER_STRATEGIES: tuple[RetryAfterStrategy, ...] = (
    DiscordRateLimitStrategy(),
)


def first_retry_after_ms(
    err: Any, strategies: Sequence[RetryAfterStrategy]
) -> float | None:
    """
    Return the mandated wait in milliseconds, or None to use backoff.

    The first applicable strategy decides, even when its value turns out
    to be unusable; later strategies are only consulted when earlier
    wrapping conventions are absent altogether.
    """
    if err is None:
        return None
    for strategy in strategies:
        if strategy.applies(err):
            seconds = strategy.try_extract_retry_after(err)
            return seconds * 1000 if seconds is not None else None
    return None
