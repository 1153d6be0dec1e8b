"""
Retry execution engine.

Runs a caller-supplied coroutine factory until it succeeds, the retry
predicate rejects the error, or the attempt budget is exhausted:

    Attempting -> (success) Succeeded
    Attempting -> (failure) Deciding -> (give up) Failed: original error re-raised
                                     -> (retry) Waiting -> Attempting

The wait is the rate-limit-mandated delay when the error carries one,
otherwise the jittered exponential backoff. The engine never wraps or
replaces the operation's error; the only error it raises itself is
RetryCancelledError, when the optional cancel event fires.

Usage:
    options = RetryOptions(config=config, should_retry=is_transient, label="sendMessage")
    message = await retry_async(lambda: api.send_message(chat_id, text), options)
"""

import asyncio
import inspect
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog

from bot_resilience.exceptions import RetryCancelledError
from bot_resilience.retry.backoff import compute_delay
from bot_resilience.retry.config import RetryConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryAttemptInfo:
    """
    Snapshot handed to the `on_retry` hook before each wait.

    Attributes:
        attempt: 1-based retry count (1 for the first retry)
        max_attempts: Configured total attempts
        delay_ms: Wait about to be applied
        label: Diagnostic label of the operation
        err: Error that triggered this retry
    """

    attempt: int
    max_attempts: int
    delay_ms: int
    label: str | None
    err: BaseException


def _always_retry(err: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryOptions:
    """
    Per-sequence retry options.

    Attributes:
        config: Resolved retry configuration
        should_retry: Predicate deciding whether an error is worth retrying
        retry_after_ms: Optional extractor of a server-mandated wait (ms)
        on_retry: Optional observer, sync or async, called before each wait
        label: Optional diagnostic label
        cancel_event: Optional event aborting the sequence when set
        sleep: Awaitable sleep taking seconds (injectable for tests)
    """

    config: RetryConfig
    should_retry: Callable[[BaseException], bool] = _always_retry
    retry_after_ms: Callable[[BaseException], float | None] | None = None
    on_retry: Callable[[RetryAttemptInfo], Any] | None = None
    label: str | None = None
    cancel_event: asyncio.Event | None = None
    sleep: SleepFn = asyncio.sleep


def _resolve_delay_ms(err: BaseException, attempt: int, options: RetryOptions) -> int:
    config = options.config
    if options.retry_after_ms is not None:
        mandated = options.retry_after_ms(err)
        if (
            isinstance(mandated, (int, float))
            and not isinstance(mandated, bool)
            and math.isfinite(mandated)
        ):
            return max(config.min_delay_ms, math.ceil(mandated))
    return compute_delay(config.min_delay_ms, attempt - 1, config.max_delay_ms, config.jitter)


async def _wait(delay_ms: int, options: RetryOptions) -> bool:
    """Suspend for `delay_ms`; return True if the cancel event fired first."""
    if options.cancel_event is None:
        await options.sleep(delay_ms / 1000)
        return False

    sleeper = asyncio.ensure_future(options.sleep(delay_ms / 1000))
    canceller = asyncio.ensure_future(options.cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {sleeper, canceller}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (sleeper, canceller):
            if not task.done():
                task.cancel()
    return canceller in done


async def retry_async(operation: Callable[[], Awaitable[T]], options: RetryOptions) -> T:
    """
    Invoke `operation` with retries.

    Args:
        operation: Zero-argument callable returning an awaitable
        options: Retry options (config, predicate, hooks)

    Returns:
        The operation's result from the first successful attempt

    Raises:
        Exception: The operation's most recent error, unchanged, once the
            predicate rejects it or the attempt budget is spent
        RetryCancelledError: The cancel event was set before an attempt
            or during a wait
    """
    max_attempts = max(1, options.config.attempts)
    attempt = 1
    last_error: BaseException | None = None

    while True:
        if options.cancel_event is not None and options.cancel_event.is_set():
            raise RetryCancelledError(last_error, attempt - 1) from last_error

        try:
            return await operation()
        except Exception as err:
            last_error = err
            if attempt >= max_attempts:
                if max_attempts > 1:
                    logger.warning(
                        "Retry budget exhausted",
                        label=options.label,
                        attempts=attempt,
                        error_type=type(err).__name__,
                    )
                raise
            if not options.should_retry(err):
                logger.debug(
                    "Error not retryable, failing fast",
                    label=options.label,
                    attempt=attempt,
                    error_type=type(err).__name__,
                )
                raise
            delay_ms = _resolve_delay_ms(err, attempt, options)

        logger.debug(
            "Scheduling retry",
            label=options.label,
            attempt=attempt,
            max_attempts=max_attempts,
            delay_ms=delay_ms,
        )
        if options.on_retry is not None:
            result = options.on_retry(
                RetryAttemptInfo(
                    attempt=attempt,
                    max_attempts=max_attempts,
                    delay_ms=delay_ms,
                    label=options.label,
                    err=last_error,
                )
            )
            if inspect.isawaitable(result):
                await result

        if await _wait(delay_ms, options):
            raise RetryCancelledError(last_error, attempt) from last_error
        attempt += 1
