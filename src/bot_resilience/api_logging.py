"""
Bot API call error logging.

Wraps a Bot API call so that failures are logged once with the operation
name for context, then re-raised unchanged. Retry decisions belong to the
retry runners; this wrapper only observes.

Error handling flow:
    1. with_api_error_logging (this module): logs API errors with context
    2. handler try/except: handler-level errors
    3. application error hook: anything that escaped middleware
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import structlog

from bot_resilience.errors import format_error_message
from bot_resilience.monitoring.metrics import channel_api_errors_total

T = TypeVar("T")

ApiLogger = Callable[[str], Any]


class RuntimeEnv(Protocol):
    """Host runtime exposing an operator-facing error sink."""

    def error(self, message: str) -> Any:
        ...


def _fallback_logger(channel: str) -> Any:
    return structlog.get_logger(__name__).bind(subsystem=f"{channel}/api")


def resolve_api_logger(
    channel: str, runtime: RuntimeEnv | None = None, logger: ApiLogger | None = None
) -> ApiLogger:
    """Explicit logger, else the runtime's error sink, else the subsystem logger."""
    if logger is not None:
        return logger
    runtime_error = getattr(runtime, "error", None) if runtime is not None else None
    if callable(runtime_error):
        return runtime_error
    fallback = _fallback_logger(channel)
    return lambda message: fallback.error(message)


async def with_api_error_logging(
    *,
    operation: str,
    fn: Callable[[], Awaitable[T]],
    logger: ApiLogger | None = None,
    runtime: RuntimeEnv | None = None,
    should_log: Callable[[BaseException], bool] | None = None,
    channel: str = "telegram",
) -> T:
    """
    Run a Bot API call and log its failure with operation context.

    Example:
        await with_api_error_logging(
            operation="sendMessage",
            fn=lambda: bot.send_message(chat_id, text),
            runtime=runtime,
            should_log=lambda err: not is_chat_not_found(err),
        )

    Args:
        operation: Bot API method name (e.g. "sendMessage")
        fn: Zero-argument callable returning the call's awaitable
        logger: Optional callable receiving the formatted line
        runtime: Optional host runtime whose `error` sink is used
        should_log: Optional filter for expected/ignorable errors
        channel: Channel name used in the line and metrics

    Returns:
        The result of `fn()`

    Raises:
        Exception: The original error, always, after logging
    """
    try:
        return await fn()
    except Exception as err:
        channel_api_errors_total.labels(channel=channel, operation=operation).inc()
        _log_failure(channel, operation, err, logger, runtime, should_log)
        raise


def _log_failure(
    channel: str,
    operation: str,
    err: Exception,
    logger: ApiLogger | None,
    runtime: RuntimeEnv | None,
    should_log: Callable[[BaseException], bool] | None,
) -> None:
    # never let a broken filter or sink mask the API error
    try:
        if should_log is not None and not should_log(err):
            return
    except Exception as filter_err:
        _fallback_logger(channel).warning(
            "should_log filter failed, logging anyway",
            operation=operation,
            filter_error=format_error_message(filter_err),
        )

    line = f"{channel} {operation} failed: {format_error_message(err)}"
    try:
        resolve_api_logger(channel, runtime, logger)(line)
    except Exception as log_err:
        _fallback_logger(channel).error(
            line,
            logger_error=format_error_message(log_err),
        )
