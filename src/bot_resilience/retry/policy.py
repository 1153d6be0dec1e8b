"""
Channel-specific retry runners for Discord and Telegram.

A retry runner wraps Bot API calls with exponential backoff, jitter and
rate-limit awareness. Runners are built once per channel and reused for
every call; each call gets its own attempt counter.

- Discord: only rate-limit errors are retried, waiting the mandated
  `retry_after`; everything else fails fast.
- Telegram: errors whose message looks like a rate limit, timeout or
  connection problem are retried (optionally widened by a caller
  predicate), honoring `parameters.retry_after` wherever the client
  library put it.

Usage:
    retry = create_telegram_retry_runner(config_retry=settings.channels.telegram.retry, verbose=True)
    message = await retry(lambda: bot.send_message(chat_id, text), "sendMessage")
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import structlog

from bot_resilience.errors import format_error_message
from bot_resilience.exceptions import DiscordRateLimitError
from bot_resilience.monitoring.metrics import channel_retries_total
from bot_resilience.retry.config import RetryConfig, RetryOverridesLike, resolve_retry_config
from bot_resilience.retry.engine import RetryAttemptInfo, RetryOptions, SleepFn, retry_async
from bot_resilience.retry.strategies import (
    DISCORD_RETRY_AFTER_STRATEGIES,
    TELEGRAM_RETRY_AFTER_STRATEGIES,
    first_retry_after_ms,
)

if TYPE_CHECKING:
    from bot_resilience.config import Settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DISCORD_RETRY_DEFAULTS = RetryConfig(
    attempts=3,
    min_delay_ms=500,
    max_delay_ms=30_000,
    jitter=0.1,
)

# Telegram rate limits are typically shorter, hence the lower base delay
TELEGRAM_RETRY_DEFAULTS = RetryConfig(
    attempts=3,
    min_delay_ms=400,
    max_delay_ms=30_000,
    jitter=0.1,
)

# Narrower than the network classifier's snippets; used for user-facing sends
TELEGRAM_RETRY_PATTERN = re.compile(
    r"429|timeout|connect|reset|closed|unavailable|temporarily", re.IGNORECASE
)


class RetryRunner(Protocol):
    """Wraps a zero-argument coroutine factory with retry behavior."""

    async def __call__(
        self, operation: Callable[[], Awaitable[T]], label: str | None = None
    ) -> T:
        ...


def format_retry_line(channel: str, info: RetryAttemptInfo) -> str:
    """Single operator-facing line describing a scheduled retry."""
    max_retries = max(1, info.max_attempts - 1)
    line = (
        f"{channel} {info.label or 'request'} retry "
        f"{info.attempt}/{max_retries} in {info.delay_ms}ms"
    )
    message = format_error_message(info.err)
    return f"{line}: {message}" if message else line


def _observer(channel: str, verbose: bool) -> Callable[[RetryAttemptInfo], None]:
    def on_retry(info: RetryAttemptInfo) -> None:
        channel_retries_total.labels(channel=channel).inc()
        if not verbose:
            return
        try:
            logger.warning(
                format_retry_line(channel, info),
                channel=channel,
                attempt=info.attempt,
                delay_ms=info.delay_ms,
            )
        except Exception as log_err:
            # a broken sink must not abort the retry sequence
            logger.debug(
                "Retry line could not be logged",
                channel=channel,
                error_type=type(log_err).__name__,
            )

    return on_retry


def _build_runner(
    *,
    config: RetryConfig,
    should_retry: Callable[[BaseException], bool],
    retry_after_ms: Callable[[BaseException], float | None],
    on_retry: Callable[[RetryAttemptInfo], Any],
    sleep: SleepFn | None,
    cancel_event: asyncio.Event | None,
) -> RetryRunner:
    async def run(operation: Callable[[], Awaitable[T]], label: str | None = None) -> T:
        extra = {"sleep": sleep} if sleep is not None else {}
        options = RetryOptions(
            config=config,
            should_retry=should_retry,
            retry_after_ms=retry_after_ms,
            on_retry=on_retry,
            label=label,
            cancel_event=cancel_event,
            **extra,
        )
        return await retry_async(operation, options)

    return run


def _is_discord_rate_limit(err: BaseException) -> bool:
    return isinstance(err, DiscordRateLimitError)


def _discord_retry_after_ms(err: BaseException) -> float | None:
    return first_retry_after_ms(err, DISCORD_RETRY_AFTER_STRATEGIES)


def telegram_retry_after_ms(err: Any) -> float | None:
    """Mandated Telegram wait in ms from any known nesting, else None."""
    return first_retry_after_ms(err, TELEGRAM_RETRY_AFTER_STRATEGIES)


def matches_telegram_retry_pattern(err: Any) -> bool:
    return TELEGRAM_RETRY_PATTERN.search(format_error_message(err)) is not None


def create_discord_retry_runner(
    *,
    retry: RetryOverridesLike = None,
    config_retry: RetryOverridesLike = None,
    verbose: bool = False,
    sleep: SleepFn | None = None,
    cancel_event: asyncio.Event | None = None,
) -> RetryRunner:
    """
    Create a retry runner for Discord API calls.

    Args:
        retry: Call-site overrides (highest precedence)
        config_retry: Channel config overrides (channels.discord.retry)
        verbose: Log one warning line per retry
        sleep: Awaitable sleep override (tests)
        cancel_event: Event aborting pending retries when set

    Returns:
        A retry runner that retries rate-limit errors only
    """
    config = resolve_retry_config(DISCORD_RETRY_DEFAULTS, config_retry, retry)
    logger.debug("Discord retry runner created", config=asdict(config), verbose=verbose)
    return _build_runner(
        config=config,
        should_retry=_is_discord_rate_limit,
        retry_after_ms=_discord_retry_after_ms,
        on_retry=_observer("discord", verbose),
        sleep=sleep,
        cancel_event=cancel_event,
    )


def create_telegram_retry_runner(
    *,
    retry: RetryOverridesLike = None,
    config_retry: RetryOverridesLike = None,
    verbose: bool = False,
    should_retry: Callable[[BaseException], bool] | None = None,
    sleep: SleepFn | None = None,
    cancel_event: asyncio.Event | None = None,
) -> RetryRunner:
    """
    Create a retry runner for Telegram Bot API calls.

    Retries 429 rate limits (respecting retry_after), network timeouts,
    connection resets and temporary unavailability.

    Args:
        retry: Call-site overrides (highest precedence)
        config_retry: Channel config overrides (channels.telegram.retry)
        verbose: Log one warning line per retry
        should_retry: Extra predicate, OR-ed with the message pattern
        sleep: Awaitable sleep override (tests)
        cancel_event: Event aborting pending retries when set

    Returns:
        A retry runner for Telegram API calls
    """
    config = resolve_retry_config(TELEGRAM_RETRY_DEFAULTS, config_retry, retry)

    if should_retry is not None:
        custom = should_retry

        def predicate(err: BaseException) -> bool:
            return bool(custom(err)) or matches_telegram_retry_pattern(err)
    else:
        predicate = matches_telegram_retry_pattern

    logger.debug("Telegram retry runner created", config=asdict(config), verbose=verbose)
    return _build_runner(
        config=config,
        should_retry=predicate,
        retry_after_ms=telegram_retry_after_ms,
        on_retry=_observer("telegram", verbose),
        sleep=sleep,
        cancel_event=cancel_event,
    )


def create_retry_runner_from_settings(
    channel: str, settings: "Settings | None" = None, **kwargs: Any
) -> RetryRunner:
    """
    Build the runner for `channel` using `channels.<channel>.retry` as the
    channel-config layer. Extra keyword arguments go to the factory.
    """
    if settings is None:
        from bot_resilience.config import settings as default_settings

        settings = default_settings

    if channel == "discord":
        factory = create_discord_retry_runner
        channel_config = settings.channels.discord
    elif channel == "telegram":
        factory = create_telegram_retry_runner
        channel_config = settings.channels.telegram
    else:
        raise ValueError(f"Unknown channel: {channel!r}")

    return factory(config_retry=channel_config.retry, **kwargs)
