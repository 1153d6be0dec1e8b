"""
Retry engine, backoff and channel retry runners.

Main Components:
    - retry_async: Attempt loop with backoff, rate-limit waits and hooks
    - compute_delay: Capped exponential backoff with jitter
    - resolve_retry_config: Layered config merge (call site > channel > default)
    - RetryAfterStrategy: Protocol for extracting server-mandated waits
    - create_discord_retry_runner / create_telegram_retry_runner: Channel runners

Usage:
    >>> from bot_resilience.retry import create_telegram_retry_runner
    >>> retry = create_telegram_retry_runner(verbose=True)
    >>> message = await retry(lambda: bot.send_message(chat_id, text), "sendMessage")
"""

from bot_resilience.retry.backoff import compute_delay
from bot_resilience.retry.config import RetryConfig, RetryOverrides, resolve_retry_config
from bot_resilience.retry.engine import RetryAttemptInfo, RetryOptions, retry_async
from bot_resilience.retry.policy import (
    DISCORD_RETRY_DEFAULTS,
    TELEGRAM_RETRY_DEFAULTS,
    RetryRunner,
    create_discord_retry_runner,
    create_retry_runner_from_settings,
    create_telegram_retry_runner,
)
from bot_resilience.retry.strategies import (
    DiscordRateLimitStrategy,
    NestedErrorParametersStrategy,
    ResponseParametersStrategy,
    RetryAfterStrategy,
    TopLevelParametersStrategy,
)

__all__ = [
    "compute_delay",
    "RetryConfig",
    "RetryOverrides",
    "resolve_retry_config",
    "RetryAttemptInfo",
    "RetryOptions",
    "retry_async",
    "DISCORD_RETRY_DEFAULTS",
    "TELEGRAM_RETRY_DEFAULTS",
    "RetryRunner",
    "create_discord_retry_runner",
    "create_telegram_retry_runner",
    "create_retry_runner_from_settings",
    "RetryAfterStrategy",
    "TopLevelParametersStrategy",
    "ResponseParametersStrategy",
    "NestedErrorParametersStrategy",
    "DiscordRateLimitStrategy",
]
