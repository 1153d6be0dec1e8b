"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest
from prometheus_client import REGISTRY

from bot_resilience.config import Settings
from bot_resilience.retry.config import RetryConfig


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records requested waits."""

    def __init__(self) -> None:
        self.delays_ms: list[int] = []

    async def __call__(self, seconds: float) -> None:
        self.delays_ms.append(round(seconds * 1000))


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Fake sleep; inject via `sleep=` so no test waits in real time.

    Usage:
        async def test_something(sleep_recorder):
            await retry_async(op, RetryOptions(config=cfg, sleep=sleep_recorder))
            assert sleep_recorder.delays_ms == [400, 800]
    """
    return SleepRecorder()


@pytest.fixture
def deterministic_config() -> RetryConfig:
    """Telegram-like defaults with jitter disabled."""
    return RetryConfig(attempts=3, min_delay_ms=400, max_delay_ms=30_000, jitter=0.0)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with explicit channel retry sections.

    Override specific values in individual tests as needed:
        def test_something(test_settings):
            test_settings.channels.telegram.retry = RetryOverrides(attempts=1)
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        channels={
            "discord": {"retry": {"attempts": 4, "jitter": 0}},
            "telegram": {"retry": {"attempts": 2, "minDelayMs": 100, "jitter": 0}},
        },
    )


@pytest.fixture
def metric_value():
    """Read a sample from the default Prometheus registry (0.0 when unset).

    Usage:
        before = metric_value("channel_retries_total", channel="telegram")
    """
    def _read(name: str, **labels: str) -> float:
        value = REGISTRY.get_sample_value(name, labels)
        return value if value is not None else 0.0

    return _read
