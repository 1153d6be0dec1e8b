"""
Unit tests for retry config resolution.
"""

import dataclasses
import math

import pytest

from bot_resilience.retry.config import RetryConfig, RetryOverrides, resolve_retry_config

DEFAULTS = RetryConfig(attempts=3, min_delay_ms=400, max_delay_ms=30_000, jitter=0.1)


def test_no_overrides_returns_defaults():
    assert resolve_retry_config(DEFAULTS) == DEFAULTS


def test_later_layers_win_field_by_field():
    """call site > channel config > hardcoded default."""
    resolved = resolve_retry_config(
        DEFAULTS,
        RetryOverrides(attempts=5),
        RetryOverrides(min_delay_ms=100),
    )
    assert resolved == RetryConfig(
        attempts=5,
        min_delay_ms=100,
        max_delay_ms=DEFAULTS.max_delay_ms,
        jitter=DEFAULTS.jitter,
    )


def test_call_site_overrides_channel_config():
    resolved = resolve_retry_config(DEFAULTS, {"attempts": 5}, {"attempts": 2})
    assert resolved.attempts == 2


def test_none_layers_and_fields_are_skipped():
    resolved = resolve_retry_config(
        DEFAULTS, None, RetryOverrides(attempts=None, jitter=0.0), None
    )
    assert resolved.attempts == 3
    assert resolved.jitter == 0.0


def test_mapping_accepts_camel_case_and_snake_case():
    camel = resolve_retry_config(DEFAULTS, {"minDelayMs": 250, "maxDelayMs": 5000})
    snake = resolve_retry_config(DEFAULTS, {"min_delay_ms": 250, "max_delay_ms": 5000})
    assert camel == snake
    assert (camel.min_delay_ms, camel.max_delay_ms) == (250, 5000)


def test_unknown_keys_are_ignored():
    resolved = resolve_retry_config(DEFAULTS, {"attempts": 4, "backoff": "linear"})
    assert resolved.attempts == 4


@pytest.mark.parametrize(
    "override, field, expected",
    [
        ({"attempts": 0}, "attempts", 1),
        ({"attempts": -3}, "attempts", 1),
        ({"attempts": 2.6}, "attempts", 3),
        ({"minDelayMs": -50}, "min_delay_ms", 0),
        ({"jitter": 2.5}, "jitter", 1.0),
        ({"jitter": -0.5}, "jitter", 0.0),
    ],
)
def test_values_are_normalized(override, field, expected):
    assert getattr(resolve_retry_config(DEFAULTS, override), field) == expected


def test_max_delay_never_below_min_delay():
    resolved = resolve_retry_config(DEFAULTS, {"minDelayMs": 5000, "maxDelayMs": 1000})
    assert resolved.min_delay_ms == 5000
    assert resolved.max_delay_ms == 5000


def test_non_finite_values_fall_back_to_prior_layer():
    resolved = resolve_retry_config(
        DEFAULTS, {"attempts": 6}, {"attempts": math.inf, "maxDelayMs": math.nan}
    )
    assert resolved.attempts == 6
    assert resolved.max_delay_ms == DEFAULTS.max_delay_ms


def test_resolved_config_is_immutable():
    resolved = resolve_retry_config(DEFAULTS, {"attempts": 4})
    with pytest.raises(dataclasses.FrozenInstanceError):
        resolved.attempts = 10
