"""
Retry configuration and layered resolution.

A resolved RetryConfig is produced by merging a hardcoded per-channel
default with zero or more partial overrides. Precedence, lowest first:

    hardcoded default < channel config (channels.<name>.retry) < call site

Each override replaces only the fields it actually sets; `None` leaves
the accumulated value untouched.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class RetryConfig:
    """
    Effective retry configuration.

    Attributes:
        attempts: Total invocations of the operation (attempts - 1 retries)
        min_delay_ms: Base delay for the first retry, doubled thereafter
        max_delay_ms: Cap applied to the exponential delay
        jitter: Multiplicative jitter fraction in [0, 1]
    """

    attempts: int
    min_delay_ms: int
    max_delay_ms: int
    jitter: float


class RetryOverrides(BaseModel):
    """Partial retry settings as found in channel config or at a call site."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    attempts: float | None = None
    min_delay_ms: float | None = Field(default=None, alias="minDelayMs")
    max_delay_ms: float | None = Field(default=None, alias="maxDelayMs")
    jitter: float | None = None


RetryOverridesLike = RetryOverrides | Mapping[str, Any] | None


def coerce_overrides(value: RetryOverridesLike) -> RetryOverrides | None:
    """Accept a RetryOverrides, a plain mapping (either key style) or None."""
    if value is None or isinstance(value, RetryOverrides):
        return value
    return RetryOverrides.model_validate(dict(value))


def _pick(override: float | None, current: float) -> float:
    if override is None or not math.isfinite(override):
        return current
    return override


def resolve_retry_config(defaults: RetryConfig, *overrides: RetryOverridesLike) -> RetryConfig:
    """
    Merge `overrides` onto `defaults`, left to right, field by field.

    The merged values are normalized rather than rejected: attempts is at
    least 1, delays are non-negative integers with max >= min, and jitter
    is clamped to [0, 1].

    Args:
        defaults: Fully populated base configuration
        *overrides: Partial overrides, later ones winning

    Returns:
        Resolved, immutable RetryConfig
    """
    attempts: float = defaults.attempts
    min_delay: float = defaults.min_delay_ms
    max_delay: float = defaults.max_delay_ms
    jitter: float = defaults.jitter

    for raw in overrides:
        layer = coerce_overrides(raw)
        if layer is None:
            continue
        attempts = _pick(layer.attempts, attempts)
        min_delay = _pick(layer.min_delay_ms, min_delay)
        max_delay = _pick(layer.max_delay_ms, max_delay)
        jitter = _pick(layer.jitter, jitter)

    resolved_min = max(0, round(min_delay))
    return RetryConfig(
        attempts=max(1, round(attempts)),
        min_delay_ms=resolved_min,
        max_delay_ms=max(resolved_min, round(max_delay)),
        jitter=min(1.0, max(0.0, float(jitter))),
    )
