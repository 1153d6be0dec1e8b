"""Exponential backoff with multiplicative jitter."""

import math
import random
from collections.abc import Callable


def compute_delay(
    base_delay_ms: float,
    attempt_index: int,
    max_delay_ms: float,
    jitter: float,
    *,
    rng: Callable[[], float] = random.random,
) -> int:
    """
    Compute the wait before the next retry, in milliseconds.

    The capped exponential value is `min(base * 2**attempt_index, max)`;
    attempt_index is 0 for the first retry. Jitter scales it by a factor
    drawn uniformly from [1 - jitter, 1 + jitter).

    Args:
        base_delay_ms: Delay for the first retry
        attempt_index: 0-based retry index
        max_delay_ms: Upper bound for the un-jittered delay
        jitter: Jitter fraction (0 disables randomization)
        rng: Uniform source in [0, 1)

    Returns:
        Non-negative integer delay in milliseconds
    """
    # exponent capped so the float product cannot overflow
    raw = min(base_delay_ms * (2 ** min(attempt_index, 64)), max_delay_ms)
    if jitter:
        raw = raw * (1 + (rng() - 0.5) * 2 * jitter)
    return max(0, math.floor(raw))
