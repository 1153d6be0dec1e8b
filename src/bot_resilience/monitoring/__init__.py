"""Monitoring and metrics instrumentation for the resilience layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from bot_resilience.monitoring.metrics import (
    channel_api_errors_total,
    channel_retries_total,
)

__all__ = [
    "channel_retries_total",
    "channel_api_errors_total",
]
