"""Custom Prometheus metrics for the resilience layer.

These metrics are registered on the default prometheus_client registry and
are exposed by whatever process embeds this package. Alert rules should be
configured for:
- channel_retries_total (high retry rate indicates an unstable upstream API)
- channel_api_errors_total (failures that escaped the retry runners)
"""

from prometheus_client import Counter

# === Retry Metrics ===

channel_retries_total = Counter(
    "channel_retries_total",
    "Total retries scheduled by channel retry runners",
    ["channel"],
)
"""
Retries scheduled by the channel retry runners.

Labels:
- channel: discord, telegram

Alert thresholds:
- WARN: retry rate > 10% of total API calls
- CRITICAL: retry rate > 30% of total API calls
"""

# === API Error Metrics ===

channel_api_errors_total = Counter(
    "channel_api_errors_total",
    "Total Bot API call failures observed by the logging wrapper",
    ["channel", "operation"],
)
"""
Bot API failures seen by with_api_error_logging, logged or not.

Labels:
- channel: discord, telegram
- operation: Bot API method name (sendMessage, editMessageText, getUpdates, ...)
"""
