"""Network error classification for Bot API transports."""

from bot_resilience.network.classifier import (
    NetworkErrorContext,
    collect_error_candidates,
    is_recoverable_network_error,
)

__all__ = [
    "NetworkErrorContext",
    "collect_error_candidates",
    "is_recoverable_network_error",
]
