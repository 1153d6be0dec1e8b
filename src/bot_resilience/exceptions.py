"""
Custom exceptions for the resilience layer.

The channel errors model the error shapes produced by the Bot API clients
that the retry runners consume. RetryCancelledError is the only error the
retry engine ever raises on its own; every other failure is propagated
exactly as the wrapped operation raised it.
"""

from typing import Any


class ChannelError(Exception):
    """
    Base exception for chat channel API errors.

    All channel-specific exceptions inherit from this to allow catching
    any Bot API error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DiscordRateLimitError(ChannelError):
    """
    Raised when the Discord gateway rate-limits a request.

    Carries the server-mandated wait in seconds. The Discord retry runner
    retries only this error kind and waits at least `retry_after`.
    """
    def __init__(
        self,
        message: str = "You are being rate limited.",
        retry_after: float = 0.0,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.retry_after = retry_after


class TelegramApiError(ChannelError):
    """
    Raised when the Telegram Bot API answers with `ok: false`.

    `parameters` mirrors the Bot API `ResponseParameters` object and may
    carry `retry_after` (seconds) for 429 responses.
    """
    def __init__(
        self,
        description: str,
        error_code: int | None = None,
        parameters: dict[str, Any] | None = None,
        details: dict | None = None,
    ):
        message = f"Call failed! ({error_code}: {description})" if error_code else description
        super().__init__(message, details)
        self.description = description
        self.error_code = error_code
        self.parameters = parameters or {}


class RetryCancelledError(Exception):
    """
    Raised when a retry sequence is cancelled through its cancel event.

    Distinct from the operational error that triggered the retry; that
    error is available as `last_error` and as `__cause__`.

    Attributes:
        last_error: Most recent error raised by the operation (if any)
        attempts: Number of operation invocations made before cancellation
    """

    def __init__(self, last_error: BaseException | None, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Retry cancelled after {attempts} attempt(s)"
            + (f"; last error: {type(last_error).__name__}" if last_error else "")
        )
