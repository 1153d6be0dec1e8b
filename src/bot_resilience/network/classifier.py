"""
Network error classification.

Decides whether a raised value represents a transient network condition
that is safe to retry. Errors coming out of socket and HTTP client layers
are heterogeneous and frequently wrapped, so the whole error chain is
inspected:
- explicit chaining (`__cause__`, a `cause` attribute)
- implicit chaining (`__context__`)
- promise-style rejection reasons and URLError-style `reason`
- aggregates (`BaseExceptionGroup.exceptions`, an `errors` list)

Each candidate is tested against three ordered signals: error code,
error class name, and (context permitting) message text.

Used by:
- polling restart logic, to decide whether to restart getUpdates
- retry runners, to decide whether an operation should retry
- webhook handlers, to classify failures for logging
"""

import errno
import socket
from collections import deque
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from bot_resilience.errors import extract_error_code, format_error_message


class NetworkErrorContext(str, Enum):
    """
    Where the error occurred; changes the matching policy, not the data.

    - POLLING: long-polling getUpdates, aggressive retry
    - SEND: user-facing sends, conservative (no message matching)
    - WEBHOOK: webhook handler
    - UNKNOWN: default behavior
    """

    POLLING = "polling"
    SEND = "send"
    WEBHOOK = "webhook"
    UNKNOWN = "unknown"


RECOVERABLE_ERROR_CODES = frozenset(
    {
        "ECONNRESET",
        "ECONNREFUSED",
        "EPIPE",
        "ETIMEDOUT",
        "ESOCKETTIMEDOUT",
        "ENETUNREACH",
        "EHOSTUNREACH",
        "ENOTFOUND",
        "EAI_AGAIN",
        # undici (fetch) codes forwarded by bridged clients
        "UND_ERR_CONNECT_TIMEOUT",
        "UND_ERR_HEADERS_TIMEOUT",
        "UND_ERR_BODY_TIMEOUT",
        "UND_ERR_SOCKET",
        "UND_ERR_ABORTED",
        "ECONNABORTED",
        "ERR_NETWORK",
    }
)

RECOVERABLE_ERROR_NAMES = frozenset(
    {
        "AbortError",
        "TimeoutError",
        "ConnectTimeoutError",
        "HeadersTimeoutError",
        "BodyTimeoutError",
        # builtin OSError subclasses raised without an errno
        "ConnectionResetError",
        "ConnectionRefusedError",
        "ConnectionAbortedError",
        "BrokenPipeError",
        # httpx / python-telegram-bot timeout kinds
        "TimeoutException",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
        "PoolTimeout",
        "TimedOut",
    }
)

RECOVERABLE_MESSAGE_SNIPPETS = (
    "fetch failed",
    "typeerror: fetch failed",
    "undici",
    "network error",
    "network request",
    "client network socket disconnected",
    "socket hang up",
    "getaddrinfo",
)

_GAI_TRANSIENT = {
    getattr(socket, "EAI_AGAIN", None): "EAI_AGAIN",
    getattr(socket, "EAI_NONAME", None): "ENOTFOUND",
    getattr(socket, "EAI_NODATA", None): "ENOTFOUND",
}
_GAI_TRANSIENT.pop(None, None)


def _member(obj: Any, name: str) -> Any:
    """Read `name` from a mapping key or attribute; None if absent or unreadable."""
    try:
        if isinstance(obj, Mapping):
            return obj.get(name)
        return getattr(obj, name, None)
    except Exception:
        # raising properties carry no signal
        return None


def _normalize_code(code: str | None) -> str:
    return code.strip().upper() if code else ""


def _error_code(err: Any) -> str | None:
    try:
        direct = extract_error_code(err)
    except Exception:
        direct = None
    if direct:
        return direct
    value = _member(err, "errno")
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if isinstance(err, socket.gaierror) and value in _GAI_TRANSIENT:
            return _GAI_TRANSIENT[value]
        return errno.errorcode.get(value, str(value))
    return None


def _error_names(err: Any) -> list[str]:
    explicit = _member(err, "name")
    names = [explicit] if isinstance(explicit, str) and explicit else []
    if isinstance(err, BaseException):
        names.extend(cls.__name__ for cls in type(err).__mro__)
    return names


def _message(err: Any) -> str:
    try:
        return format_error_message(err).lower()
    except Exception:
        # unprintable values carry no message signal
        return ""


def _message_match_allowed(context: NetworkErrorContext | str) -> bool:
    try:
        return NetworkErrorContext(context) is not NetworkErrorContext.SEND
    except ValueError:
        return True


def _linked(obj: Any) -> list[Any]:
    links: list[Any] = []
    if isinstance(obj, BaseException):
        links.append(obj.__cause__)
    links.append(_member(obj, "cause"))
    if isinstance(obj, BaseException):
        links.append(obj.__context__)
    links.append(_member(obj, "reason"))
    for attr in ("exceptions", "errors"):
        nested = _member(obj, attr)
        if isinstance(nested, Sequence) and not isinstance(nested, (str, bytes)):
            links.extend(nested)
    return links


def collect_error_candidates(err: Any) -> list[Any]:
    """
    Breadth-first walk of the error chain rooted at `err`.

    Nodes are deduplicated by identity, so cyclic or repeated references
    are visited once and the walk always terminates. Scalars reached via
    `reason` (e.g. a string) are kept as candidates but not expanded.
    """
    queue: deque[Any] = deque([err])
    seen: set[int] = set()
    candidates: list[Any] = []

    while queue:
        current = queue.popleft()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        candidates.append(current)

        if isinstance(current, (str, bytes, int, float, bool)):
            continue
        for nested in _linked(current):
            if nested is not None and nested is not False and id(nested) not in seen:
                queue.append(nested)

    return candidates


def is_recoverable_network_error(
    err: Any,
    *,
    context: NetworkErrorContext | str = NetworkErrorContext.UNKNOWN,
    allow_message_match: bool | None = None,
) -> bool:
    """
    Determine whether `err` is a transient network error (safe to retry).

    Args:
        err: Raised value to classify
        context: Where the error occurred (affects message matching)
        allow_message_match: Explicit override of message matching; by
            default disabled for "send" and enabled elsewhere

    Returns:
        True if any candidate in the chain matches a transient signal
    """
    if err is None:
        return False

    if allow_message_match is None:
        allow_message_match = _message_match_allowed(context)

    for candidate in collect_error_candidates(err):
        code = _normalize_code(_error_code(candidate))
        if code and code in RECOVERABLE_ERROR_CODES:
            return True

        if any(name in RECOVERABLE_ERROR_NAMES for name in _error_names(candidate)):
            return True

        if allow_message_match:
            message = _message(candidate)
            if message and any(snippet in message for snippet in RECOVERABLE_MESSAGE_SNIPPETS):
                return True

    return False
