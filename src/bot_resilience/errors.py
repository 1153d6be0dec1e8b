"""Helpers for turning arbitrary raised values into loggable text and codes."""

import json
from collections.abc import Mapping
from typing import Any


def format_error_message(err: Any) -> str:
    """Render an error (or any raised/rejected value) as a single message string."""
    if isinstance(err, BaseException):
        text = str(err)
        return text if text else type(err).__name__
    if isinstance(err, str):
        return err
    if isinstance(err, Mapping):
        for key in ("message", "description"):
            value = err.get(key)
            if isinstance(value, str) and value:
                return value
        try:
            return json.dumps(err, default=str)
        except (TypeError, ValueError):
            return str(err)
    return str(err)


def extract_error_code(err: Any) -> str | None:
    """Return a string `code` carried by the error, if any."""
    if err is None:
        return None
    if isinstance(err, Mapping):
        code = err.get("code")
    else:
        code = getattr(err, "code", None)
    if isinstance(code, str):
        return code
    return None
