"""
Resilience layer for chat-platform Bot API calls.

Sits between a chat client application and the remote Bot APIs
(Discord-like gateway, Telegram-like polling/webhook API) and absorbs
transient failures:
- Retry engine with exponential backoff and jitter
- Rate-limit awareness (mandated waits override computed backoff)
- Network error classification over cause/reason/aggregate chains
- API call logging wrapper that observes and always re-raises

Callers see either a successful result or a definitively fatal error.
"""

__version__ = "0.1.0"
