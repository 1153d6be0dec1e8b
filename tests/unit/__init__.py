"""
Unit tests for the Bot API resilience layer.

Test individual components in isolation:
- Backoff calculator (capping, jitter bounds)
- Config resolver (layer precedence, normalization)
- Retry engine (attempt budget, fail fast, hooks, cancellation)
- Retry-after strategies (nesting conventions)
- Channel retry runners (Discord, Telegram)
- Network error classifier (chain traversal, context gating)
- API logging wrapper
"""
