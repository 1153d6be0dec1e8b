"""
Integration tests for the Bot API resilience layer.

Test components together against a mocked Bot API transport:
- Telegram client over httpx.MockTransport wrapped by the retry runner
- Logging wrapper composed around the retry runner
"""
