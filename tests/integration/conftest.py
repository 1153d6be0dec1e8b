"""Integration test fixtures (Bot API over a mocked HTTP transport).

Provides a minimal Telegram Bot API client running on httpx with a
scripted MockTransport, so the full retry and logging flow can be
exercised without reaching api.telegram.org.
"""

from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest

from bot_resilience.exceptions import TelegramApiError

TOKEN = "123456:TEST"


class ScriptedTransport:
    """Replays a script of responses (or exceptions to raise), one per request.

    The last step repeats once the script is down to it.
    """

    def __init__(self, script: list[Any]):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step


class TelegramBotClient:
    """Bot API client raising TelegramApiError for `ok: false` replies."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def call(self, method: str, **params: Any) -> Any:
        response = await self.http.post(f"/bot{TOKEN}/{method}", json=params)
        payload = response.json()
        if not payload.get("ok"):
            raise TelegramApiError(
                payload.get("description", "Unknown error"),
                error_code=payload.get("error_code"),
                parameters=payload.get("parameters"),
            )
        return payload["result"]

    async def send_message(self, chat_id: int, text: str) -> dict:
        return await self.call("sendMessage", chat_id=chat_id, text=text)


@pytest.fixture
def telegram_api():
    """Factory fixture building a client over a scripted transport.

    Usage:
        async with telegram_api([rate_limited, ok_reply]) as (bot, transport):
            await bot.send_message(1, "hi")
            assert len(transport.requests) == 2
    """
    @asynccontextmanager
    async def _create(script: list[Any]):
        transport = ScriptedTransport(script)
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(transport),
            base_url="https://api.telegram.org",
        ) as http:
            yield TelegramBotClient(http), transport

    return _create
