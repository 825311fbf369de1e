"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so alerts can be routed to a channel or chat.
Delivery is best-effort: failures are logged and dropped, never retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from core.errors import NotifyError

LOGGER = logging.getLogger(__name__)


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        bot_token: Optional[str],
        chat_id: Optional[str],
        timeout: float = 10.0,
    ) -> None:
        self._session = session
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    async def notify(self, message: str) -> bool:
        """Send the message; return True only when the Bot API accepted it."""

        if not self.enabled:
            LOGGER.info("Telegram is not configured, alert not sent")
            return False
        try:
            await self._send(message)
        except NotifyError as exc:
            LOGGER.warning("Telegram alert dropped: %s", exc)
            return False
        return True

    async def _send(self, message: str) -> None:
        # aiohttp URL-encodes query parameters, so untrusted text is safe here.
        params = {"chat_id": str(self._chat_id), "text": message}
        try:
            async with self._session.get(self._endpoint(), params=params, timeout=self._timeout) as resp:
                if resp.status < 200 or resp.status >= 300:
                    # The token is part of the URL; only the status and body are reported.
                    body = await resp.text(errors="replace")
                    raise NotifyError(f"Bot API error {resp.status}: {body[:200]}")
        except asyncio.TimeoutError as exc:
            raise NotifyError("Bot API request timed out") from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise NotifyError(f"Bot API request failed: {type(exc).__name__}") from exc
