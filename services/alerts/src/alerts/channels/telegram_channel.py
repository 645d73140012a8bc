"""
Telegram Bot API alert channel for SkySentinel.

Broadcasts each alert with ``sendMessage`` to every configured chat.
A failure for one chat is logged and does not stop delivery to the
rest. Transport errors, rate limiting (429) and server errors are
retried with exponential backoff; other client errors are not.
"""

from __future__ import annotations

import httpx
import structlog

from .base import DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT_S, HttpAlertChannel

logger = structlog.get_logger()

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramBotChannel(HttpAlertChannel):
    """Deliver alerts to Telegram chats through the Bot API.

    Args:
        bot_token: Bot API token.
        chat_ids: Destination chat ids (numeric ids or ``@channel`` names).
        max_attempts: Attempts per chat (default 3).
        timeout: Per-request timeout in seconds (default 10).
        api_base: Bot API base URL, overridable for local Bot API servers.
    """

    name: str = "telegram"

    def __init__(
        self,
        bot_token: str,
        chat_ids: list[str],
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = DEFAULT_TIMEOUT_S,
        api_base: str = TELEGRAM_API_BASE,
    ) -> None:
        super().__init__(max_attempts=max_attempts, timeout=timeout)
        self.bot_token = bot_token
        self.chat_ids = list(chat_ids)
        self.api_base = api_base.rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.api_base}/bot{self.bot_token}/sendMessage"

    async def send_to(self, chat_id: str, text: str) -> bool:
        """Send *text* to a single chat."""
        payload = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        # The token is part of the URL; never log it.
        log = logger.bind(chat_id=chat_id)
        try:
            await self._post(self.url, payload)
        except httpx.HTTPStatusError as exc:
            log.warning(
                "telegram_delivery_failed",
                status=exc.response.status_code,
                body=exc.response.text[:200],
            )
            return False
        except httpx.TransportError as exc:
            log.warning("telegram_delivery_failed", error=type(exc).__name__)
            return False
        log.debug("telegram_delivered")
        return True

    async def send(self, text: str) -> bool:
        """Broadcast *text* to every chat.

        Returns:
            ``True`` if at least one chat received the alert.
        """
        delivered = 0
        for chat_id in self.chat_ids:
            if await self.send_to(chat_id, text):
                delivered += 1
        logger.info("telegram_broadcast", delivered=delivered, total=len(self.chat_ids))
        return delivered > 0
