"""
Webhook alert channel for SkySentinel.

Mirrors every forwarded alert to one HTTP endpoint as a JSON
``{"text": ...}`` body, so chat bridges and home-automation hooks can
consume the same text the Telegram subscribers see.
"""

from __future__ import annotations

import httpx
import structlog

from .base import DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT_S, HttpAlertChannel

logger = structlog.get_logger()


class WebhookChannel(HttpAlertChannel):
    """POST each alert to a fixed webhook URL.

    Args:
        url: Destination webhook URL.
        max_attempts: Delivery attempts (default 3).
        timeout: Per-request timeout in seconds (default 10).
        headers: Extra headers sent with every request (auth tokens etc.).
    """

    name: str = "webhook"

    def __init__(
        self,
        url: str,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = DEFAULT_TIMEOUT_S,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(max_attempts=max_attempts, timeout=timeout)
        self.url = url
        self.headers = {"Content-Type": "application/json", **(headers or {})}

    async def send(self, text: str) -> bool:
        try:
            resp = await self._post(self.url, {"text": text}, headers=self.headers)
        except httpx.HTTPStatusError as exc:
            logger.error("webhook_delivery_failed", status=exc.response.status_code)
            return False
        except httpx.TransportError as exc:
            logger.error("webhook_delivery_failed", error=type(exc).__name__)
            return False
        logger.debug("webhook_delivered", status=resp.status_code)
        return True
