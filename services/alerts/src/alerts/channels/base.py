"""
Alert channel interfaces for SkySentinel.

``AlertChannel`` is the contract the dispatcher broadcasts through.
``HttpAlertChannel`` carries the plumbing shared by the HTTP-backed
destinations: one lazily created ``httpx.AsyncClient`` and a JSON POST
retried with exponential backoff on transient failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_TIMEOUT_S = 10.0


def is_retryable(exc: BaseException) -> bool:
    """Transport errors, rate limiting (429) and 5xx replies are transient."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class AlertChannel(ABC):
    """A broadcast destination for formatted alerts.

    Attributes:
        name: Channel name used in logs and metric labels.
        enabled: ``False`` keeps the channel configured but silent.
    """

    name: str = "base"
    enabled: bool = True

    @abstractmethod
    async def send(self, text: str) -> bool:
        """Deliver *text*; return whether the destination accepted it."""

    async def close(self) -> None:
        """Release held resources."""


class HttpAlertChannel(AlertChannel):
    """Channel that delivers alerts by POSTing JSON with httpx.

    Args:
        max_attempts: Attempts per POST, including the first one.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST *payload* to *url*, retrying transient failures.

        Raises:
            httpx.HTTPStatusError: Non-2xx reply on the last attempt, or a
                non-retryable status on any attempt.
            httpx.TransportError: The last attempt could not get through.
        """

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(is_retryable),
            reraise=True,
        )
        async def _attempt() -> httpx.Response:
            client = await self._get_client()
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            return resp

        return await _attempt()

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
