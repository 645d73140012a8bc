"""
Central alert dispatcher for SkySentinel.

Owns the single :class:`~detector.alert_filter.AlertFilter` instance
and routes every incoming channel message through it.

Flow
----
1. Take the engine lock (the engine is single-owner state).
2. Run ``process_verified``; the optional verifier call is the only
   suspension point inside the lock and is bounded by its timeout.
3. Release the lock, then fan the formatted alert out to every enabled
   channel. Channel failures are logged and counted, never raised.
"""

from __future__ import annotations

import asyncio

import structlog

from sky_common.metrics import (
    alert_delivery_errors_total,
    alerts_forwarded_total,
    messages_processed_total,
)

from detector.alert_filter import AlertFilter, ThreatVerifier

from .channels.base import AlertChannel

logger = structlog.get_logger()


class AlertDispatcher:
    """Serialises engine access and broadcasts forwarded alerts.

    Args:
        alert_filter: The detector engine.
        channels: Broadcast destinations.
        verifier: Optional external verifier passed to the engine.
    """

    def __init__(
        self,
        alert_filter: AlertFilter,
        channels: list[AlertChannel],
        *,
        verifier: ThreatVerifier | None = None,
    ) -> None:
        self.alert_filter = alert_filter
        self.channels = channels
        self.verifier = verifier
        self._lock = asyncio.Lock()

    async def handle(self, source_id: int, title: str, text: str) -> str | None:
        """Process one channel message and broadcast it if forwarded.

        Returns:
            The formatted alert, or ``None`` when suppressed.
        """
        async with self._lock:
            alert = await self.alert_filter.process_verified(
                source_id, title, text, self.verifier
            )
            primary = self.alert_filter.last_primary

        if alert is None:
            messages_processed_total.labels(outcome="suppressed").inc()
            return None

        messages_processed_total.labels(outcome="forwarded").inc()
        alerts_forwarded_total.labels(primary=primary.value if primary else "status").inc()
        await self.broadcast(alert)
        return alert

    async def broadcast(self, text: str) -> list[str]:
        """Send *text* to every enabled channel.

        Returns:
            Names of the channels that accepted the alert.
        """
        delivered_to: list[str] = []
        for ch in self.channels:
            if not ch.enabled:
                continue
            try:
                ok = await ch.send(text)
            except Exception as exc:  # noqa: BLE001
                logger.error("channel_send_error", channel=ch.name, error=str(exc))
                ok = False
            if ok:
                delivered_to.append(ch.name)
            else:
                alert_delivery_errors_total.labels(channel=ch.name).inc()

        logger.info("alert_dispatched", delivered_to=delivered_to)
        return delivered_to

    async def close(self) -> None:
        """Close every channel and the verifier."""
        for ch in self.channels:
            await ch.close()
        if self.verifier is not None:
            await self.verifier.close()
