"""
Alert service entry point for SkySentinel.

Builds the detector engine, the optional LLM verifier and the broadcast
channels from settings, accepts channel messages over HTTP, and exposes
health and metrics endpoints.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
import uvicorn
from fastapi import FastAPI, Request
from prometheus_client import make_asgi_app
from pydantic import BaseModel, Field

from sky_common.config import Settings, get_settings
from sky_common.logging import configure_logging

from detector.alert_filter import AlertFilter, source_id_for

from .channels import AlertChannel, TelegramBotChannel, WebhookChannel
from .dispatcher import AlertDispatcher
from .health import router as health_router
from .verifier import LlmVerifier

logger = structlog.get_logger()


class IncomingMessage(BaseModel):
    """A post read from a monitored alert channel."""

    source_id: int | None = Field(
        default=None,
        description="Stable numeric source id; derived from the title when omitted.",
    )
    title: str = Field(..., min_length=1, description="Source channel display title.")
    text: str = Field(..., description="Raw message text.")


class ProcessResult(BaseModel):
    forwarded: bool
    alert: str | None = None


def build_channels(settings: Settings) -> list[AlertChannel]:
    """Instantiate every broadcast destination configured in *settings*."""
    channels: list[AlertChannel] = []
    if settings.bot_token and settings.chat_ids:
        channels.append(TelegramBotChannel(settings.bot_token, settings.chat_ids))
    if settings.webhook_url:
        channels.append(WebhookChannel(settings.webhook_url))
    if not channels:
        logger.warning("no_broadcast_channels_configured")
    return channels


def build_dispatcher(settings: Settings) -> AlertDispatcher:
    """Wire engine, verifier and channels from *settings*.

    Raises:
        ValueError: If no location is configured (see
            :meth:`AlertFilter.from_settings`).
    """
    alert_filter = AlertFilter.from_settings(settings)
    verifier = LlmVerifier.from_settings(settings)
    return AlertDispatcher(alert_filter, build_channels(settings), verifier=verifier)


def create_app(dispatcher: AlertDispatcher | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        dispatcher: Pre-built dispatcher (tests); built from settings at
            startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if dispatcher is None:
            settings = get_settings()
            configure_logging(
                settings.log_level,
                json_logs=settings.json_logs,
                service_name="alerts",
            )
            app.state.dispatcher = build_dispatcher(settings)
        else:
            app.state.dispatcher = dispatcher
        logger.info(
            "alerts_service_starting",
            channels=[ch.name for ch in app.state.dispatcher.channels],
        )
        try:
            yield
        finally:
            logger.info("alerts_service_stopping")
            await app.state.dispatcher.close()

    app = FastAPI(title="SkySentinel Alerts Service", lifespan=lifespan)
    app.include_router(health_router)
    app.mount("/metrics", make_asgi_app())

    @app.post("/messages", response_model=ProcessResult)
    async def post_message(message: IncomingMessage, request: Request) -> ProcessResult:
        """Run one channel message through the filter and broadcast it."""
        source_id = (
            message.source_id if message.source_id is not None else source_id_for(message.title)
        )
        alert = await request.app.state.dispatcher.handle(source_id, message.title, message.text)
        return ProcessResult(forwarded=alert is not None, alert=alert)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the alerts app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "alerts.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


if __name__ == "__main__":
    run()
