"""
Health check endpoint for the SkySentinel alerts service.

Exposes a /health endpoint returning service status and the number of
configured broadcast channels.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Return ``{"status": "ok"}`` when the service is alive."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        return {"status": "starting", "channels": 0}
    return {
        "status": "ok",
        "channels": sum(1 for ch in dispatcher.channels if ch.enabled),
        "verifier": bool(dispatcher.verifier is not None and dispatcher.verifier.enabled),
    }
