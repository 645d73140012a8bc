"""Shared pytest fixtures for integration tests.

Provides an observer location, an in-process HTTP recorder standing in
for the Telegram Bot API / webhook / verifier servers, and helpers to
wire real channel and verifier clients onto it.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from sky_common.models import LocationConfig


class RecordingTransport:
    """``httpx.MockTransport`` handler that records every request.

    Args:
        responder: Optional callable returning the response for a
            request; defaults to ``200 {"ok": true}``.
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responder is not None:
            return self._responder(request)
        return httpx.Response(200, json={"ok": True})

    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture(scope="session")
def kyiv_location() -> LocationConfig:
    """Observer in Kyiv's Shevchenkivskyi district."""
    return LocationConfig(
        oblast=("київськ", "киевск"),
        city=("київ", "києв", "киев"),
        district=("шевченківськ", "шевченковск"),
    )


@pytest.fixture()
def recorder() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def make_recorder() -> Callable[..., RecordingTransport]:
    """Factory for recorders with a custom responder."""
    return RecordingTransport
