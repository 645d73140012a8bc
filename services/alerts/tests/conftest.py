"""Shared fixtures for alerts service tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from sky_common.models import LocationConfig

from detector.alert_filter import AlertFilter

# ─── Fixtures ────────────────────────────────────────────────────


@pytest.fixture()
def sample_alert() -> str:
    """A formatted alert as produced by the detector."""
    return "‼️🚀 Балістика · 🟠 МІСТО\n———\nБалістика на Київ\n— 📡 monitor"


@pytest.fixture()
def kyiv_location() -> LocationConfig:
    return LocationConfig(
        oblast=("київськ", "киевск"),
        city=("київ", "києв", "киев"),
        district=("шевченківськ",),
    )


@pytest.fixture()
def alert_filter(kyiv_location: LocationConfig) -> AlertFilter:
    return AlertFilter(kyiv_location)


@pytest.fixture()
def mock_channel() -> MagicMock:
    """Mock AlertChannel that accepts every alert."""
    ch = AsyncMock()
    ch.name = "mock"
    ch.enabled = True
    ch.send = AsyncMock(return_value=True)
    ch.close = AsyncMock()
    return ch

