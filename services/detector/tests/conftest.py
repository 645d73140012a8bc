"""Shared fixtures for detector service tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sky_common.models import LocationConfig

from detector.alert_filter import AlertFilter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kyiv_location() -> LocationConfig:
    return LocationConfig(
        oblast=("київськ", "киевск"),
        city=("київ", "києв", "киев", "кiev", "васильків", "васильков"),
        district=("шевченківськ", "шевченковск"),
    )


@pytest.fixture
def kharkiv_location() -> LocationConfig:
    return LocationConfig(
        oblast=("харківськ",),
        city=("харків", "харков"),
        district=("київськ", "шевченківськ"),
    )


@pytest.fixture
def make_filter(clock: FakeClock) -> Callable[..., AlertFilter]:
    """Factory building an :class:`AlertFilter` on the shared fake clock."""

    def _make(location: LocationConfig, **kwargs: object) -> AlertFilter:
        kwargs.setdefault("clock", clock)
        return AlertFilter(location, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def kyiv_filter(make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig) -> AlertFilter:
    return make_filter(kyiv_location)


@pytest.fixture
def kharkiv_filter(
    make_filter: Callable[..., AlertFilter], kharkiv_location: LocationConfig
) -> AlertFilter:
    return make_filter(kharkiv_location)
