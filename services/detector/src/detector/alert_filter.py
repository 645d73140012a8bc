"""
Alert filter engine for SkySentinel.

Runs every incoming channel message through the full decision pipeline:

1. lazy eviction of expired dedup entries, contexts and status latches;
2. recap and negative-status filters;
3. keyword classification and location resolution;
4. context inference (bare targets / launches, location-only and
   urgent-only follow-ups, cross-source missile refinement, location
   backfill), after which the message is remembered in its source's
   context whether or not it is forwarded;
5. the all-clear fast path, the location gate, optional external
   verification, deduplication and formatting.

The engine is single-owner: callers must serialise access (the alerts
service does so with an ``asyncio.Lock``). All timing uses a monotonic
clock, injectable for tests.
"""

from __future__ import annotations

import time
import zlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from sky_common.config import Settings
from sky_common.models import TRIVIAL_KINDS, LocationConfig, Proximity, ThreatKind

from detector.classifier import detect_threats, is_sole_all_clear, is_urgent, primary_threat
from detector.context_window import (
    DEFAULT_WINDOW_SECONDS,
    ChannelContext,
    ContextEntry,
)
from detector.deduplication import (
    DEFAULT_DEDUP_WINDOW_S,
    DEFAULT_NEGATIVE_STATUS_COOLDOWN_S,
    DedupCache,
    NegativeStatusGate,
)
from detector.formatter import format_alert, format_status
from detector.location import LocationResolver
from detector.report_filters import has_live_movement, is_informational_report, is_negative_update

logger = structlog.get_logger()


def source_id_for(title: str) -> int:
    """Stable pseudo id for a source known only by its title."""
    return zlib.crc32(title.encode("utf-8"))


@runtime_checkable
class ThreatVerifier(Protocol):
    """External second opinion on keyword verdicts.

    ``verify`` returns the confirmed kinds; an empty list rejects the
    message. Disabled verifiers are never called.
    """

    enabled: bool

    async def verify(
        self,
        text: str,
        threats: list[ThreatKind],
        proximity: Proximity,
        nationwide: bool,
    ) -> list[ThreatKind]: ...

    async def close(self) -> None: ...


@dataclass
class Detection:
    """A classified message that survived the pre-dedup stages."""

    source_id: int
    title: str
    text: str
    threats: list[ThreatKind]
    proximity: Proximity
    nationwide: bool
    urgent: bool
    entry: ContextEntry | None = None


@dataclass
class _Stage:
    """Either a finished decision (``result``) or a detection to finish."""

    detection: Detection | None = None
    result: str | None = None


class AlertFilter:
    """Stateful threat classifier, deduplicator and formatter.

    Args:
        location: Observer location match strings.
        dedup_window_s: Lifetime of a dedup entry since its last refresh.
        context_window_s: Lifetime of a per-source context entry.
        urgent_cooldown_s: Same-source urgent re-alert cooldown.
        negative_status_cooldown_s: Per-source negative-status cooldown.
        forward_all_threats: Forward threats without a location match.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        location: LocationConfig,
        *,
        dedup_window_s: float = DEFAULT_DEDUP_WINDOW_S,
        context_window_s: float = DEFAULT_WINDOW_SECONDS,
        urgent_cooldown_s: float = 0.0,
        negative_status_cooldown_s: float = DEFAULT_NEGATIVE_STATUS_COOLDOWN_S,
        forward_all_threats: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.location = location
        self.resolver = LocationResolver(location)
        self.forward_all_threats = forward_all_threats
        self._context_window_s = context_window_s
        self._clock = clock
        self._dedup = DedupCache(dedup_window_s, urgent_cooldown_s)
        self._negative = NegativeStatusGate(negative_status_cooldown_s)
        self._contexts: dict[int, ChannelContext] = {}
        # Primary kind of the last forwarded threat alert (None for status updates).
        self.last_primary: ThreatKind | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> AlertFilter:
        """Build the engine from application settings.

        Raises:
            ValueError: If no location is configured and
                ``forward_all_threats`` is off, so nothing could ever pass.
        """
        location = LocationConfig.from_settings(settings)
        if location.is_empty and not settings.forward_all_threats:
            raise ValueError(
                "no district, city or oblast configured; set SKY_CITY (or another "
                "location) or enable SKY_FORWARD_ALL_THREATS"
            )
        return cls(
            location,
            dedup_window_s=settings.dedup_window_s,
            context_window_s=settings.context_window_s,
            urgent_cooldown_s=settings.urgent_cooldown_s,
            negative_status_cooldown_s=settings.negative_status_cooldown_s,
            forward_all_threats=settings.forward_all_threats,
            clock=clock,
        )

    # ── public API ──

    def process(self, source_id: int, title: str, text: str) -> str | None:
        """Decide whether *text* becomes an alert.

        Args:
            source_id: Stable numeric id of the source channel.
            title: Display title of the source channel.
            text: Raw message text.

        Returns:
            The formatted alert, or ``None`` if the message is suppressed.
        """
        stage = self._begin(source_id, title, text)
        if stage.detection is None:
            return stage.result
        return self._finish(stage.detection, stage.detection.threats)

    def process_titled(self, title: str, text: str) -> str | None:
        """:meth:`process` for sources without a numeric id."""
        return self.process(source_id_for(title), title, text)

    async def process_verified(
        self,
        source_id: int,
        title: str,
        text: str,
        verifier: ThreatVerifier | None = None,
    ) -> str | None:
        """Like :meth:`process`, consulting an external verifier first.

        An empty verdict from the :class:`ThreatVerifier` suppresses the
        message; any exception falls back to the keyword verdict.
        """
        stage = self._begin(source_id, title, text)
        if stage.detection is None:
            return stage.result

        detection = stage.detection
        threats = detection.threats
        if verifier is not None and verifier.enabled:
            threats = await self._verify(verifier, detection)
            if not threats:
                logger.info("verifier_rejected", source_id=source_id)
                return None
            if detection.entry is not None:
                detection.entry.threats = list(threats)
        return self._finish(detection, threats)

    @property
    def dedup(self) -> DedupCache:
        return self._dedup

    @property
    def negative_status(self) -> NegativeStatusGate:
        return self._negative

    def context(self, source_id: int) -> ChannelContext | None:
        return self._contexts.get(source_id)

    # ── pipeline ──

    def _begin(self, source_id: int, title: str, text: str) -> _Stage:
        now = self._clock()
        self._evict(now)
        lower = text.lower()
        log = logger.bind(source_id=source_id)

        if is_informational_report(lower):
            log.debug("recap_suppressed")
            return _Stage()

        if is_negative_update(lower):
            return _Stage(result=self._negative_status(source_id, title, text, now))

        detection = self._detect_with_context(source_id, title, text, lower, now)
        if detection is None:
            return _Stage()

        if any(kind not in TRIVIAL_KINDS for kind in detection.threats):
            self._negative.reset(source_id)

        if is_sole_all_clear(detection.threats):
            self._reset_wave()
            self.last_primary = ThreatKind.ALL_CLEAR
            log.info("all_clear_forwarded")
            return _Stage(
                result=format_alert(
                    detection.threats,
                    detection.proximity,
                    title,
                    text,
                    urgent=detection.urgent,
                    nationwide=detection.nationwide,
                )
            )

        if (
            detection.proximity is Proximity.NONE
            and not detection.nationwide
            and not self.forward_all_threats
        ):
            log.debug("location_filtered", threats=[k.value for k in detection.threats])
            return _Stage()

        return _Stage(detection=detection)

    def _finish(self, detection: Detection, threats: list[ThreatKind]) -> str | None:
        now = self._clock()
        if not self._dedup.should_forward(
            threats,
            detection.proximity,
            detection.nationwide,
            detection.urgent,
            detection.source_id,
            now,
        ):
            return None

        self.last_primary = primary_threat(threats)
        logger.info(
            "alert_forwarded",
            source_id=detection.source_id,
            threats=[k.value for k in threats],
            proximity=detection.proximity.name,
            nationwide=detection.nationwide,
            urgent=detection.urgent,
        )
        return format_alert(
            threats,
            detection.proximity,
            detection.title,
            detection.text,
            urgent=detection.urgent,
            nationwide=detection.nationwide,
        )

    def _detect_with_context(
        self,
        source_id: int,
        title: str,
        text: str,
        lower: str,
        now: float,
    ) -> Detection | None:
        threats = detect_threats(lower)
        match = self.resolver.resolve(lower, title)
        proximity = match.proximity
        urgent = is_urgent(lower)
        context = self._contexts.get(source_id) or ChannelContext(self._context_window_s)

        if not threats:
            inferred = context.infer_threat_from_triggers(lower, now)
            if inferred is not None:
                threats = [inferred]

        if not threats and (proximity is not Proximity.NONE or urgent):
            recent = context.infer_recent_threat(now)
            if recent is not None:
                threats = [recent]

        if threats and not match.explicit_non_local:
            threats = self._refine_across_sources(threats, lower, now)

        if (
            threats
            and proximity is Proximity.NONE
            and not match.nationwide
            and not match.explicit_non_local
        ):
            proximity = context.infer_location(now)

        entry = context.add(lower, threats, proximity, now)
        if entry is not None:
            self._contexts[source_id] = context

        if not threats:
            return None
        return Detection(
            source_id=source_id,
            title=title,
            text=text,
            threats=threats,
            proximity=proximity,
            nationwide=match.nationwide,
            urgent=urgent,
            entry=entry,
        )

    def _refine_across_sources(
        self,
        threats: list[ThreatKind],
        lower: str,
        now: float,
    ) -> list[ThreatKind]:
        """Upgrade a lone generic report to the latest missile kind seen anywhere."""
        lone_missile = threats == [ThreatKind.MISSILE]
        lone_moving_other = threats == [ThreatKind.OTHER] and has_live_movement(lower)
        if not (lone_missile or lone_moving_other):
            return threats

        best: tuple[int, ThreatKind] | None = None
        for context in self._contexts.values():
            latest = context.latest_missile_kind(now)
            if latest is not None and (best is None or latest[0] > best[0]):
                best = latest
        if best is None:
            return threats

        logger.debug("threat_refined", original=threats[0].value, refined=best[1].value)
        return [best[1]]

    def _negative_status(self, source_id: int, title: str, text: str, now: float) -> str | None:
        context = self._contexts.get(source_id)
        if context is None or not context.has_live_threat(
            now, require_location=not self.forward_all_threats
        ):
            logger.debug("negative_status_no_live_threat", source_id=source_id)
            return None
        if not self._negative.allow(source_id, now):
            logger.debug("negative_status_suppressed", source_id=source_id)
            return None
        self.last_primary = None
        logger.info("negative_status_forwarded", source_id=source_id)
        return format_status(title, text)

    async def _verify(self, verifier: ThreatVerifier, detection: Detection) -> list[ThreatKind]:
        try:
            verified = await verifier.verify(
                detection.text,
                detection.threats,
                detection.proximity,
                detection.nationwide,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("verifier_failed_open", source_id=detection.source_id, error=str(exc))
            return detection.threats
        return list(verified)

    # ── state maintenance ──

    def _evict(self, now: float) -> None:
        self._dedup.evict(now)
        for source_id in list(self._contexts):
            context = self._contexts[source_id]
            context.evict(now)
            if context.is_empty:
                del self._contexts[source_id]
        self._negative.evict(self._contexts.keys(), now)

    def _reset_wave(self) -> None:
        """Forget everything about the current attack wave."""
        self._dedup.clear()
        self._contexts.clear()
        self._negative.clear()
