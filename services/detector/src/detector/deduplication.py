"""
Alert deduplication and throttling for the SkySentinel detector.

Many channels repost the same threat within seconds. The dedup cache
keeps one entry per primary threat kind and lets a repeat through only
when it carries new information: a closer location, nationwide scope,
an additional threat kind, or a genuine urgent re-alert.

Negative-status updates ("no longer observed") get their own
per-source gate: one per wave, plus a cooldown.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from sky_common.models import Proximity, ThreatKind

from detector.classifier import primary_threat, threat_signature

logger = structlog.get_logger()

DEFAULT_DEDUP_WINDOW_S: float = 180.0
DEFAULT_NEGATIVE_STATUS_COOLDOWN_S: float = 120.0


@dataclass
class DedupEntry:
    """What has already been forwarded for one primary threat kind."""

    sent_at: float
    max_proximity: Proximity
    seen_signature: int
    seen_nationwide: bool
    was_urgent: bool
    last_urgent_at: float | None
    last_channel_id: int


class DedupCache:
    """Suppresses repeats of an already-forwarded threat.

    Args:
        window_s: Lifetime of an entry since its last refresh.
        urgent_cooldown_s: Minimum gap between urgent re-alerts from the
            source that sent the previous one.
    """

    def __init__(
        self,
        window_s: float = DEFAULT_DEDUP_WINDOW_S,
        urgent_cooldown_s: float = 0.0,
    ) -> None:
        self._window_s = window_s
        self._urgent_cooldown_s = urgent_cooldown_s
        self._cache: dict[ThreatKind, DedupEntry] = {}

    def should_forward(
        self,
        threats: list[ThreatKind],
        proximity: Proximity,
        nationwide: bool,
        urgent: bool,
        source_id: int,
        now: float,
    ) -> bool:
        """Decide whether this classified message is new information.

        Records the message when it is forwarded.

        Returns:
            ``True`` to forward, ``False`` to suppress as a duplicate.
        """
        primary = primary_threat(threats)
        if primary is None:
            return False
        signature = threat_signature(threats)
        entry = self._cache.get(primary)

        if entry is None:
            self._cache[primary] = DedupEntry(
                sent_at=now,
                max_proximity=proximity,
                seen_signature=signature,
                seen_nationwide=nationwide,
                was_urgent=urgent,
                last_urgent_at=now if urgent else None,
                last_channel_id=source_id,
            )
            return True

        reason = self._forward_reason(entry, signature, proximity, nationwide, urgent, source_id, now)
        if reason is None:
            logger.debug(
                "dedup_suppressed",
                primary=primary.value,
                source_id=source_id,
                proximity=proximity.name,
            )
            return False

        entry.sent_at = now
        entry.max_proximity = max(entry.max_proximity, proximity)
        entry.seen_signature |= signature
        entry.seen_nationwide = entry.seen_nationwide or nationwide
        entry.was_urgent = urgent
        if urgent:
            entry.last_urgent_at = now
        entry.last_channel_id = source_id
        logger.debug("dedup_passed", primary=primary.value, reason=reason, source_id=source_id)
        return True

    def _forward_reason(
        self,
        entry: DedupEntry,
        signature: int,
        proximity: Proximity,
        nationwide: bool,
        urgent: bool,
        source_id: int,
        now: float,
    ) -> str | None:
        if proximity > entry.max_proximity:
            return "proximity_upgrade"
        if nationwide and not entry.seen_nationwide:
            return "nationwide"
        if signature & ~entry.seen_signature:
            return "new_threat_kind"
        if urgent and not entry.was_urgent:
            return "first_urgent"
        if (
            urgent
            and source_id == entry.last_channel_id
            and (entry.last_urgent_at is None or now - entry.last_urgent_at >= self._urgent_cooldown_s)
        ):
            return "same_source_urgent"
        return None

    def get(self, kind: ThreatKind) -> DedupEntry | None:
        return self._cache.get(kind)

    def evict(self, now: float) -> None:
        """Drop entries not refreshed within the window."""
        expired = [k for k, e in self._cache.items() if now - e.sent_at >= self._window_s]
        for kind in expired:
            del self._cache[kind]

    def clear(self) -> None:
        """Clear all deduplication state."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


@dataclass
class NegativeStatusState:
    """Per-source negative-status bookkeeping."""

    latched_for_wave: bool = False
    last_sent_at: float | None = None


class NegativeStatusGate:
    """Lets one negative-status update per source through per wave.

    Args:
        cooldown_s: Minimum gap between two forwarded updates from one source.
    """

    def __init__(self, cooldown_s: float = DEFAULT_NEGATIVE_STATUS_COOLDOWN_S) -> None:
        self._cooldown_s = cooldown_s
        self._states: dict[int, NegativeStatusState] = {}

    def allow(self, source_id: int, now: float) -> bool:
        """Return ``True`` and latch the source if an update may be forwarded."""
        state = self._states.setdefault(source_id, NegativeStatusState())
        if state.latched_for_wave:
            return False
        if state.last_sent_at is not None and now - state.last_sent_at < self._cooldown_s:
            return False
        state.latched_for_wave = True
        state.last_sent_at = now
        return True

    def reset(self, source_id: int) -> None:
        """Unlatch a source after it reports a new non-trivial threat."""
        state = self._states.get(source_id)
        if state is not None:
            state.latched_for_wave = False

    def state(self, source_id: int) -> NegativeStatusState | None:
        return self._states.get(source_id)

    def evict(self, live_sources: Iterable[int], now: float) -> None:
        """Forget sources with no live context whose cooldown has passed."""
        live = set(live_sources)
        stale = [
            sid
            for sid, state in self._states.items()
            if sid not in live
            and (state.last_sent_at is None or now - state.last_sent_at >= self._cooldown_s)
        ]
        for sid in stale:
            del self._states[sid]

    def clear(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)
