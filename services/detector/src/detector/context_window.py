"""
Per-source sliding context window for the SkySentinel detector.

Keeps the last few minutes (default 300 s, at most 20 entries) of
classified messages per source so that terse follow-ups such as
"target on Kyiv" or "more launches" can borrow the threat kind or the
location from what the same source said recently.
"""

from __future__ import annotations

import itertools
import re
from collections import deque
from dataclasses import dataclass

from sky_common.models import MISSILE_FAMILY, TRIVIAL_KINDS, Proximity, ThreatKind

from detector.keyword_index import KeywordIndex
from detector.threat_keywords import (
    LAUNCH_TRIGGERS,
    TARGET_CONTEXT_KEYWORDS,
    TARGET_TRIGGER_PATTERNS,
)

DEFAULT_WINDOW_SECONDS: float = 300.0
DEFAULT_CAPACITY: int = 20

_TARGET_TRIGGER_RE = re.compile("|".join(TARGET_TRIGGER_PATTERNS))
_LAUNCH_INDEX = KeywordIndex.from_stems(LAUNCH_TRIGGERS)
_TARGET_CONTEXT_INDEX: KeywordIndex[ThreatKind] = KeywordIndex.from_table(TARGET_CONTEXT_KEYWORDS)
_TARGET_CONTEXT_ORDER: tuple[ThreatKind, ...] = tuple(kind for kind, _ in TARGET_CONTEXT_KEYWORDS)

# Specific kinds an entry's own classification may lend to a bare trigger.
_TRIGGER_FALLBACK_KINDS: tuple[ThreatKind, ...] = (
    ThreatKind.BALLISTIC,
    ThreatKind.CRUISE_MISSILE,
    ThreatKind.SHAHED,
    ThreatKind.HYPERSONIC,
)

# Strict insertion order across all contexts; breaks timestamp ties.
_sequence = itertools.count()


def has_trigger(lower: str) -> bool:
    """Return ``True`` if the message names a bare target or a launch."""
    return bool(_TARGET_TRIGGER_RE.search(lower)) or _LAUNCH_INDEX.contains(lower)


@dataclass
class ContextEntry:
    """A classified message remembered by a :class:`ChannelContext`."""

    timestamp: float
    text: str
    threats: list[ThreatKind]
    proximity: Proximity
    seq: int


class ChannelContext:
    """Rolling memory of recent classified messages for one source.

    Every operation first drops entries older than *window_s*.

    Args:
        window_s: Lifetime of an entry in seconds.
        capacity: Maximum number of entries kept.
    """

    def __init__(
        self,
        window_s: float = DEFAULT_WINDOW_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self._window_s = window_s
        self._entries: deque[ContextEntry] = deque(maxlen=capacity)

    # ── public API ──

    def add(
        self,
        text: str,
        threats: list[ThreatKind],
        proximity: Proximity,
        now: float,
    ) -> ContextEntry | None:
        """Remember a message if it carries a threat or a location.

        Returns:
            The stored entry, or ``None`` if nothing was worth keeping.
        """
        self.evict(now)
        if not threats and proximity is Proximity.NONE:
            return None
        entry = ContextEntry(
            timestamp=now,
            text=text,
            threats=list(threats),
            proximity=proximity,
            seq=next(_sequence),
        )
        self._entries.append(entry)
        return entry

    def infer_threat_from_triggers(self, lower: str, now: float) -> ThreatKind | None:
        """Resolve a bare "target" / "launch" mention against recent history.

        Walks entries newest first: the secondary keyword table is checked
        against the entry's text, then the entry's own specific threat.

        Returns:
            ``None`` if *lower* has no trigger, else the inferred kind,
            defaulting to generic :attr:`ThreatKind.MISSILE`.
        """
        if not has_trigger(lower):
            return None
        self.evict(now)
        for entry in reversed(self._entries):
            mentioned = _TARGET_CONTEXT_INDEX.tags(entry.text)
            for kind in _TARGET_CONTEXT_ORDER:
                if kind in mentioned:
                    return kind
            for kind in _TRIGGER_FALLBACK_KINDS:
                if kind in entry.threats:
                    return kind
        return ThreatKind.MISSILE

    def infer_recent_threat(self, now: float) -> ThreatKind | None:
        """Most specific non-trivial kind of the newest entry that has one."""
        self.evict(now)
        for entry in reversed(self._entries):
            actionable = [k for k in entry.threats if k not in TRIVIAL_KINDS]
            if actionable:
                return max(actionable, key=lambda k: k.specificity)
        return None

    def infer_location(self, now: float) -> Proximity:
        """Newest known proximity, with district capped to city."""
        self.evict(now)
        for entry in reversed(self._entries):
            if entry.proximity is not Proximity.NONE:
                return min(entry.proximity, Proximity.CITY)
        return Proximity.NONE

    def latest_missile_kind(self, now: float) -> tuple[int, ThreatKind] | None:
        """Newest missile-family kind as ``(seq, kind)`` for cross-source ranking."""
        self.evict(now)
        for entry in reversed(self._entries):
            family = [k for k in entry.threats if k in MISSILE_FAMILY]
            if family:
                return entry.seq, max(family, key=lambda k: k.specificity)
        return None

    def has_live_threat(self, now: float, *, require_location: bool = False) -> bool:
        """Return ``True`` if any live entry carries a non-trivial threat.

        Args:
            now: Current monotonic time.
            require_location: Only count entries relevant to the observer.
        """
        self.evict(now)
        return any(
            any(k not in TRIVIAL_KINDS for k in entry.threats)
            and (not require_location or entry.proximity is not Proximity.NONE)
            for entry in self._entries
        )

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entry_count(self) -> int:
        """Number of entries currently held (expired ones included until evicted)."""
        return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    # ── internal ──

    def evict(self, now: float) -> None:
        """Drop entries older than the window."""
        cutoff = now - self._window_s
        while self._entries and self._entries[0].timestamp <= cutoff:
            self._entries.popleft()
