"""
Keyword-stem threat classifier for the SkySentinel detector.

Maps a lowercased channel message to the ordered set of threat kinds it
mentions. Plain stem matching runs first, then a handful of combo
heuristics for abbreviations and phrasing that no single stem captures,
then suppression rules that drop generic kinds made redundant by
specific ones.

The stem tables are compiled into Aho-Corasick indexes once at import,
so classifying a message is one scan for kinds and one for combo cues.
"""

from __future__ import annotations

from collections.abc import Iterable

from sky_common.models import ThreatKind

from detector.keyword_index import KeywordIndex, has_standalone_token
from detector.threat_keywords import (
    AIRBORNE_MARKERS,
    AIRFRAME_WORDS,
    CRUISE_ABBREVIATION,
    CRUISE_SUPPORT_WORDS,
    KIND_ORDER,
    SPEED_MARKERS,
    STRATEGIC_MARKER_STEMS,
    STRATEGIC_MARKER_TOKENS,
    TARGET_STEMS,
    THREAT_KEYWORDS,
    URGENCY_KEYWORDS,
)

_THREAT_INDEX: KeywordIndex[ThreatKind] = KeywordIndex.from_table(THREAT_KEYWORDS)
_URGENCY_INDEX = KeywordIndex.from_stems(URGENCY_KEYWORDS)

# Cue name -> stems feeding the combo heuristics.
_CUE_INDEX: KeywordIndex[str] = KeywordIndex.from_table(
    (
        ("cruise_support", CRUISE_SUPPORT_WORDS),
        ("strategic", STRATEGIC_MARKER_STEMS),
        ("airframe", AIRFRAME_WORDS),
        ("airborne", AIRBORNE_MARKERS),
        ("speed", SPEED_MARKERS),
        ("target", TARGET_STEMS),
    )
)


# ── combo heuristics ──


def _cruise_abbreviation(lower: str, cues: set[str]) -> bool:
    return "cruise_support" in cues and has_standalone_token(lower, CRUISE_ABBREVIATION)


def _strategic_aviation(lower: str, cues: set[str]) -> bool:
    if not {"airframe", "airborne"} <= cues:
        return False
    return "strategic" in cues or any(
        has_standalone_token(lower, token) for token in STRATEGIC_MARKER_TOKENS
    )


def _fast_target(cues: set[str]) -> bool:
    return {"speed", "target"} <= cues


# ── public API ──


def detect_threats(lower: str) -> list[ThreatKind]:
    """Classify a lowercased message into an ordered list of threat kinds.

    Args:
        lower: The message text, already lowercased.

    Returns:
        Distinct kinds in fixed table order; empty when nothing matched.
    """
    found = _THREAT_INDEX.tags(lower)
    cues = _CUE_INDEX.tags(lower)

    if _cruise_abbreviation(lower, cues):
        found.add(ThreatKind.CRUISE_MISSILE)
    if _strategic_aviation(lower, cues):
        found.add(ThreatKind.AIRCRAFT)
    if _fast_target(cues):
        found.add(ThreatKind.MISSILE)

    if found & {ThreatKind.BALLISTIC, ThreatKind.CRUISE_MISSILE, ThreatKind.HYPERSONIC}:
        found.discard(ThreatKind.MISSILE)
    if ThreatKind.HYPERSONIC in found:
        found.discard(ThreatKind.CRUISE_MISSILE)
    if found - {ThreatKind.OTHER}:
        found.discard(ThreatKind.OTHER)

    return [kind for kind in KIND_ORDER if kind in found]


def is_urgent(lower: str) -> bool:
    """Return ``True`` if the message marks a repeated or additional wave."""
    return _URGENCY_INDEX.contains(lower)


def primary_threat(threats: Iterable[ThreatKind]) -> ThreatKind | None:
    """Return the most specific kind; earlier table order wins ties."""
    primary: ThreatKind | None = None
    for kind in threats:
        if primary is None or kind.specificity > primary.specificity:
            primary = kind
    return primary


def threat_signature(threats: Iterable[ThreatKind]) -> int:
    """Bit-union of the kinds' signature bits."""
    signature = 0
    for kind in threats:
        signature |= kind.bit
    return signature


def is_sole_all_clear(threats: list[ThreatKind]) -> bool:
    return threats == [ThreatKind.ALL_CLEAR]
