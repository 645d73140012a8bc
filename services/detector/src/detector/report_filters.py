"""
Report-shape filters for the SkySentinel detector.

Two kinds of posts mention threats without being live alerts:
retrospective recaps ("33 missiles shot down overnight ...") and
negative-status updates ("no longer observed", "quiet for now"). Both
are recognised here before classification runs.
"""

from __future__ import annotations

from detector.keyword_index import KeywordIndex, has_standalone_token
from detector.threat_keywords import (
    ACTIVE_ALERT_MARKERS,
    ACTIVE_ALERT_TOKENS,
    ALL_CLEAR_KEYWORDS,
    BULLET_PREFIXES,
    CAUTIOUS_STATUS_PHRASES,
    LIVE_MOVEMENT_MARKERS,
    NEGATIVE_STATUS_MARKERS,
    RECAP_MARKERS,
    RECAP_MIN_BULLETS,
    RECAP_MIN_DIGITS,
    RECAP_MIN_LINE_BREAKS,
    RECAP_MIN_MARKERS,
    SIGN_OFF_WORDS,
)

_LIVE_MOVEMENT_INDEX = KeywordIndex.from_stems(LIVE_MOVEMENT_MARKERS)
_RECAP_INDEX = KeywordIndex.from_stems(RECAP_MARKERS)
_NEGATIVE_INDEX = KeywordIndex.from_stems(NEGATIVE_STATUS_MARKERS)
_ALL_CLEAR_INDEX = KeywordIndex.from_stems(ALL_CLEAR_KEYWORDS)
_ACTIVE_ALERT_INDEX = KeywordIndex.from_stems(ACTIVE_ALERT_MARKERS)


def has_live_movement(lower: str) -> bool:
    """Return ``True`` if the message describes a trajectory in progress."""
    return _LIVE_MOVEMENT_INDEX.contains(lower)


def _bullet_count(lower: str) -> int:
    return sum(1 for line in lower.splitlines() if line.lstrip().startswith(BULLET_PREFIXES))


def is_informational_report(lower: str) -> bool:
    """Return ``True`` for a retrospective statistics / recap post.

    Requires at least two distinct recap markers, a long or list-shaped
    body (line breaks, bullets or many digits), and no live-movement
    phrasing.
    """
    if len(_RECAP_INDEX.distinct_keywords(lower)) < RECAP_MIN_MARKERS:
        return False
    long_form = (
        lower.count("\n") >= RECAP_MIN_LINE_BREAKS
        or _bullet_count(lower) >= RECAP_MIN_BULLETS
        or sum(ch.isdigit() for ch in lower) >= RECAP_MIN_DIGITS
    )
    return long_form and not has_live_movement(lower)


def _is_sign_off(lower: str) -> bool:
    word = lower.strip().strip(".!…").strip()
    return word in SIGN_OFF_WORDS


def is_negative_update(lower: str) -> bool:
    """Return ``True`` for a "nothing observed now" status update.

    Full all-clears are not negative updates, and neither is anything
    with an active-alert marker once cautious "repeat launches possible"
    phrasing has been discounted.
    """
    if not (_NEGATIVE_INDEX.contains(lower) or _is_sign_off(lower)):
        return False
    if _ALL_CLEAR_INDEX.contains(lower):
        return False

    remainder = lower
    for phrase in CAUTIOUS_STATUS_PHRASES:
        remainder = remainder.replace(phrase, " ")
    if _ACTIVE_ALERT_INDEX.contains(remainder):
        return False
    return not any(has_standalone_token(remainder, token) for token in ACTIVE_ALERT_TOKENS)
