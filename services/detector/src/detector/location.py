"""
Location relevance for the SkySentinel detector.

Decides how close a threat is to the configured observer: district,
city, oblast or not at all. Also recognises nationwide phrasing and
messages that explicitly name some other region, which must never
inherit the observer's location from context.
"""

from __future__ import annotations

from dataclasses import dataclass

from sky_common.models import LocationConfig, Proximity

from detector.keyword_index import KeywordIndex, has_bounded_phrase, has_standalone_token
from detector.threat_keywords import NATIONWIDE_KEYWORDS, NON_LOCAL_REGIONS, OBLAST_WORDS

_NATIONWIDE_INDEX = KeywordIndex.from_stems(NATIONWIDE_KEYWORDS)
_NON_LOCAL_INDEX = KeywordIndex.from_stems(NON_LOCAL_REGIONS)
_OBLAST_WORD_INDEX = KeywordIndex.from_stems(OBLAST_WORDS)


def is_nationwide(lower: str) -> bool:
    """Return ``True`` if the message covers the whole country."""
    return _NATIONWIDE_INDEX.contains(lower)


def mentions_other_region(lower: str) -> bool:
    return _NON_LOCAL_INDEX.contains(lower)


@dataclass(frozen=True)
class LocationMatch:
    """Resolved location relevance of one message."""

    proximity: Proximity
    nationwide: bool = False
    explicit_non_local: bool = False


class LocationResolver:
    """Matches message text against a :class:`LocationConfig`.

    Single-word stems match as substrings. Stems containing whitespace
    ("на київ") match only between non-letters, so ``"на київ"`` stays
    silent inside ``"на київщину"``.

    Args:
        location: The observer's district / city / oblast match strings.
    """

    def __init__(self, location: LocationConfig) -> None:
        self.location = location
        self._index: KeywordIndex[Proximity] = KeywordIndex.from_table(
            (
                (Proximity.DISTRICT, location.district),
                (Proximity.CITY, location.city),
                (Proximity.OBLAST, location.oblast),
            )
        )

    def _levels(self, lower: str) -> set[Proximity]:
        """Every proximity level with at least one matching stem."""
        levels: set[Proximity] = set()
        for hit in self._index.search(lower):
            if any(ch.isspace() for ch in hit.keyword) and not has_bounded_phrase(
                lower, hit.keyword
            ):
                continue
            levels.update(hit.tags)
        return levels

    def check(self, lower: str) -> Proximity:
        """Return the highest proximity level whose stems match *lower*."""
        return max(self._levels(lower), default=Proximity.NONE)

    def _check_widened(self, lower: str) -> Proximity:
        """Like :meth:`check`, but a city mentioned together with the
        oblast ("на київ та область") counts as oblast-wide."""
        levels = self._levels(lower)
        proximity = max(levels, default=Proximity.NONE)
        if proximity is Proximity.CITY and (
            Proximity.OBLAST in levels
            or _OBLAST_WORD_INDEX.contains(lower)
            or has_standalone_token(lower, "обл")
        ):
            return Proximity.OBLAST
        return proximity

    def resolve(self, lower: str, title: str = "") -> LocationMatch:
        """Resolve proximity for a message, falling back to the source title.

        Args:
            lower: Lowercased message text.
            title: Display title of the source channel.

        Returns:
            The final :class:`LocationMatch`.
        """
        nationwide = is_nationwide(lower)
        text_proximity = self._check_widened(lower)
        explicit_non_local = text_proximity is Proximity.NONE and mentions_other_region(lower)
        title_lower = title.lower()

        if nationwide:
            proximity = text_proximity or self._check_widened(title_lower) or Proximity.OBLAST
        elif text_proximity:
            proximity = text_proximity
        elif explicit_non_local:
            proximity = Proximity.NONE
        else:
            proximity = self._check_widened(title_lower)

        return LocationMatch(
            proximity=Proximity(proximity),
            nationwide=nationwide,
            explicit_non_local=explicit_non_local,
        )
