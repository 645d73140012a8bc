"""
Aho-Corasick keyword index for the SkySentinel detector.

Every stem table is loaded into one pyahocorasick ``Automaton`` so a
message is scanned for all of a table's stems in a single pass. Each
stem carries the tags it belongs to (a ``ThreatKind``, a proximity
level, a cue name) as payload; a stem listed under several tags
reports all of them.

Stems are plain substrings. Matches that must sit on word boundaries
(standalone tokens, multi-word phrases) are checked afterwards with
compiled patterns cached per stem.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Generic, TypeVar

import ahocorasick
import structlog

logger = structlog.get_logger()

TagT = TypeVar("TagT", bound=Hashable)


@dataclass(frozen=True)
class KeywordHit(Generic[TagT]):
    """One stem occurrence.

    Attributes:
        keyword: The stem that matched.
        tags: Every tag the stem was registered under, in insertion order.
        end_index: Index of the last matched character in the haystack.
    """

    keyword: str
    tags: tuple[TagT, ...]
    end_index: int

    @property
    def start_index(self) -> int:
        return self.end_index - len(self.keyword) + 1


class KeywordIndex(Generic[TagT]):
    """Exact multi-pattern matcher over lowercase stems.

    Args:
        entries: ``(stem, tag)`` pairs. Empty stems are ignored.
    """

    def __init__(self, entries: Iterable[tuple[str, TagT]] = ()) -> None:
        self._automaton: ahocorasick.Automaton | None = None
        self._pattern_count = 0
        self.build(entries)

    @classmethod
    def from_table(cls, table: Iterable[tuple[TagT, Iterable[str]]]) -> KeywordIndex[TagT]:
        """Index a ``(tag, stems)`` table such as ``THREAT_KEYWORDS``."""
        return cls((stem, tag) for tag, stems in table for stem in stems)

    @classmethod
    def from_stems(cls, stems: Iterable[str]) -> KeywordIndex[str]:
        """Index a flat stem list; every stem is its own tag."""
        return cls((stem, stem) for stem in stems)

    # ── public API ──

    def build(self, entries: Iterable[tuple[str, TagT]]) -> None:
        """Build (or rebuild) the automaton from ``(stem, tag)`` pairs."""
        grouped: dict[str, list[TagT]] = {}
        for stem, tag in entries:
            key = stem.lower()
            if not key:
                continue
            tags = grouped.setdefault(key, [])
            if tag not in tags:
                tags.append(tag)

        if grouped:
            automaton = ahocorasick.Automaton()
            for key, tags in grouped.items():
                automaton.add_word(key, (key, tuple(tags)))
            automaton.make_automaton()
            self._automaton = automaton
        else:
            self._automaton = None
        self._pattern_count = len(grouped)
        logger.debug("keyword_index_built", pattern_count=self._pattern_count)

    def search(self, lower: str) -> list[KeywordHit[TagT]]:
        """Every stem occurrence in *lower* (already lowercased)."""
        if self._automaton is None or not lower:
            return []
        return [
            KeywordHit(keyword=keyword, tags=tags, end_index=end_index)
            for end_index, (keyword, tags) in self._automaton.iter(lower)
        ]

    def contains(self, lower: str) -> bool:
        """Return ``True`` if any stem occurs in *lower*."""
        if self._automaton is None or not lower:
            return False
        return next(self._automaton.iter(lower), None) is not None

    def tags(self, lower: str) -> set[TagT]:
        """Tags of every stem occurring in *lower*."""
        return {tag for hit in self.search(lower) for tag in hit.tags}

    def distinct_keywords(self, lower: str) -> set[str]:
        """The distinct stems occurring in *lower*."""
        return {hit.keyword for hit in self.search(lower)}

    @property
    def pattern_count(self) -> int:
        return self._pattern_count

    @property
    def is_ready(self) -> bool:
        return self._automaton is not None


# ── boundary checks ──


@lru_cache(maxsize=None)
def standalone_pattern(token: str) -> re.Pattern[str]:
    """*token* not glued to a letter, digit or underscore on either side."""
    return re.compile(rf"(?<!\w){re.escape(token)}(?!\w)")


@lru_cache(maxsize=None)
def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """*phrase* not glued to a letter on either side; digits are boundaries."""
    return re.compile(rf"(?<![^\W\d_]){re.escape(phrase)}(?![^\W\d_])")


def has_standalone_token(lower: str, token: str) -> bool:
    """Return ``True`` if *token* occurs as a standalone token.

    String edges count as boundaries, so ``"кр"`` matches in
    ``"2х кр"`` but not in ``"кролевець"``.
    """
    return standalone_pattern(token).search(lower) is not None


def has_bounded_phrase(lower: str, phrase: str) -> bool:
    """Return ``True`` if *phrase* occurs between non-letters.

    ``"на київ"`` does not match inside ``"на київщину"``.
    """
    return phrase_pattern(phrase).search(lower) is not None
