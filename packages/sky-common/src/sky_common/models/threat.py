"""
Threat taxonomy models for SkySentinel.

Defines the closed set of threat categories recognised in alert
channel posts, their display metadata (icon, Ukrainian label),
specificity ranking and dedup signature bits, plus the ordered
proximity levels used for location relevance.
"""

from __future__ import annotations

import enum


class ThreatKind(str, enum.Enum):
    """Threat category of a channel message.

    The enum value is the stable ASCII interchange name used when
    talking to the external verifier.
    """

    BALLISTIC = "Ballistic"
    HYPERSONIC = "Hypersonic"
    CRUISE_MISSILE = "CruiseMissile"
    GUIDED_BOMB = "GuidedBomb"
    MISSILE = "Missile"
    SHAHED = "Shahed"
    RECON_DRONE = "ReconDrone"
    AIRCRAFT = "Aircraft"
    ALL_CLEAR = "AllClear"
    OTHER = "Other"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def specificity(self) -> int:
        """Rank used to pick the kind that represents a multi-kind message."""
        return _SPECIFICITY[self]

    @property
    def bit(self) -> int:
        """Distinct power of two used in dedup signatures."""
        return _BITS[self]

    @property
    def variant_name(self) -> str:
        return self.value

    @property
    def display(self) -> str:
        """``icon label`` as rendered in alert headers."""
        return f"{self.icon} {self.label}"

    @classmethod
    def from_variant_name(cls, name: str) -> ThreatKind | None:
        """Parse an interchange name case-insensitively.

        Accepts the enum values plus the snake-case aliases a model is
        likely to answer with. Returns ``None`` for anything else.
        """
        return _BY_NAME.get(name.strip().lower())


_ICONS: dict[ThreatKind, str] = {
    ThreatKind.BALLISTIC: "‼️🚀",
    ThreatKind.HYPERSONIC: "‼️⚡",
    ThreatKind.CRUISE_MISSILE: "🚀",
    ThreatKind.GUIDED_BOMB: "💣",
    ThreatKind.MISSILE: "🚀",
    ThreatKind.SHAHED: "🔺",
    ThreatKind.RECON_DRONE: "🛸",
    ThreatKind.AIRCRAFT: "✈️",
    ThreatKind.ALL_CLEAR: "✅",
    ThreatKind.OTHER: "⚠️",
}

_LABELS: dict[ThreatKind, str] = {
    ThreatKind.BALLISTIC: "Балістика",
    ThreatKind.HYPERSONIC: "Гіперзвук",
    ThreatKind.CRUISE_MISSILE: "Крилата ракета",
    ThreatKind.GUIDED_BOMB: "КАБ",
    ThreatKind.MISSILE: "Ракета",
    ThreatKind.SHAHED: "Шахед / дрон",
    ThreatKind.RECON_DRONE: "Розвідувальний БПЛА",
    ThreatKind.AIRCRAFT: "Авіація",
    ThreatKind.ALL_CLEAR: "Відбій загрози",
    ThreatKind.OTHER: "Загроза",
}

_SPECIFICITY: dict[ThreatKind, int] = {
    ThreatKind.ALL_CLEAR: 6,
    ThreatKind.HYPERSONIC: 5,
    ThreatKind.BALLISTIC: 4,
    ThreatKind.CRUISE_MISSILE: 3,
    ThreatKind.GUIDED_BOMB: 3,
    ThreatKind.SHAHED: 3,
    ThreatKind.RECON_DRONE: 2,
    ThreatKind.AIRCRAFT: 2,
    ThreatKind.MISSILE: 1,
    ThreatKind.OTHER: 0,
}

_BITS: dict[ThreatKind, int] = {kind: 1 << index for index, kind in enumerate(ThreatKind)}

_BY_NAME: dict[str, ThreatKind] = {
    "ballistic": ThreatKind.BALLISTIC,
    "hypersonic": ThreatKind.HYPERSONIC,
    "cruisemissile": ThreatKind.CRUISE_MISSILE,
    "cruise_missile": ThreatKind.CRUISE_MISSILE,
    "guidedbomb": ThreatKind.GUIDED_BOMB,
    "guided_bomb": ThreatKind.GUIDED_BOMB,
    "kab": ThreatKind.GUIDED_BOMB,
    "missile": ThreatKind.MISSILE,
    "shahed": ThreatKind.SHAHED,
    "recondrone": ThreatKind.RECON_DRONE,
    "recon_drone": ThreatKind.RECON_DRONE,
    "aircraft": ThreatKind.AIRCRAFT,
    "allclear": ThreatKind.ALL_CLEAR,
    "all_clear": ThreatKind.ALL_CLEAR,
    "other": ThreatKind.OTHER,
}

# Kinds that carry no actionable threat on their own.
TRIVIAL_KINDS: frozenset[ThreatKind] = frozenset({ThreatKind.ALL_CLEAR, ThreatKind.OTHER})

# Missile-family kinds a generic "rocket" report may be refined into.
MISSILE_FAMILY: frozenset[ThreatKind] = frozenset(
    {
        ThreatKind.BALLISTIC,
        ThreatKind.HYPERSONIC,
        ThreatKind.CRUISE_MISSILE,
        ThreatKind.GUIDED_BOMB,
    }
)


class Proximity(enum.IntEnum):
    """How close a threat is to the configured observer location."""

    NONE = 0
    OBLAST = 1
    CITY = 2
    DISTRICT = 3

    @property
    def tag(self) -> str:
        """Header tag for this level (empty for ``NONE``)."""
        return _PROXIMITY_TAGS[self]


_PROXIMITY_TAGS: dict[Proximity, str] = {
    Proximity.NONE: "",
    Proximity.OBLAST: "🟡 ОБЛАСТЬ",
    Proximity.CITY: "🟠 МІСТО",
    Proximity.DISTRICT: "🔴 РАЙОН",
}

NATIONWIDE_TAG = "🟣 ВСЯ УКРАЇНА"
