"""
Alert text rendering for the SkySentinel detector.

Produces the plain-text message broadcast to subscribers:

    🔁 ПОВТОРНО                       (urgent re-alerts only)
    ‼️🚀 Балістика + 🔺 Шахед / дрон · 🟠 МІСТО
    ———
    <original text>
    — 📡 <source title>
"""

from __future__ import annotations

from sky_common.models import NATIONWIDE_TAG, Proximity, ThreatKind

MAX_TEXT_CHARS = 3200
REPEAT_BANNER = "🔁 ПОВТОРНО"
STATUS_HEADER = "ℹ️ Статус"
SEPARATOR = "———"


def _truncate(text: str) -> str:
    return text[:MAX_TEXT_CHARS]


def _footer(title: str) -> str:
    return f"— 📡 {title}"


def format_alert(
    threats: list[ThreatKind],
    proximity: Proximity,
    title: str,
    text: str,
    *,
    urgent: bool = False,
    nationwide: bool = False,
) -> str:
    """Render a forwarded threat alert.

    Args:
        threats: Kinds to show, in the given order.
        proximity: Resolved proximity; its tag is shown unless nationwide.
        title: Source channel display title.
        text: Original message text.
        urgent: Prefix the repeat banner.
        nationwide: Show the nationwide tag instead of the proximity tag.
    """
    header = " + ".join(kind.display for kind in threats)
    tag = NATIONWIDE_TAG if nationwide else proximity.tag
    if tag:
        header = f"{header} · {tag}"

    lines: list[str] = []
    if urgent:
        lines.append(REPEAT_BANNER)
    lines.extend([header, SEPARATOR, _truncate(text), _footer(title)])
    return "\n".join(lines)


def format_status(title: str, text: str) -> str:
    """Render a negative-status update."""
    return "\n".join([STATUS_HEADER, SEPARATOR, _truncate(text), _footer(title)])
