"""
Shared Pydantic and enum data models for SkySentinel.

This package contains the threat taxonomy, proximity levels, and the
observer location configuration.
"""

from sky_common.models.location import LocationConfig
from sky_common.models.threat import (
    MISSILE_FAMILY,
    NATIONWIDE_TAG,
    TRIVIAL_KINDS,
    Proximity,
    ThreatKind,
)

__all__ = [
    "LocationConfig",
    "MISSILE_FAMILY",
    "NATIONWIDE_TAG",
    "Proximity",
    "ThreatKind",
    "TRIVIAL_KINDS",
]
