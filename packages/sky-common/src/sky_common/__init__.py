"""
sky-common: Shared library for SkySentinel.

Provides the threat data models, configuration management, structured
logging and Prometheus metrics used by the detector engine and the
alerts service.
"""

from sky_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
