"""
Observer location model for SkySentinel.

Holds the three tiers of lowercase match strings (district, city,
oblast) that decide whether a threat is relevant to the observer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sky_common.config import Settings, split_csv


class LocationConfig(BaseModel):
    """District / city / oblast match strings, both language forms.

    Attributes:
        district: District-level stems or phrases.
        city: City-level stems or phrases.
        oblast: Oblast-level stems or phrases.
    """

    model_config = ConfigDict(frozen=True)

    district: tuple[str, ...] = Field(default=(), description="District-level match strings.")
    city: tuple[str, ...] = Field(default=(), description="City-level match strings.")
    oblast: tuple[str, ...] = Field(default=(), description="Oblast-level match strings.")

    @field_validator("district", "city", "oblast", mode="after")
    @classmethod
    def _normalise(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip().lower() for item in value if item.strip())

    @classmethod
    def from_csv(cls, *, district: str = "", city: str = "", oblast: str = "") -> LocationConfig:
        """Build from comma-separated strings as found in the environment."""
        return cls(
            district=tuple(split_csv(district)),
            city=tuple(split_csv(city)),
            oblast=tuple(split_csv(oblast)),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> LocationConfig:
        return cls.from_csv(
            district=settings.district,
            city=settings.city,
            oblast=settings.oblast,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.district or self.city or self.oblast)
