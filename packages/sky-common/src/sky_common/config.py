"""
Environment-based configuration management for SkySentinel.

Uses pydantic-settings to load configuration values from environment
variables and .env files. The detector engine and the alerts service
both read their settings from this module.

All environment variables are prefixed with ``SKY_`` to avoid collisions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: str) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Central configuration loaded from ``SKY_``-prefixed environment variables.

    Attributes:
        district: Comma-separated district-level match strings.
        city: Comma-separated city-level match strings.
        oblast: Comma-separated oblast-level match strings.
        dedup_window_s: Lifetime of a dedup entry since its last refresh.
        context_window_s: Lifetime of a per-source context entry.
        urgent_cooldown_s: Minimum gap between urgent re-alerts from the
            same source.
        negative_status_cooldown_s: Minimum gap between forwarded
            negative-status updates from one source.
        forward_all_threats: Forward threats even without a location match.
        verifier_enabled: Whether the external LLM verifier is consulted.
        verifier_endpoint: Base URL of the OpenAI-compatible server.
        verifier_model: Model name sent with each verification request.
        verifier_timeout_s: Hard timeout for one verification call.
        bot_token: Telegram Bot API token used for broadcasting.
        broadcast_chat_ids: Comma-separated destination chat ids.
        webhook_url: Optional JSON webhook receiving every alert.
        api_host: Bind address for the ingestion API.
        api_port: Bind port for the ingestion API.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Render logs as JSON lines instead of console output.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Location ──
    district: str = Field(default="", description="District-level match strings.")
    city: str = Field(default="", description="City-level match strings.")
    oblast: str = Field(default="", description="Oblast-level match strings.")

    # ── Filter windows ──
    dedup_window_s: float = Field(
        default=180.0,
        ge=0.0,
        description="Dedup entry lifetime in seconds.",
    )
    context_window_s: float = Field(
        default=300.0,
        gt=0.0,
        description="Context entry lifetime in seconds.",
    )
    urgent_cooldown_s: float = Field(
        default=0.0,
        ge=0.0,
        description="Same-source urgent re-alert cooldown in seconds.",
    )
    negative_status_cooldown_s: float = Field(
        default=120.0,
        ge=0.0,
        description="Negative-status forward cooldown in seconds.",
    )
    forward_all_threats: bool = Field(
        default=False,
        description="Forward threats even without a location match.",
    )

    # ── Verifier ──
    verifier_enabled: bool = Field(default=False, description="Consult the LLM verifier.")
    verifier_endpoint: str = Field(
        default="http://127.0.0.1:11434",
        description="OpenAI-compatible server base URL.",
    )
    verifier_model: str = Field(default="qwen2.5:7b", description="Verifier model name.")
    verifier_timeout_s: float = Field(
        default=3.0,
        gt=0.0,
        le=60.0,
        description="Verifier call timeout in seconds.",
    )

    # ── Broadcasting ──
    bot_token: str = Field(default="", description="Telegram Bot API token.")
    broadcast_chat_ids: str = Field(default="", description="Destination chat ids.")
    webhook_url: str = Field(default="", description="Optional alert webhook URL.")

    # ── API ──
    api_host: str = Field(default="0.0.0.0", description="Ingestion API bind address.")
    api_port: int = Field(default=8010, ge=1, le=65535, description="Ingestion API bind port.")

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    json_logs: bool = Field(default=True, description="Emit JSON log lines.")

    @property
    def chat_ids(self) -> list[str]:
        """Broadcast destinations as a list."""
        return split_csv(self.broadcast_chat_ids)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
