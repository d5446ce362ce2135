"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class SeedItem(BaseModel):
    name: str
    stock: int = Field(default=0, ge=0)
    price: int = Field(default=0, ge=0)  # wei
    threshold: int = Field(default=0, ge=0)


class PaperLedgerConfig(BaseModel):
    """Initial state for the in-memory paper ledger."""

    owner: str = "0x00000000000000000000000000000000000000a1"
    staff: list[str] = Field(default_factory=list)
    paused: bool = False
    items: list[SeedItem] = Field(default_factory=list)
    balance: int = 0  # wei held by the contract


class EventLogConfig(BaseModel):
    capacity: int = Field(default=100, ge=1)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    # Active account served by the static identity provider
    account: str = ""

    event_log: EventLogConfig = Field(default_factory=EventLogConfig)
    paper: PaperLedgerConfig = Field(default_factory=PaperLedgerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "LEDGER_INVENTORY_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: if the file exists but is not valid TOML.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            from .errors import ConfigError

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    return Settings(**data)
