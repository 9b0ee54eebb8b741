"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class SynthesisConfig(BaseModel):
    """Simulated alert synthesis — timer period, odds, and position jitter."""

    enabled: bool = True
    interval_secs: float = Field(default=15.0, gt=0)
    fire_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    jitter_deg: float = Field(default=0.005, ge=0.0)


class MapConfig(BaseModel):
    """Map surface configuration."""

    alert_radius_m: float = 200.0
    settle_delay_secs: float = 0.1
    default_center: tuple[float, float] = (6.8, 80.8)
    default_zoom: int = 12
    # Device-detail map and dashboard mini-map cameras.
    device_zoom: int = 14
    mini_zoom: int = 11
    width: str = "100%"
    height: str = "100%"
    tiles: str = "https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}{r}.png"
    attribution: str = (
        '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
        'contributors &copy; <a href="https://carto.com/attributions">CARTO</a>'
    )
    max_zoom: int = 20


class LedgerConfig(BaseModel):
    """Alert history bounds. ``None`` keeps every alert for the session."""

    max_alerts: int | None = Field(default=None, gt=0)


class DashboardConfig(BaseModel):
    """HTTP dashboard configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    refresh_ms: int = 5000
    recent_alerts: int = 3


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    # Library loggers held at WARNING or above regardless of ``level``.
    quiet: list[str] = Field(default_factory=lambda: ["aiohttp.access"])


class Settings(BaseModel):
    """Root settings container."""

    synthesis: SynthesisConfig = SynthesisConfig()
    map: MapConfig = MapConfig()
    ledger: LedgerConfig = LedgerConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
