"""Configuration file handling for power-tui."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .powerlib.sysfs import DEFAULT_ROOT
from .units import Units

DEFAULT_CONFIG_DIR = Path("~/.config/power_tui").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_TICK_INTERVAL = 1.0


def parse_interval(raw: Any) -> float:
    """Return *raw* as a positive number of seconds or raise ValueError."""

    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{raw} isn't a positive number") from None
    if not value > 0 or value == float("inf"):
        raise ValueError(f"{raw} isn't a positive number")
    return value


@dataclass(slots=True)
class AppConfig:
    """Settings consumed by the dashboard."""

    tick_interval: float = DEFAULT_TICK_INTERVAL
    units: Units = Units.HUMAN
    power_supply_root: Path = field(default_factory=lambda: DEFAULT_ROOT)

    def __post_init__(self) -> None:
        self.tick_interval = parse_interval(self.tick_interval)
        self.units = Units.parse(self.units)
        self.power_supply_root = Path(self.power_supply_root)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the config to primitive types for YAML dumping."""
        return {
            "tick_interval": self.tick_interval,
            "units": self.units.value,
            "power_supply_root": str(self.power_supply_root),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        unknown = set(data) - {"tick_interval", "units", "power_supply_root"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(
            tick_interval=data.get("tick_interval", DEFAULT_TICK_INTERVAL),
            units=data.get("units", Units.HUMAN),
            power_supply_root=data.get("power_supply_root", DEFAULT_ROOT),
        )


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from *path* or fall back to the default location."""
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        return AppConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping")
    return AppConfig.from_dict(data)


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Persist *config* as YAML to *path* (defaulting to the standard location)."""
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_dict(), handle, sort_keys=False)
    return config_path


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_TICK_INTERVAL",
    "load_config",
    "parse_interval",
    "save_config",
]
