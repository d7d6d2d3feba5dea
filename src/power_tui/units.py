"""Display unit systems and value formatting."""

from __future__ import annotations

from enum import Enum

KELVIN_OFFSET = 273.15
JOULES_PER_WATT_HOUR = 3600.0
NOT_AVAILABLE = "N/A"


class Units(Enum):
    """Measurement units used for display; storage is always °C and Wh."""

    HUMAN = "human"
    SI = "si"

    @classmethod
    def parse(cls, raw: "str | Units") -> "Units":
        if isinstance(raw, Units):
            return raw
        value = str(raw).strip().lower()
        for units in cls:
            if units.value == value:
                return units
        choices = ", ".join(units.value for units in cls)
        raise ValueError(f"Unknown units '{raw}', expected one of: {choices}")

    @property
    def temperature_abbreviation(self) -> str:
        return "°C" if self is Units.HUMAN else "K"

    @property
    def energy_abbreviation(self) -> str:
        return "Wh" if self is Units.HUMAN else "J"

    def temperature(self, celsius: float) -> float:
        return celsius if self is Units.HUMAN else celsius + KELVIN_OFFSET

    def energy(self, watt_hours: float) -> float:
        return watt_hours if self is Units.HUMAN else watt_hours * JOULES_PER_WATT_HOUR

    def __str__(self) -> str:
        return self.value


def format_temperature(celsius: float | None, units: Units) -> str:
    if celsius is None:
        return NOT_AVAILABLE
    return f"{units.temperature(celsius):.2f} {units.temperature_abbreviation}"


def format_energy(watt_hours: float, units: Units) -> str:
    return f"{units.energy(watt_hours):.2f} {units.energy_abbreviation}"


def format_duration(seconds: float | None) -> str:
    """Render *seconds* as ``1d 2h 3m 4s``, dropping zero components."""

    if seconds is None:
        return NOT_AVAILABLE
    remaining = max(int(seconds), 0)
    if remaining == 0:
        return "0s"
    parts = []
    for suffix, size in (("d", 86_400), ("h", 3_600), ("m", 60), ("s", 1)):
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count}{suffix}")
    return " ".join(parts)


__all__ = [
    "NOT_AVAILABLE",
    "Units",
    "format_duration",
    "format_energy",
    "format_temperature",
]
