"""Fixed-capacity scrolling series backing the dashboard charts."""

from __future__ import annotations

import math
from collections import deque
from enum import Enum
from typing import Deque

from .powerlib.sysfs import State
from .units import Units

RESOLUTION = 512
STEP = 0.5
NOT_AVAILABLE = "NOT AVAILABLE"


class SeriesKind(Enum):
    VOLTAGE = "voltage"
    ENERGY_RATE = "energy_rate"
    TEMPERATURE = "temperature"


class ScalarSeries:
    """Scrolling window of the latest readings for one measured quantity.

    The newest sample always sits at ``x = capacity / 2`` and each older sample
    sits ``STEP`` further left, so the chart scrolls by one step per push no
    matter how much wall time passed between readings. When the window is full
    the oldest sample is evicted first.
    """

    __slots__ = ("kind", "state", "_capacity", "_values", "_enabled", "_latest", "_min", "_max")

    def __init__(self, kind: SeriesKind, *, capacity: int = RESOLUTION) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.kind = kind
        self.state = State.UNKNOWN
        self._capacity = capacity
        self._values: Deque[float] = deque(maxlen=capacity)
        self._enabled = True
        self._latest = 0.0
        self._min = 100.0
        self._max = 0.0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def latest(self) -> float:
        return self._latest

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float) -> None:
        """Append a reading, evicting the oldest one when the window is full."""

        value = float(value)
        self._values.append(value)
        self._latest = value
        self._min = min(self._values)
        self._max = max(self._values)

    def set_enabled(self, flag: bool) -> None:
        """Mark the sensor as present or absent; history is kept either way."""

        self._enabled = bool(flag)

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    @property
    def points(self) -> tuple[tuple[float, float], ...]:
        """Chart coordinates, oldest first."""

        head = self._capacity / 2
        last = len(self._values) - 1
        return tuple((head - STEP * (last - index), value) for index, value in enumerate(self._values))

    @property
    def x_bounds(self) -> tuple[float, float]:
        return (0.0, self._capacity / 2)

    @property
    def y_bounds(self) -> tuple[float, float]:
        """Axis bounds padded by one unit so the line never touches the border."""

        if not self._enabled:
            return (0.0, 0.0)
        if not self._values:
            return (0.0, 1.0)
        lower = float(math.floor(self._min - 1.0))
        upper = float(math.ceil(self._max + 1.0))
        return (lower, upper)

    def y_labels(self, units: Units = Units.HUMAN) -> tuple[str, str]:
        lower, upper = self.y_bounds
        if self.kind is SeriesKind.TEMPERATURE and self._enabled:
            lower, upper = units.temperature(lower), units.temperature(upper)
        return (f"{lower:2.0f}", f"{upper:2.0f}")

    @property
    def title(self) -> str:
        if self.kind is SeriesKind.VOLTAGE:
            return "Voltage"
        if self.kind is SeriesKind.TEMPERATURE:
            return "Temperature"
        if self.state is State.CHARGING:
            return "Charging with"
        if self.state is State.DISCHARGING:
            return "Discharging with"
        return "Consumption"

    def unit_label(self, units: Units = Units.HUMAN) -> str:
        if self.kind is SeriesKind.VOLTAGE:
            return "V"
        if self.kind is SeriesKind.ENERGY_RATE:
            return "W"
        return units.temperature_abbreviation

    def current_value_display(self, units: Units = Units.HUMAN) -> str:
        if not self._enabled:
            return NOT_AVAILABLE
        value = self._latest
        if self.kind is SeriesKind.TEMPERATURE:
            value = units.temperature(value)
        return f"{value:.2f} {self.unit_label(units)}"

    def __repr__(self) -> str:
        return (
            f"ScalarSeries(kind={self.kind.value}, points={len(self._values)}, "
            f"enabled={self._enabled}, latest={self._latest})"
        )


__all__ = ["NOT_AVAILABLE", "RESOLUTION", "STEP", "ScalarSeries", "SeriesKind"]
