"""Power supply telemetry read from the Linux ``power_supply`` sysfs class."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

LOGGER = logging.getLogger(__name__)

DEFAULT_ROOT = Path("/sys/class/power_supply")
UEVENT_PREFIX = "POWER_SUPPLY_"
MICRO = 1_000_000.0


class CollectorError(RuntimeError):
    """Raised when power supply telemetry cannot be read."""


class State(Enum):
    UNKNOWN = "unknown"
    CHARGING = "charging"
    DISCHARGING = "discharging"
    EMPTY = "empty"
    FULL = "full"

    @classmethod
    def from_status(cls, raw: str | None) -> "State":
        value = (raw or "").strip().lower()
        for state in cls:
            if state.value == value:
                return state
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class Technology(Enum):
    UNKNOWN = "unknown"
    LITHIUM_ION = "lithium-ion"
    LITHIUM_POLYMER = "lithium-polymer"
    LITHIUM_IRON_PHOSPHATE = "lithium-iron-phosphate"
    LITHIUM_MANGANESE = "lithium-manganese"
    NICKEL_METAL_HYDRIDE = "nickel-metal-hydride"
    NICKEL_CADMIUM = "nickel-cadmium"

    @classmethod
    def from_sysfs(cls, raw: str | None) -> "Technology":
        return _TECHNOLOGIES.get((raw or "").strip().lower(), cls.UNKNOWN)

    def __str__(self) -> str:
        return self.value


_TECHNOLOGIES = {
    "li-ion": Technology.LITHIUM_ION,
    "li-poly": Technology.LITHIUM_POLYMER,
    "lifepo": Technology.LITHIUM_IRON_PHOSPHATE,
    "life": Technology.LITHIUM_IRON_PHOSPHATE,
    "limn": Technology.LITHIUM_MANGANESE,
    "nimh": Technology.NICKEL_METAL_HYDRIDE,
    "nicd": Technology.NICKEL_CADMIUM,
}


@dataclass(slots=True)
class Snapshot:
    """Readings captured by a single refresh, in volts, watts, watt-hours and °C."""

    state_of_charge: float = 0.0
    state_of_health: float | None = None
    state: State = State.UNKNOWN
    technology: Technology = Technology.UNKNOWN
    cycle_count: int | None = None
    voltage: float = 0.0
    energy_rate: float = 0.0
    energy: float = 0.0
    energy_full: float = 0.0
    energy_full_design: float = 0.0
    temperature: float | None = None
    time_to_full: float | None = None
    time_to_empty: float | None = None


@dataclass(slots=True)
class Device:
    """A battery exposed under the power supply class directory."""

    name: str
    path: Path
    vendor: str | None = None
    model: str | None = None
    serial_number: str | None = None
    snapshot: Snapshot = field(default_factory=Snapshot)


def parse_uevent(text: str) -> dict[str, str]:
    """Parse ``POWER_SUPPLY_<KEY>=<value>`` lines into a lower-cased mapping."""

    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or "=" not in line:
            continue
        key, _, value = line.partition("=")
        if key.startswith(UEVENT_PREFIX):
            key = key[len(UEVENT_PREFIX) :]
        values[key.lower()] = value.strip()
    return values


def _number(values: Mapping[str, str], key: str) -> float | None:
    raw = values.get(key)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        LOGGER.debug("Ignoring non-numeric %s=%r", key, raw)
        return None


def _micro(values: Mapping[str, str], *keys: str) -> float | None:
    for key in keys:
        value = _number(values, key)
        if value is not None:
            return value / MICRO
    return None


def _text(values: Mapping[str, str], key: str) -> str | None:
    value = values.get(key, "").strip()
    return value or None


def snapshot_from_uevent(values: Mapping[str, str]) -> Snapshot:
    """Convert parsed uevent values into a :class:`Snapshot`."""

    state = State.from_status(values.get("status"))
    voltage = _micro(values, "voltage_now", "voltage_avg") or 0.0
    # Charge counters (µAh) are converted to energy with the design voltage when known.
    design_voltage = _micro(values, "voltage_min_design", "voltage_max_design") or voltage

    def energy(energy_key: str, charge_key: str) -> float:
        value = _micro(values, energy_key)
        if value is not None:
            return value
        charge = _micro(values, charge_key)
        if charge is not None:
            return charge * design_voltage
        return 0.0

    energy_now = energy("energy_now", "charge_now")
    energy_full = energy("energy_full", "charge_full")
    energy_full_design = energy("energy_full_design", "charge_full_design")

    rate = _micro(values, "power_now", "power_avg")
    if rate is None:
        current = _micro(values, "current_now", "current_avg")
        rate = current * voltage if current is not None else 0.0
    rate = abs(rate)

    capacity = _number(values, "capacity")
    if capacity is None:
        capacity = energy_now / energy_full * 100.0 if energy_full > 0 else 0.0
    state_of_charge = min(max(capacity, 0.0), 100.0)

    health = None
    if energy_full > 0 and energy_full_design > 0:
        health = energy_full / energy_full_design * 100.0

    temperature = _number(values, "temp")
    if temperature is not None:
        temperature /= 10.0

    cycle_count = _number(values, "cycle_count")

    time_to_full = None
    time_to_empty = None
    if rate > 0:
        if state is State.CHARGING and energy_full > energy_now:
            time_to_full = (energy_full - energy_now) / rate * 3600.0
        elif state is State.DISCHARGING:
            time_to_empty = energy_now / rate * 3600.0

    return Snapshot(
        state_of_charge=state_of_charge,
        state_of_health=health,
        state=state,
        technology=Technology.from_sysfs(values.get("technology")),
        cycle_count=int(cycle_count) if cycle_count is not None else None,
        voltage=voltage,
        energy_rate=rate,
        energy=energy_now,
        energy_full=energy_full,
        energy_full_design=energy_full_design,
        temperature=temperature,
        time_to_full=time_to_full,
        time_to_empty=time_to_empty,
    )


class PowerSupplyManager:
    """Enumerate and refresh batteries below *root*."""

    def __init__(self, root: Path = DEFAULT_ROOT) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def enumerate(self) -> list[Device]:
        """Return every battery found under the root, sorted by name.

        Raises CollectorError when the class directory is unavailable.
        """

        if not self._root.is_dir():
            raise CollectorError(f"Power supply interface is unavailable: {self._root}")
        try:
            entries = sorted(self._root.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            raise CollectorError(f"Failed to list {self._root}: {exc}") from exc

        devices: list[Device] = []
        for entry in entries:
            kind = _read_attribute(entry / "type")
            if kind is None:
                try:
                    kind = self._read_uevent(entry).get("type")
                except CollectorError as exc:
                    LOGGER.debug("Skipping unidentified power supply %s: %s", entry.name, exc)
                    continue
            if (kind or "").lower() != "battery":
                continue
            values = self._read_uevent(entry)
            # Peripheral batteries (mice, headsets) report scope=Device.
            if values.get("scope", "").lower() == "device":
                LOGGER.debug("Skipping peripheral battery %s", entry.name)
                continue
            devices.append(
                Device(
                    name=entry.name,
                    path=entry,
                    vendor=_text(values, "manufacturer"),
                    model=_text(values, "model_name"),
                    serial_number=_text(values, "serial_number"),
                    snapshot=snapshot_from_uevent(values),
                )
            )
        LOGGER.info("Found %d batteries under %s", len(devices), self._root)
        return devices

    def refresh(self, device: Device) -> None:
        """Re-read *device* and replace its snapshot in place."""

        device.snapshot = snapshot_from_uevent(self._read_uevent(device.path))

    def _read_uevent(self, path: Path) -> dict[str, str]:
        try:
            text = (path / "uevent").read_text(encoding="utf-8")
        except OSError as exc:
            raise CollectorError(f"Failed to read {path.name}: {exc}") from exc
        return parse_uevent(text)


def _read_attribute(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return None


__all__ = [
    "CollectorError",
    "DEFAULT_ROOT",
    "Device",
    "PowerSupplyManager",
    "Snapshot",
    "State",
    "Technology",
    "parse_uevent",
    "snapshot_from_uevent",
]
