"""Per-battery views and the tab registry that cycles between them."""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from .powerlib.sysfs import Device, PowerSupplyManager, Snapshot
from .series import ScalarSeries, SeriesKind

LOGGER = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown battery"


class NoDevicesFound(RuntimeError):
    """Raised when no battery is available to display."""

    def __init__(self, message: str = "Unable to find any batteries installed") -> None:
        super().__init__(message)


class DeviceView:
    """Content of one tab: a battery, its latest snapshot and three charts."""

    __slots__ = ("device", "voltage", "energy_rate", "temperature")

    def __init__(self, device: Device) -> None:
        self.device = device
        self.voltage = ScalarSeries(SeriesKind.VOLTAGE)
        self.energy_rate = ScalarSeries(SeriesKind.ENERGY_RATE)
        self.temperature = ScalarSeries(SeriesKind.TEMPERATURE)
        for series in self.series:
            series.state = device.snapshot.state

    @property
    def snapshot(self) -> Snapshot:
        return self.device.snapshot

    @property
    def series(self) -> tuple[ScalarSeries, ScalarSeries, ScalarSeries]:
        return (self.voltage, self.energy_rate, self.temperature)

    @property
    def title(self) -> str:
        """Tab title: model, then vendor, then serial number."""

        for value in (self.device.model, self.device.vendor, self.device.serial_number):
            if value:
                return value
        LOGGER.debug("Unable to determine a title for %s", self.device.name)
        return UNKNOWN_TITLE

    def update(self, collector: PowerSupplyManager) -> None:
        """Refresh the snapshot and extend the series; does not redraw."""

        collector.refresh(self.device)
        snapshot = self.device.snapshot
        for series in self.series:
            series.state = snapshot.state

        self.voltage.push(snapshot.voltage)
        self.energy_rate.push(snapshot.energy_rate)
        if snapshot.temperature is None:
            self.temperature.set_enabled(False)
        else:
            self.temperature.set_enabled(True)
            self.temperature.push(snapshot.temperature)


class TabRegistry:
    """Ordered, non-empty set of views with a wrapping selection cursor."""

    def __init__(self, views: Sequence[DeviceView]) -> None:
        if not views:
            raise NoDevicesFound()
        self._views = list(views)
        self._selected = 0

    @property
    def views(self) -> tuple[DeviceView, ...]:
        return tuple(self._views)

    @property
    def selected(self) -> int:
        return self._selected

    @property
    def titles(self) -> list[str]:
        return [view.title for view in self._views]

    def __len__(self) -> int:
        return len(self._views)

    def __iter__(self) -> Iterator[DeviceView]:
        return iter(self._views)

    def next(self) -> None:
        self._selected = (self._selected + 1) % len(self._views)

    def previous(self) -> None:
        if self._selected == 0:
            self._selected = len(self._views) - 1
        else:
            self._selected -= 1

    def selected_view(self) -> DeviceView:
        return self._views[self._selected]


def build_registry(collector: PowerSupplyManager) -> TabRegistry:
    """Enumerate batteries once and wrap each in a :class:`DeviceView`."""

    devices = collector.enumerate()
    if not devices:
        LOGGER.error("Unable to find any batteries in system, exiting")
        raise NoDevicesFound()
    LOGGER.debug("Found %d batteries during initialization", len(devices))
    return TabRegistry([DeviceView(device) for device in devices])


__all__ = ["DeviceView", "NoDevicesFound", "TabRegistry", "UNKNOWN_TITLE", "build_registry"]
