from pathlib import Path

import pytest

from power_tui.controller import Controller
from power_tui.events import ChannelClosed, Event, EventHandler, KeyQueue
from power_tui.powerlib.sysfs import CollectorError, Device, Snapshot
from power_tui.views import DeviceView, TabRegistry


class FakeCollector:
    def __init__(self, fail_on: int | None = None) -> None:
        self.refreshes = 0
        self._fail_on = fail_on

    def refresh(self, device: Device) -> None:
        self.refreshes += 1
        if self._fail_on is not None and self.refreshes >= self._fail_on:
            raise CollectorError("transient read failure")
        device.snapshot = Snapshot(voltage=12.0 + self.refreshes, energy_rate=4.0, temperature=None)


class FakeEvents:
    """Scripted stand-in for :class:`EventHandler`."""

    def __init__(self, events) -> None:
        self._events = list(events)
        self.started = False
        self.shutdowns = 0

    def start(self) -> None:
        self.started = True

    def next(self, timeout=None) -> Event:
        if not self._events:
            raise ChannelClosed("All event producers are gone")
        return self._events.pop(0)

    def shutdown(self, timeout=None) -> None:
        self.shutdowns += 1


class FakeRenderer:
    def __init__(self) -> None:
        self.frames: list[int] = []
        self.closed_with: list[BaseException | None] = []

    def draw(self, registry: TabRegistry) -> None:
        self.frames.append(registry.selected)

    def finish(self, error: BaseException | None = None) -> None:
        self.closed_with.append(error)


def make_registry(count: int = 3) -> TabRegistry:
    return TabRegistry([DeviceView(Device(name=f"BAT{i}", path=Path(f"/x/BAT{i}"))) for i in range(count)])


def test_exit_terminates_loop_without_refreshing() -> None:
    collector = FakeCollector()
    events = FakeEvents([Event.EXIT, Event.TICK])
    renderer = FakeRenderer()

    Controller(make_registry(), collector, events, renderer).run()

    assert collector.refreshes == 0
    assert events.started
    assert events.shutdowns == 1
    assert renderer.closed_with == [None]
    assert renderer.frames == [0]


def test_navigation_only_moves_selection() -> None:
    collector = FakeCollector()
    registry = make_registry()
    events = FakeEvents([Event.PREVIOUS_TAB, Event.NEXT_TAB, Event.NEXT_TAB, Event.EXIT])
    renderer = FakeRenderer()

    Controller(registry, collector, events, renderer).run()

    assert collector.refreshes == 0
    assert renderer.frames == [0, 2, 0, 1]
    assert registry.selected == 1


def test_tick_refreshes_every_view() -> None:
    collector = FakeCollector()
    registry = make_registry()
    events = FakeEvents([Event.TICK, Event.TICK, Event.EXIT])

    Controller(registry, collector, events, FakeRenderer()).run()

    assert collector.refreshes == 6
    for view in registry:
        assert len(view.voltage) == 2
        assert len(view.energy_rate) == 2
        assert view.temperature.enabled is False
        assert len(view.temperature) == 0


def test_collector_failure_is_fatal_and_still_cleans_up() -> None:
    collector = FakeCollector(fail_on=2)
    events = FakeEvents([Event.TICK, Event.EXIT])
    renderer = FakeRenderer()

    with pytest.raises(CollectorError):
        Controller(make_registry(), collector, events, renderer).run()

    assert events.shutdowns == 1
    assert len(renderer.closed_with) == 1
    assert isinstance(renderer.closed_with[0], CollectorError)


def test_closed_channel_is_fatal() -> None:
    events = FakeEvents([Event.NEXT_TAB])
    renderer = FakeRenderer()

    with pytest.raises(ChannelClosed):
        Controller(make_registry(), FakeCollector(), events, renderer).run()

    assert isinstance(renderer.closed_with[0], ChannelClosed)


def test_controller_with_real_event_threads() -> None:
    keys = KeyQueue()
    for key in ("right", "up", "right", "q"):
        keys.put(key)
    handler = EventHandler(keys, interval=60.0, poll_interval=0.01)
    registry = make_registry()
    collector = FakeCollector()
    renderer = FakeRenderer()

    Controller(registry, collector, handler, renderer).run()

    assert registry.selected == 2
    assert renderer.closed_with == [None]
    assert not handler.ticker.is_alive()
    assert not handler.input_listener.is_alive()
    assert handler.bus.closed
    # At most the single immediate tick ran, refreshing every view once.
    assert collector.refreshes in (0, 3)
