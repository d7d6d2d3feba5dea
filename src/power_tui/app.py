"""Textual entry point for power-tui."""

from __future__ import annotations

import logging
from typing import Sequence

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Label, Sparkline, Static

from .controller import Controller
from .events import EventHandler, KeyQueue
from .persistence import AppConfig
from .powerlib.sysfs import PowerSupplyManager
from .series import ScalarSeries
from .units import NOT_AVAILABLE, Units, format_duration, format_energy, format_temperature
from .views import DeviceView, TabRegistry, build_registry

LOGGER = logging.getLogger(__name__)

CHARGE_BAR_WIDTH = 24
LABEL_WIDTH = 17
CHART_IDS = ("voltage-chart", "energy-rate-chart", "temperature-chart")

Rows = list[tuple[str, str]]


def tab_markup(titles: Sequence[str], selected: int) -> str:
    parts = []
    for index, title in enumerate(titles):
        text = escape(title)
        parts.append(f"[reverse b] {text} [/]" if index == selected else f" {text} ")
    return " │ ".join(parts)


def charge_color(percent: float) -> str:
    if percent > 30.0:
        return "green"
    if percent > 15.0:
        return "yellow"
    return "red"


def charge_markup(percent: float, width: int = CHARGE_BAR_WIDTH) -> str:
    """Bar plus label for the state of charge, colored by level."""

    percent = min(max(percent, 0.0), 100.0)
    filled = round(width * percent / 100.0)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{charge_color(percent)}]{bar}[/] {percent:6.2f} %"


def device_rows(view: DeviceView) -> Rows:
    device = view.device
    snapshot = view.snapshot
    cycles = str(snapshot.cycle_count) if snapshot.cycle_count is not None else NOT_AVAILABLE
    return [
        ("Vendor", device.vendor or NOT_AVAILABLE),
        ("Model", device.model or NOT_AVAILABLE),
        ("S/N", device.serial_number or NOT_AVAILABLE),
        ("Technology", str(snapshot.technology)),
        ("Charge state", str(snapshot.state)),
        ("Cycles count", cycles),
    ]


def energy_rows(view: DeviceView, units: Units) -> Rows:
    snapshot = view.snapshot
    health = snapshot.state_of_health
    return [
        (view.energy_rate.title, f"{snapshot.energy_rate:.2f} W"),
        ("Voltage", f"{snapshot.voltage:.2f} V"),
        ("Capacity", f"{health:.2f} %" if health is not None else NOT_AVAILABLE),
        ("Current", format_energy(snapshot.energy, units)),
        ("Last full", format_energy(snapshot.energy_full, units)),
        ("Full design", format_energy(snapshot.energy_full_design, units)),
    ]


def timing_rows(view: DeviceView) -> Rows:
    snapshot = view.snapshot
    return [
        ("Time to full", format_duration(snapshot.time_to_full)),
        ("Time to empty", format_duration(snapshot.time_to_empty)),
    ]


def environment_rows(view: DeviceView, units: Units) -> Rows:
    return [("Temperature", format_temperature(view.snapshot.temperature, units))]


class TabStrip(Static):
    """One tab per battery, the selected one highlighted."""

    DEFAULT_CSS = """
    TabStrip {
        border: round $accent;
        height: 3;
        padding: 0 1;
    }
    """

    def on_mount(self) -> None:  # noqa: D401
        self.border_title = "Batteries"

    def update_tabs(self, titles: Sequence[str], selected: int) -> None:
        self.update(tab_markup(titles, selected))


class ChargeGauge(Static):
    DEFAULT_CSS = """
    ChargeGauge {
        border: round $accent;
        height: 3;
        padding: 0 1;
    }
    """

    def on_mount(self) -> None:  # noqa: D401
        self.border_title = "Charge Percentage"

    def update_charge(self, percent: float) -> None:
        self.update(charge_markup(percent))


class InfoPanel(Static):
    """Two-column label/value table."""

    DEFAULT_CSS = """
    InfoPanel {
        border: round $accent;
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, title: str, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._title = title

    def on_mount(self) -> None:  # noqa: D401
        self.border_title = self._title

    def update_rows(self, rows: Rows) -> None:
        self.update(
            "\n".join(f"[b]{escape(label + ':'):<{LABEL_WIDTH}}[/b] {escape(value)}" for label, value in rows)
        )


class ChartPanel(Static):
    """Sparkline of one series with its axis labels and current value."""

    DEFAULT_CSS = """
    ChartPanel {
        border: round $accent;
        height: 1fr;
        padding: 0 1;
    }
    ChartPanel > Sparkline {
        height: 1fr;
    }
    ChartPanel > .axis {
        color: $text-muted;
    }
    """

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._upper = Label("", classes="axis")
        self._spark = Sparkline(summary_function=max)
        self._lower = Label("", classes="axis")
        self._caption = Label(NOT_AVAILABLE)

    def compose(self) -> ComposeResult:
        yield self._upper
        yield self._spark
        yield self._lower
        yield self._caption

    def update_series(self, series: ScalarSeries, units: Units) -> None:
        lower, upper = series.y_labels(units)
        self.border_title = series.title
        self._upper.update(f"{upper} {series.unit_label(units)}")
        self._lower.update(lower)
        values = [y for _, y in series.points] if series.enabled else []
        self._spark.data = values if values else None
        self._caption.update(series.current_value_display(units))


class PowerTuiApp(App[None]):
    """power-tui Textual application shell.

    The app only paints frames and forwards keys; state changes happen on the
    controller worker thread, which hands each frame over via
    :meth:`call_from_thread` and waits for it to finish.
    """

    TITLE = "power-tui"

    CSS = """
    #content {
        height: 1fr;
    }

    #left-column {
        width: 44;
        height: 1fr;
    }

    #right-column {
        width: 1fr;
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("left", "forward_key('left')", "Previous", show=True, priority=True),
        Binding("right", "forward_key('right')", "Next", show=True, priority=True),
        Binding("q", "forward_key('q')", "Quit", show=True, priority=True),
        Binding("escape", "forward_key('escape')", "Quit", show=False, priority=True),
        Binding("ctrl+c", "forward_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        registry: TabRegistry,
        collector: PowerSupplyManager,
        *,
        config: AppConfig,
    ) -> None:
        super().__init__()
        self._units = config.units
        self._keys = KeyQueue()
        self._events = EventHandler(self._keys, interval=config.tick_interval)
        self._controller = Controller(registry, collector, self._events, self)
        self.failure: BaseException | None = None

    @property
    def key_queue(self) -> KeyQueue:
        return self._keys

    def compose(self) -> ComposeResult:
        yield TabStrip(id="tabs")
        with Horizontal(id="content"):
            with Vertical(id="left-column"):
                yield ChargeGauge(id="charge")
                yield InfoPanel("Device", id="device-info")
                yield InfoPanel("Energy", id="energy-info")
                yield InfoPanel("Time", id="timing-info")
                yield InfoPanel("Environment", id="environment-info")
            with Vertical(id="right-column"):
                for chart_id in CHART_IDS:
                    yield ChartPanel(id=chart_id)
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self._controller.run, name="controller", thread=True, exit_on_error=False)

    # --- Renderer ----------------------------------------------------------

    def draw(self, registry: TabRegistry) -> None:
        self.call_from_thread(self._paint, registry)

    def finish(self, error: BaseException | None = None) -> None:
        LOGGER.debug("Closing the dashboard (error=%r)", error)
        self.failure = error
        self.call_from_thread(self.exit, return_code=1 if error is not None else 0)

    def _paint(self, registry: TabRegistry) -> None:
        view = registry.selected_view()
        self.query_one(TabStrip).update_tabs(registry.titles, registry.selected)
        self.query_one(ChargeGauge).update_charge(view.snapshot.state_of_charge)
        self.query_one("#device-info", InfoPanel).update_rows(device_rows(view))
        self.query_one("#energy-info", InfoPanel).update_rows(energy_rows(view, self._units))
        self.query_one("#timing-info", InfoPanel).update_rows(timing_rows(view))
        self.query_one("#environment-info", InfoPanel).update_rows(environment_rows(view, self._units))
        for chart_id, series in zip(CHART_IDS, view.series):
            self.query_one(f"#{chart_id}", ChartPanel).update_series(series, self._units)

    # --- Actions -----------------------------------------------------------

    def action_forward_key(self, key: str) -> None:
        self._keys.put(key)

    def action_quit(self) -> None:
        # Leaving must go through the controller so it can stop the producers.
        self._keys.put("q")


def run(config: AppConfig | None = None) -> None:
    """Enumerate batteries and run the dashboard until the user exits.

    Raises NoDevicesFound or CollectorError before the terminal is touched, and
    re-raises any failure that stopped the controller once the UI is gone.
    """

    config = config or AppConfig()
    collector = PowerSupplyManager(config.power_supply_root)
    registry = build_registry(collector)
    app = PowerTuiApp(registry, collector, config=config)
    app.run()
    if app.failure is not None:
        raise app.failure


__all__ = [
    "ChartPanel",
    "PowerTuiApp",
    "charge_markup",
    "device_rows",
    "energy_rows",
    "environment_rows",
    "run",
    "tab_markup",
    "timing_rows",
]
