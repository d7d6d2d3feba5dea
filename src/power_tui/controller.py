"""Single-threaded controller consuming dashboard events."""

from __future__ import annotations

import logging
from typing import Protocol

from .events import Event, EventHandler
from .powerlib.sysfs import PowerSupplyManager
from .views import TabRegistry

LOGGER = logging.getLogger(__name__)


class UserExit(Exception):
    """Raised when the user asks to leave; not a failure."""


class Renderer(Protocol):
    def draw(self, registry: TabRegistry) -> None: ...

    def finish(self, error: BaseException | None = None) -> None: ...


class Controller:
    """Draw, wait for one event, apply it; repeat until exit or failure.

    The controller is the only writer of the registry, the views and the
    collector. Producers are stopped and the renderer is closed on every exit
    path, after which collector and channel failures propagate to the caller.
    """

    def __init__(
        self,
        registry: TabRegistry,
        collector: PowerSupplyManager,
        events: EventHandler,
        renderer: Renderer,
    ) -> None:
        self._registry = registry
        self._collector = collector
        self._events = events
        self._renderer = renderer

    @property
    def registry(self) -> TabRegistry:
        return self._registry

    def run(self) -> None:
        error: BaseException | None = None
        self._events.start()
        try:
            while True:
                self._renderer.draw(self._registry)
                self.handle(self._events.next())
        except UserExit:
            LOGGER.info("User requested exit")
        except BaseException as exc:
            error = exc
            LOGGER.error("Dashboard stopped: %s", exc)
            raise
        finally:
            self._events.shutdown()
            self._renderer.finish(error)

    def handle(self, event: Event) -> None:
        if event is Event.EXIT:
            raise UserExit()
        if event is Event.PREVIOUS_TAB:
            self._registry.previous()
        elif event is Event.NEXT_TAB:
            self._registry.next()
        elif event is Event.TICK:
            for view in self._registry:
                view.update(self._collector)
        else:
            raise AssertionError(f"Unhandled event: {event!r}")


__all__ = ["Controller", "Renderer", "UserExit"]
