"""Event bus merging keyboard input and timer ticks for the controller."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from queue import Empty, Queue
from typing import Protocol

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


class Event(Enum):
    EXIT = "exit"
    NEXT_TAB = "next_tab"
    PREVIOUS_TAB = "previous_tab"
    TICK = "tick"


KEY_EVENTS: dict[str, Event] = {
    "left": Event.PREVIOUS_TAB,
    "right": Event.NEXT_TAB,
    "q": Event.EXIT,
    "ctrl+c": Event.EXIT,
    "escape": Event.EXIT,
}


def translate_key(key: str) -> Event | None:
    """Map a key name to its event, or ``None`` for keys the dashboard ignores."""

    return KEY_EVENTS.get(key)


class ChannelClosed(RuntimeError):
    """Raised when the event bus can no longer deliver events."""


class _Disconnected:
    """Queued after the last sender goes away."""


_DISCONNECTED = _Disconnected()


class EventBus:
    """Unbounded multi-producer, single-consumer event channel."""

    def __init__(self) -> None:
        self._queue: "Queue[Event | _Disconnected]" = Queue()
        self._lock = threading.Lock()
        self._senders = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def sender(self) -> "Sender":
        """Register a producer and return its send handle."""

        with self._lock:
            if self._closed:
                raise ChannelClosed("Event bus is closed")
            self._senders += 1
        return Sender(self)

    def receive(self, timeout: float | None = None) -> Event:
        """Block until the next event arrives.

        Raises ChannelClosed once every sender is gone and the queue is drained,
        and TimeoutError when *timeout* elapses first.
        """

        while True:
            try:
                item = self._queue.get(timeout=timeout)
            except Empty:
                raise TimeoutError("No event received") from None
            if not isinstance(item, _Disconnected):
                return item
            with self._lock:
                disconnected = self._senders == 0
            if disconnected:
                # Keep the marker queued so later receives fail the same way.
                self._queue.put(_DISCONNECTED)
                raise ChannelClosed("All event producers are gone")

    def close(self) -> None:
        """Stop accepting events; pending sends fail with ChannelClosed."""

        with self._lock:
            self._closed = True

    def _send(self, event: Event) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosed("Event receiver is gone")
            self._queue.put(event)

    def _release(self) -> None:
        with self._lock:
            self._senders -= 1
            last = self._senders == 0
        if last:
            self._queue.put(_DISCONNECTED)


class Sender:
    """Send half of an :class:`EventBus`, owned by one producer."""

    __slots__ = ("_bus", "_open")

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._open = True

    def send(self, event: Event) -> None:
        if not self._open:
            raise ChannelClosed("Sender is closed")
        self._bus._send(event)

    def close(self) -> None:
        if self._open:
            self._open = False
            self._bus._release()

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class KeySource(Protocol):
    def read_key(self, timeout: float | None = None) -> str | None: ...


class KeyQueue:
    """Thread-safe key source filled by the UI and drained by the input listener."""

    def __init__(self) -> None:
        self._queue: "Queue[str]" = Queue()

    def put(self, key: str) -> None:
        self._queue.put(key)

    def read_key(self, timeout: float | None = None) -> str | None:
        try:
            return self._queue.get(timeout=timeout)
        except Empty:
            return None


class InputListener:
    """Producer thread translating keystrokes into events.

    The thread ends on its own right after sending :attr:`Event.EXIT`, or when
    a send fails because the receiver is gone.
    """

    def __init__(
        self,
        source: KeySource,
        sender: Sender,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._source = source
        self._sender = sender
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self.run, name="input-listener", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def run(self) -> None:
        LOGGER.debug("Input listener started")
        try:
            while not self._stop.is_set():
                key = self._source.read_key(timeout=self._poll_interval)
                if key is None:
                    continue
                event = translate_key(key)
                if event is None:
                    continue
                try:
                    self._sender.send(event)
                except ChannelClosed as exc:
                    LOGGER.warning("Input listener failed to send %s and will terminate: %s", event, exc)
                    return
                if event is Event.EXIT:
                    LOGGER.debug("Input listener sent the exit event and is terminating")
                    return
        finally:
            self._sender.close()
            LOGGER.debug("Input listener stopped")


class Ticker:
    """Producer thread sending :attr:`Event.TICK` every *interval* seconds."""

    def __init__(self, sender: Sender, interval: float) -> None:
        if interval <= 0:
            raise ValueError("tick interval must be positive")
        self._sender = sender
        self._interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self.run, name="ticker", daemon=True)

    @property
    def interval(self) -> float:
        return self._interval

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def run(self) -> None:
        LOGGER.debug("Ticker started with %.3fs interval", self._interval)
        try:
            while not self._stop.is_set():
                try:
                    self._sender.send(Event.TICK)
                except ChannelClosed as exc:
                    if self._stop.is_set():
                        return
                    # Only the controller closes the bus, and it stops the ticker first.
                    LOGGER.error("Tick receiver is gone: %s", exc)
                    raise
                if self._stop.wait(self._interval):
                    return
        finally:
            self._sender.close()
            LOGGER.debug("Ticker stopped")


class EventHandler:
    """Owns the event bus and both producers feeding it."""

    def __init__(
        self,
        source: KeySource,
        *,
        interval: float,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.bus = EventBus()
        self.input_listener = InputListener(source, self.bus.sender(), poll_interval=poll_interval)
        self.ticker = Ticker(self.bus.sender(), interval)
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.input_listener.start()
        self.ticker.start()

    def next(self, timeout: float | None = None) -> Event:
        event = self.bus.receive(timeout)
        LOGGER.debug("Controller received %s", event)
        return event

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop and join both producers, then close the bus."""

        self.input_listener.stop()
        self.ticker.stop()
        if self._started:
            self.input_listener.join(timeout)
            self.ticker.join(timeout)
        self.bus.close()


__all__ = [
    "ChannelClosed",
    "Event",
    "EventBus",
    "EventHandler",
    "InputListener",
    "KEY_EVENTS",
    "KeyQueue",
    "KeySource",
    "Sender",
    "Ticker",
    "translate_key",
]
