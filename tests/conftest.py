# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring

from typing import Any, Callable, List, Optional

import pytest

from core.command_channel import CommandChannel
from core.connection_manager import ConnectionManager
from core.connection_state import TransportEvent
from core.exceptions import NotConnectedError
from events.event_bus import EventBus


class ManualTimer:
    def __init__(self, delay: float, callback: Callable, args: tuple) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.callback(*self.args)


class ManualLoop:
    """Runs callbacks inline and holds timers until a test fires them."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def shutdown(self, timeout: float = 2.0) -> None:
        self.stopped = True

    def is_running(self) -> bool:
        return self.started and not self.stopped

    def in_loop_thread(self) -> bool:
        return True

    def call_soon(self, callback: Callable, *args: Any) -> None:
        callback(*args)

    def call_later(self, delay: float, callback: Callable, *args: Any) -> ManualTimer:
        timer = ManualTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_pending(self) -> int:
        timers = self.pending()
        for timer in timers:
            timer.fire()
        return len(timers)


class FakeSession:
    def __init__(self, address: str, generation: int, on_event: Callable) -> None:
        self.address = address
        self.generation = generation
        self.on_event = on_event
        self.started = False
        self.closed = False
        self.writable = True
        self.fail_send = False
        self.sent: List[str] = []

    def start(self) -> None:
        self.started = True

    def close(self) -> None:
        self.closed = True

    def join(self, timeout: float = 1.0) -> bool:
        return True

    def is_writable(self) -> bool:
        return self.writable and not self.closed

    def send(self, text: str) -> None:
        if self.fail_send:
            raise NotConnectedError()
        self.sent.append(text)

    # Synthetic transport events

    def open(self) -> None:
        self.on_event(self, TransportEvent.OPEN, None)

    def error(self, error: Optional[Exception] = None) -> None:
        self.on_event(self, TransportEvent.ERROR, error or ConnectionRefusedError("refused"))

    def drop(self, code: Optional[int] = 1006, reason: str = "") -> None:
        self.on_event(self, TransportEvent.CLOSE, (code, reason))


class FakeSessionFactory:
    def __init__(self) -> None:
        self.sessions: List[FakeSession] = []

    def __call__(self, address: str, generation: int, on_event: Callable) -> FakeSession:
        session = FakeSession(address, generation, on_event)
        self.sessions.append(session)
        return session

    @property
    def latest(self) -> FakeSession:
        return self.sessions[-1]


@pytest.fixture
def loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def manager(loop: ManualLoop, factory: FakeSessionFactory, bus: EventBus) -> ConnectionManager:
    return ConnectionManager(loop=loop, event_bus=bus, session_factory=factory, reconnect_delay=2.0)


@pytest.fixture
def channel(manager: ConnectionManager) -> CommandChannel:
    return CommandChannel(manager)
