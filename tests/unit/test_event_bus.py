# pylint: disable=missing-module-docstring,missing-function-docstring

from events.event_bus import EventBus, EventTypes


def test_specific_and_wildcard_listeners() -> None:
    bus = EventBus()
    specific = []
    everything = []
    bus.on(EventTypes.COMMAND_SENT, lambda e: specific.append(e.data["command"]))
    bus.on_all(lambda e: everything.append(e.type))

    bus.emit(EventTypes.COMMAND_SENT, {"command": "reloadWindow"}, source="test")
    bus.emit(EventTypes.CONNECTION_OPENED, {"address": "10.0.0.5"})

    assert specific == ["reloadWindow"]
    assert everything == [EventTypes.COMMAND_SENT, EventTypes.CONNECTION_OPENED]


def test_off_removes_listener() -> None:
    bus = EventBus()
    seen = []
    listener = seen.append
    bus.on(EventTypes.SYSTEM_START, listener)
    bus.off(EventTypes.SYSTEM_START, listener)

    bus.emit(EventTypes.SYSTEM_START, {})

    assert seen == []


def test_failing_listener_is_isolated() -> None:
    bus = EventBus()
    seen = []

    def broken(event):
        raise ValueError("boom")

    bus.on(EventTypes.SYSTEM_STOP, broken)
    bus.on(EventTypes.SYSTEM_STOP, seen.append)

    bus.emit(EventTypes.SYSTEM_STOP, {})

    assert len(seen) == 1


def test_history_and_stats() -> None:
    bus = EventBus(max_history=2)
    bus.emit(EventTypes.CONNECTION_ATTEMPT, {"generation": 1}, source="connection_manager")
    bus.emit(EventTypes.CONNECTION_ATTEMPT, {"generation": 2}, source="connection_manager")
    bus.emit(EventTypes.RECONNECT_SCHEDULED, {"delay": 2.0})

    recent = bus.get_recent_events()
    assert [e["type"] for e in recent] == [EventTypes.CONNECTION_ATTEMPT, EventTypes.RECONNECT_SCHEDULED]
    assert recent[0]["source"] == "connection_manager"
    assert recent[1]["source"] == "system"

    stats = bus.get_stats()
    assert stats["total_events"] == 3
    assert stats["event_counts"][EventTypes.CONNECTION_ATTEMPT] == 2
    assert stats["history_size"] == 2
