# pylint: disable=missing-module-docstring,missing-function-docstring

from core.connection_state import ConnectionStateMachine, ConnectionStatus, TransportEvent


def test_display_strings() -> None:
    assert [str(s) for s in ConnectionStatus] == ["Disconnected", "Connected", "Connection Failed"]


def test_each_event_has_one_target() -> None:
    machine = ConnectionStateMachine()

    assert machine.apply(TransportEvent.OPEN).to_status is ConnectionStatus.CONNECTED
    assert machine.apply(TransportEvent.ERROR).to_status is ConnectionStatus.CONNECTION_FAILED
    assert machine.apply(TransportEvent.CLOSE).to_status is ConnectionStatus.DISCONNECTED
    assert machine.apply(TransportEvent.ERROR).to_status is ConnectionStatus.CONNECTION_FAILED
    assert machine.apply(TransportEvent.OPEN).to_status is ConnectionStatus.CONNECTED
    assert machine.get_status() is ConnectionStatus.CONNECTED


def test_listeners_only_see_changes() -> None:
    machine = ConnectionStateMachine()
    seen = []
    machine.add_listener(lambda old, new: seen.append(new))

    machine.apply(TransportEvent.CLOSE)
    machine.apply(TransportEvent.OPEN)
    machine.apply(TransportEvent.OPEN)
    machine.apply(TransportEvent.CLOSE)

    assert seen == [ConnectionStatus.CONNECTED, ConnectionStatus.DISCONNECTED]
    assert machine.get_stats()["transition_count"] == 4


def test_failing_listener_does_not_block_others() -> None:
    machine = ConnectionStateMachine()
    seen = []

    def broken(old, new):
        raise RuntimeError("boom")

    machine.add_listener(broken)
    machine.add_listener(lambda old, new: seen.append(new))

    machine.apply(TransportEvent.OPEN)

    assert seen == [ConnectionStatus.CONNECTED]


def test_remove_listener() -> None:
    machine = ConnectionStateMachine()
    seen = []
    listener = lambda old, new: seen.append(new)  # noqa: E731
    machine.add_listener(listener)
    machine.remove_listener(listener)

    machine.apply(TransportEvent.OPEN)

    assert seen == []


def test_history_is_bounded() -> None:
    machine = ConnectionStateMachine(max_history=3)
    for _ in range(5):
        machine.apply(TransportEvent.OPEN, "up")
        machine.apply(TransportEvent.CLOSE, "down")

    history = machine.get_transition_history(limit=10)
    assert len(history) == 3
    assert history[-1]["reason"] == "down"
    assert machine.get_stats()["event_counts"] == {"open": 5, "close": 5, "error": 0}
