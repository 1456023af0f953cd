from __future__ import annotations

import logging

from bus_fakes import FakeTransport, make_signal
from busbind.binding import BusBinding
from busbind.pump import Event
from busbind.scopes import BusScope


def test_dispatch_calls_handler_with_decoded_arguments(binding: BusBinding, session: FakeTransport) -> None:
    received = []
    binding.register_signal(
        BusScope.SESSION, "Tick", "org.example.Service", "/org/example", "org.example.Iface",
        lambda *args: received.append(args),
    )
    session.deliver(make_signal("org.example.Iface", "Tick", "su", ("now", 3)))
    binding.read_queued_messages()
    assert binding.dispatch_pending() == 1
    assert received == [("now", 3)]


def test_overwritten_handler_receives_later_events(binding: BusBinding, session: FakeTransport) -> None:
    calls = []
    first_key = binding.register_signal(
        BusScope.SESSION, "Tick", "org.example.Service", "/", "org.example.Iface",
        lambda *args: calls.append("first"),
    )
    second_key = binding.register_signal(
        BusScope.SESSION, "Tick", "org.example.Service", "/", "org.example.Iface",
        lambda *args: calls.append("second"),
    )
    assert first_key == second_key
    session.deliver(make_signal("org.example.Iface", "Tick"))
    binding.read_queued_messages()
    binding.dispatch_pending()
    assert calls == ["second"]


def test_unregistered_key_still_drains_but_finds_no_handler(binding: BusBinding, session: FakeTransport) -> None:
    # The match rule is not retracted, so the message still arrives and is
    # popped by the pump; the dispatch stage then drops it.
    calls = []
    key = binding.register_signal(
        BusScope.SESSION, "Tick", "org.example.Service", "/", "org.example.Iface",
        lambda *args: calls.append(args),
    )
    binding.unregister_signal(key)
    session.deliver(make_signal("org.example.Iface", "Tick", "u", (1,)))
    events = binding.read_queued_messages()
    assert [event.key for event in events] == [key]
    assert len(session.inbox) == 0
    assert binding.dispatcher.dispatch(events[0]) is False
    assert calls == []
    assert len(session.match_rules) == 1


def test_handler_errors_are_logged_not_raised(binding: BusBinding, caplog) -> None:
    def _broken(*_args) -> None:
        raise RuntimeError("handler blew up")

    key = binding.register_signal(BusScope.SESSION, "Tick", "org.example.Service", "/", "org.example.Iface", _broken)
    caplog.set_level(logging.ERROR, logger="busbind.dispatch")
    assert binding.dispatcher.dispatch(Event(key=key, sender=":1.1", path="/", args=[])) is True
    assert "handler blew up" in caplog.text


def test_dispatch_pending_honours_limit(binding: BusBinding) -> None:
    for _ in range(3):
        binding.pump.events.put(Event(key=":session.org.example.Iface.Tick", sender=None, path=None))
    assert binding.dispatch_pending(limit=2) == 2
    assert binding.dispatch_pending() == 1
    assert binding.dispatch_pending() == 0
