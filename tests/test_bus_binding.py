from __future__ import annotations

import pytest

from bus_fakes import FakeTransport, reply_with
from busbind import binding as binding_module
from busbind.binding import BusBinding
from busbind.connections import ConnectionRegistry
from busbind.errors import BusConnectionError, InvalidBusError
from busbind.scopes import BusScope


def test_get_unique_name_per_scope(binding: BusBinding) -> None:
    assert binding.get_unique_name(BusScope.SESSION) == ":1.42"
    assert binding.get_unique_name("system") == ":1.10"


def test_get_unique_name_missing_is_an_error() -> None:
    registry = ConnectionRegistry(opener=lambda scope: FakeTransport(unique_name=None))
    with pytest.raises(BusConnectionError) as info:
        BusBinding(registry).get_unique_name(BusScope.SESSION)
    assert info.value.message == "No unique name available"


def test_call_method_argument_order(binding: BusBinding, session: FakeTransport) -> None:
    session.responder = reply_with("s", ("done",))
    result = binding.call_method(
        BusScope.SESSION, "Run", "org.example.Service", "/org/example", "org.example.Iface", 1, "two"
    )
    assert result == "done"
    (message,) = session.user_messages()
    assert message.body == (1, "two")


def test_send_signal_acknowledges(binding: BusBinding, session: FakeTransport) -> None:
    assert binding.send_signal(
        BusScope.SESSION, "Changed", "org.example.Service", "/org/example", "org.example.Iface", 2.5
    ) is True
    assert len(session.user_messages()) == 1


def test_wrong_scope_surfaces_invalid_bus(binding: BusBinding) -> None:
    with pytest.raises(InvalidBusError):
        binding.send_signal(":nowhere", "Changed", "org.example.Service", "/", "org.example.Iface")


def test_get_binding_is_a_process_wide_singleton(monkeypatch) -> None:
    monkeypatch.setattr(binding_module, "_GLOBAL_BINDING", None)
    first = binding_module.get_binding()
    assert binding_module.get_binding() is first
