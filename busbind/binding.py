"""Embedding-facing surface of the binding."""

from __future__ import annotations

import threading
from typing import Any, List, Optional

from .connections import ConnectionRegistry, get_connection_registry
from .dispatch import EventDispatcher
from .emitter import SignalEmitter
from .errors import BusConnectionError
from .invoker import MethodInvoker
from .pump import Event, MessagePump
from .scopes import ScopeLike, resolve_scope
from .subscriptions import SignalHandler, SubscriptionRegistry


class BusBinding:
    """Remote calls, signals and subscriptions on the system and session buses.

    Everything here runs on the caller's thread. ``call_method`` blocks
    until the reply arrives; ``read_queued_messages`` and
    ``dispatch_pending`` never block and are meant to run once per host
    loop tick.
    """

    def __init__(self, connections: Optional[ConnectionRegistry] = None, events=None) -> None:
        self.connections = connections or ConnectionRegistry()
        self.invoker = MethodInvoker(self.connections)
        self.emitter = SignalEmitter(self.connections)
        self.subscriptions = SubscriptionRegistry(self.connections)
        self.pump = MessagePump(self.connections, events)
        self.dispatcher = EventDispatcher(self.subscriptions, self.pump.events)

    def get_unique_name(self, scope: ScopeLike) -> str:
        bus = resolve_scope(scope)
        name = self.connections.get_connection(bus).unique_name
        if not name:
            raise BusConnectionError("No unique name available", bus.symbol_name)
        return name

    def call_method(
        self,
        scope: ScopeLike,
        method: str,
        service: str,
        path: str,
        interface: str,
        *args: Any,
    ) -> Any:
        return self.invoker.call(scope, service, path, interface, method, args)

    def send_signal(
        self,
        scope: ScopeLike,
        signal: str,
        service: str,
        path: str,
        interface: str,
        *args: Any,
    ) -> bool:
        return self.emitter.emit(scope, service, path, interface, signal, args)

    def register_signal(
        self,
        scope: ScopeLike,
        signal: str,
        service: str,
        path: str,
        interface: str,
        handler: SignalHandler,
    ) -> str:
        return self.subscriptions.register(scope, interface, signal, handler, service=service, path=path)

    def unregister_signal(self, key: str) -> None:
        self.subscriptions.unregister(key)

    def read_queued_messages(self) -> List[Event]:
        return self.pump.read_queued_messages()

    def dispatch_pending(self, limit: Optional[int] = None) -> int:
        return self.dispatcher.dispatch_pending(limit)


_GLOBAL_BINDING: Optional[BusBinding] = None
_GLOBAL_LOCK = threading.Lock()


def get_binding() -> BusBinding:
    global _GLOBAL_BINDING
    with _GLOBAL_LOCK:
        if _GLOBAL_BINDING is None:
            _GLOBAL_BINDING = BusBinding(get_connection_registry())
    return _GLOBAL_BINDING
