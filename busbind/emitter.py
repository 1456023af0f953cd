from __future__ import annotations

import logging
from typing import Any, Sequence

from .codec import encode_args
from .connections import ConnectionRegistry
from .debug import trace
from .messages import build_signal
from .scopes import ScopeLike, resolve_scope
from .tracing import span

logger = logging.getLogger(__name__)


class SignalEmitter:
    def __init__(self, connections: ConnectionRegistry) -> None:
        self._connections = connections

    def emit(
        self,
        scope: ScopeLike,
        service: str,
        path: str,
        interface: str,
        signal: str,
        args: Sequence[Any] = (),
    ) -> bool:
        """Broadcast ``signal`` and flush it before returning; no reply is awaited."""
        bus = resolve_scope(scope)
        with span("bus.emit", scope=bus.value, service=service, interface=interface, member=signal):
            connection = self._connections.get_connection(bus)
            trace(logger, "%s %s %s %s", service, path, interface, signal)
            signature, body = encode_args(args)
            message = build_signal(path, interface, signal, signature, body)
            connection.send(message)
            connection.flush()
        trace(logger, "Signal sent")
        return True
