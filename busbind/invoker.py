from __future__ import annotations

import logging
from typing import Any, Sequence

from .codec import WireCursor, decode_fields, encode_args
from .connections import ConnectionRegistry
from .debug import trace
from .errors import DecodeError, TransportError
from .messages import build_method_call
from .scopes import ScopeLike, resolve_scope
from .tracing import span

logger = logging.getLogger(__name__)


class MethodInvoker:
    """Synchronous remote method calls.

    ``call`` blocks until the peer replies; there is no timeout, so a
    slow peer stalls the calling thread.
    """

    def __init__(self, connections: ConnectionRegistry) -> None:
        self._connections = connections

    def call(
        self,
        scope: ScopeLike,
        service: str,
        path: str,
        interface: str,
        method: str,
        args: Sequence[Any] = (),
    ) -> Any:
        bus = resolve_scope(scope)
        with span("bus.call", scope=bus.value, service=service, interface=interface, member=method):
            connection = self._connections.get_connection(bus)
            trace(logger, "%s %s %s %s", service, path, interface, method)
            signature, body = encode_args(args)
            message = build_method_call(service, path, interface, method, signature, body)
            reply = connection.send_with_reply_and_block(message)
            try:
                cursor = WireCursor.for_message(reply)
            except DecodeError as exc:
                raise TransportError("Cannot read reply", str(exc)) from exc
            results = decode_fields(cursor)
        trace(logger, "Reply with %d field(s)", len(results))
        if len(results) == 1:
            return results[0]
        return results
