from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Optional

from jeepney.bus_messages import message_bus
from jeepney.io.blocking import open_dbus_connection
from jeepney.low_level import Message
from jeepney.wrappers import DBusErrorResponse

from .debug import trace
from .errors import (
    BusConnectionError,
    NoReplyError,
    SendError,
    TransportError,
    strip_transport_text,
)
from .messages import error_text, is_error_reply, reply_serial
from .scopes import BusScope, ScopeLike, resolve_scope

logger = logging.getLogger(__name__)

TransportOpener = Callable[[BusScope], object]


def open_transport(scope: BusScope):
    return open_dbus_connection(bus=scope.transport_name)


class Connection:
    """One session with a bus daemon.

    Outbound messages wait in a queue until :meth:`flush`; messages that
    arrive while a method call waits for its reply are kept for the pump.
    """

    def __init__(self, scope: BusScope, transport) -> None:
        self.scope = scope
        self._transport = transport
        self._outgoing: Deque[Message] = deque()
        self._incoming: Deque[Message] = deque()

    @property
    def unique_name(self) -> Optional[str]:
        return getattr(self._transport, "unique_name", None)

    @property
    def pending_incoming(self) -> int:
        return len(self._incoming)

    def _next_serial(self) -> int:
        return next(self._transport.outgoing_serial)

    def send(self, message: Message) -> None:
        self._outgoing.append(message)

    def flush(self) -> None:
        while self._outgoing:
            message = self._outgoing[0]
            try:
                self._transport.send(message, serial=self._next_serial())
            except (OSError, ValueError) as exc:
                self._outgoing.clear()
                raise SendError("Cannot send message", strip_transport_text(exc)) from exc
            self._outgoing.popleft()

    def send_with_reply_and_block(self, message: Message) -> Message:
        """Send ``message`` and wait, without a timeout, for its reply."""
        serial = self._next_serial()
        try:
            self._transport.send(message, serial=serial)
        except (OSError, ValueError) as exc:
            raise TransportError(strip_transport_text(exc)) from exc
        trace(logger, "Message sent")
        while True:
            try:
                incoming = self._transport.receive()
            except EOFError as exc:
                raise NoReplyError("No reply") from exc
            except (OSError, ValueError) as exc:
                raise TransportError(strip_transport_text(exc)) from exc
            if incoming is None:
                raise NoReplyError("No reply")
            if reply_serial(incoming) != serial:
                self._incoming.append(incoming)
                continue
            if is_error_reply(incoming):
                raise TransportError(error_text(incoming))
            return incoming

    def pop_message(self) -> Optional[Message]:
        """Return the next pending message without blocking."""
        if self._incoming:
            return self._incoming.popleft()
        try:
            return self._transport.receive(timeout=0)
        except TimeoutError:
            return None
        except ValueError as exc:
            logger.warning("Dropping unreadable message on %s: %s", self.scope.symbol_name, exc)
            return None
        except OSError as exc:
            raise TransportError(strip_transport_text(exc)) from exc

    def add_match(self, rule: str) -> None:
        self.send_with_reply_and_block(message_bus.AddMatch(rule))
        trace(logger, 'Matching rule "%s" created', rule)


class ConnectionRegistry:
    """Lazily opened connections, one per bus scope."""

    def __init__(self, opener: Optional[TransportOpener] = None) -> None:
        self._opener = opener or open_transport
        self._connections: Dict[BusScope, Connection] = {}

    def get_connection(self, scope: ScopeLike) -> Connection:
        bus = resolve_scope(scope)
        connection = self._connections.get(bus)
        if connection is not None:
            return connection
        try:
            transport = self._opener(bus)
        except DBusErrorResponse as exc:
            raise BusConnectionError(strip_transport_text(exc), bus.symbol_name) from exc
        except (OSError, KeyError, ValueError) as exc:
            raise BusConnectionError(strip_transport_text(exc), bus.symbol_name) from exc
        if transport is None:
            raise BusConnectionError("No connection", bus.symbol_name)
        connection = Connection(bus, transport)
        self._connections[bus] = connection
        trace(logger, "Connected to %s as %s", bus.symbol_name, connection.unique_name)
        return connection

    def is_open(self, scope: ScopeLike) -> bool:
        return resolve_scope(scope) in self._connections


_GLOBAL_REGISTRY: Optional[ConnectionRegistry] = None
_GLOBAL_LOCK = threading.Lock()


def get_connection_registry() -> ConnectionRegistry:
    global _GLOBAL_REGISTRY
    with _GLOBAL_LOCK:
        if _GLOBAL_REGISTRY is None:
            _GLOBAL_REGISTRY = ConnectionRegistry()
    return _GLOBAL_REGISTRY


__all__ = [
    "Connection",
    "ConnectionRegistry",
    "open_transport",
    "get_connection_registry",
]
