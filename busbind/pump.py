from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from .codec import WireCursor, decode_fields
from .connections import ConnectionRegistry
from .debug import trace
from .errors import BusError, DecodeError
from .messages import message_interface, message_member, message_path, message_sender
from .scopes import BusScope, ScopeLike, dispatch_key, resolve_scope

logger = logging.getLogger(__name__)

# System first, then session, on every tick.
POLL_ORDER = (BusScope.SYSTEM, BusScope.SESSION)


@dataclass(slots=True)
class Event:
    """Incoming bus message ready for dispatch.

    Iterates as ``[key, sender, path, *args]``.
    """

    key: str
    sender: Optional[str]
    path: Optional[str]
    args: List[Any] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.sender
        yield self.path
        yield from self.args

    def to_list(self) -> List[Any]:
        return list(self)


class MessagePump:
    """Turns pending bus messages into events on the host queue.

    The pump never looks up or calls handlers; that is left to whoever
    consumes the queue.
    """

    def __init__(self, connections: ConnectionRegistry, events=None) -> None:
        self._connections = connections
        self._events = events if events is not None else queue.SimpleQueue()

    @property
    def events(self):
        return self._events

    def drain(self, scope: ScopeLike) -> Optional[Event]:
        bus = resolve_scope(scope)
        connection = self._connections.get_connection(bus)
        message = connection.pop_message()
        if message is None:
            return None
        trace(logger, "Event received")

        try:
            cursor = WireCursor.for_message(message)
        except DecodeError as exc:
            trace(logger, "Cannot read event: %s", exc)
            return None
        args = decode_fields(cursor)

        key = dispatch_key(bus, message_interface(message), message_member(message))
        event = Event(
            key=key,
            sender=message_sender(message),
            path=message_path(message),
            args=args,
        )
        self._events.put(event)
        trace(logger, "Queued event %s with %d argument(s)", key, len(args))
        return event

    def read_queued_messages(self) -> List[Event]:
        """Drain each open scope once, system before session."""
        produced: List[Event] = []
        for bus in POLL_ORDER:
            if not self._connections.is_open(bus):
                continue
            try:
                event = self.drain(bus)
            except BusError as exc:
                logger.warning("Reading %s failed: %s", bus.symbol_name, exc)
                continue
            if event is not None:
                produced.append(event)
        return produced
