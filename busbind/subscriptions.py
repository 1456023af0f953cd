from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from jeepney import MatchRule

from .connections import ConnectionRegistry
from .debug import trace
from .errors import ArgumentTypeError
from .messages import check_interface, check_member
from .scopes import BusScope, ScopeLike, dispatch_key, resolve_scope
from .tracing import span

logger = logging.getLogger(__name__)

SignalHandler = Callable[..., object]


@dataclass(slots=True)
class Subscription:
    key: str
    scope: BusScope
    interface: str
    member: str
    handler: SignalHandler
    match_rule: str
    service: Optional[str] = None
    path: Optional[str] = None


def signal_match_rule(interface: str, member: str) -> str:
    # Interface and member only; no sender or path.
    return MatchRule(type="signal", interface=interface, member=member).serialise()


class SubscriptionRegistry:
    """Dispatch keys bound to signal handlers, one handler per key."""

    def __init__(self, connections: ConnectionRegistry) -> None:
        self._connections = connections
        self._subscriptions: Dict[str, Subscription] = {}

    def register(
        self,
        scope: ScopeLike,
        interface: str,
        signal: str,
        handler: SignalHandler,
        service: Optional[str] = None,
        path: Optional[str] = None,
    ) -> str:
        bus = resolve_scope(scope)
        if not callable(handler):
            raise ArgumentTypeError("Handler is not callable", handler)
        check_interface(interface)
        check_member(signal)
        key = dispatch_key(bus, interface, signal)
        rule = signal_match_rule(interface, signal)
        with span("bus.register", scope=bus.value, interface=interface, member=signal):
            connection = self._connections.get_connection(bus)
            connection.add_match(rule)
        self._subscriptions[key] = Subscription(
            key=key,
            scope=bus,
            interface=interface,
            member=signal,
            handler=handler,
            match_rule=rule,
            service=service,
            path=path,
        )
        trace(logger, '"%s" registered with handler "%r"', key, handler)
        return key

    def unregister(self, key: str) -> None:
        """Forget the handler bound to ``key``.

        The match rule stays installed on the connection, so matching
        signals keep arriving and are dropped at dispatch.
        """
        subscription = self._subscriptions.pop(key, None)
        if subscription is None:
            trace(logger, '"%s" was not registered', key)
            return
        trace(logger, '"%s" unregistered with handler "%r"', key, subscription.handler)

    def lookup(self, key: str) -> Optional[SignalHandler]:
        subscription = self._subscriptions.get(key)
        return subscription.handler if subscription else None

    def get(self, key: str) -> Optional[Subscription]:
        return self._subscriptions.get(key)

    def keys(self) -> List[str]:
        return list(self._subscriptions)

    def __contains__(self, key: object) -> bool:
        return key in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)
