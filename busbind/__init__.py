"""Python binding for the D-Bus system and session buses."""

from .binding import BusBinding, get_binding
from .codec import WireCursor, WireType, decode, decode_fields, encode, encode_args
from .connections import Connection, ConnectionRegistry, get_connection_registry
from .debug import debug_enabled, set_debug
from .dispatch import EventDispatcher
from .emitter import SignalEmitter
from .errors import (
    ArgumentTypeError,
    BusConnectionError,
    BusError,
    DecodeError,
    InvalidBusError,
    MessageBuildError,
    NoReplyError,
    SendError,
    TransportError,
)
from .invoker import MethodInvoker
from .pump import Event, MessagePump
from .scopes import BusScope, dispatch_key, resolve_scope
from .subscriptions import Subscription, SubscriptionRegistry

__all__ = [
    "BusBinding",
    "get_binding",
    "BusScope",
    "dispatch_key",
    "resolve_scope",
    "WireCursor",
    "WireType",
    "encode",
    "encode_args",
    "decode",
    "decode_fields",
    "Connection",
    "ConnectionRegistry",
    "get_connection_registry",
    "MethodInvoker",
    "SignalEmitter",
    "Subscription",
    "SubscriptionRegistry",
    "Event",
    "MessagePump",
    "EventDispatcher",
    "debug_enabled",
    "set_debug",
    "BusError",
    "BusConnectionError",
    "InvalidBusError",
    "MessageBuildError",
    "ArgumentTypeError",
    "TransportError",
    "NoReplyError",
    "DecodeError",
    "SendError",
]
