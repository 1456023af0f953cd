"""Error taxonomy for bus operations."""

from __future__ import annotations

from typing import Any, Tuple


class BusError(Exception):
    """Base class for every failure surfaced by the binding."""

    kind = "bus-error"

    def __init__(self, message: str, *data: Any) -> None:
        super().__init__(message, *data)
        self.message = message
        self.data: Tuple[Any, ...] = data

    def __str__(self) -> str:
        if not self.data:
            return self.message
        details = ", ".join(repr(item) for item in self.data)
        return f"{self.message}: {details}"


class BusConnectionError(BusError):
    kind = "connection"


class InvalidBusError(BusConnectionError):
    kind = "invalid-bus"


class MessageBuildError(BusError):
    kind = "message-build"


class ArgumentTypeError(BusError):
    """An argument has no wire representation."""

    kind = "argument-type"

    def __init__(self, message: str, value: Any) -> None:
        super().__init__(message, value)
        self.value = value


class TransportError(BusError):
    kind = "transport"


class NoReplyError(BusError):
    kind = "no-reply"


class DecodeError(BusError):
    kind = "decode"


class SendError(BusError):
    kind = "send"


def strip_transport_text(text: object) -> str:
    """Return transport error text with its trailing newline removed."""
    value = str(text)
    if value.endswith("\n"):
        value = value[:-1]
    return value


__all__ = [
    "BusError",
    "BusConnectionError",
    "InvalidBusError",
    "MessageBuildError",
    "ArgumentTypeError",
    "TransportError",
    "NoReplyError",
    "DecodeError",
    "SendError",
    "strip_transport_text",
]
