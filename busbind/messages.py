from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from jeepney import DBusAddress, new_method_call, new_signal
from jeepney.low_level import HeaderFields, Message, MessageType

from .errors import MessageBuildError, strip_transport_text

_PATH_RE = re.compile(r"^/$|^(/[A-Za-z0-9_]+)+$")
_ELEMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_WELL_KNOWN_ELEMENT_RE = re.compile(r"^[A-Za-z_-][A-Za-z0-9_-]*$")
_UNIQUE_ELEMENT_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_MAX_NAME = 255


def _check_path(path: str) -> None:
    if not isinstance(path, str) or not _PATH_RE.match(path):
        raise MessageBuildError("Unable to create a new message", "invalid object path", path)


def check_interface(interface: str) -> None:
    elements = interface.split(".") if isinstance(interface, str) else []
    if (
        len(elements) < 2
        or len(interface) > _MAX_NAME
        or not all(_ELEMENT_RE.match(part) for part in elements)
    ):
        raise MessageBuildError("Unable to create a new message", "invalid interface", interface)


def check_member(member: str) -> None:
    if not isinstance(member, str) or len(member) > _MAX_NAME or not _ELEMENT_RE.match(member):
        raise MessageBuildError("Unable to create a new message", "invalid member", member)


def _check_bus_name(name: str) -> None:
    if not isinstance(name, str) or not name or len(name) > _MAX_NAME:
        raise MessageBuildError("Unable to create a new message", "invalid bus name", name)
    unique = name.startswith(":")
    elements = (name[1:] if unique else name).split(".")
    pattern = _UNIQUE_ELEMENT_RE if unique else _WELL_KNOWN_ELEMENT_RE
    if len(elements) < 2 or not all(pattern.match(part) for part in elements):
        raise MessageBuildError("Unable to create a new message", "invalid bus name", name)


def build_method_call(
    service: str,
    path: str,
    interface: str,
    method: str,
    signature: str = "",
    body: Sequence[Any] = (),
) -> Message:
    _check_bus_name(service)
    _check_path(path)
    check_interface(interface)
    check_member(method)
    address = DBusAddress(path, bus_name=service, interface=interface)
    return new_method_call(address, method, signature or None, tuple(body))


def build_signal(
    path: str,
    interface: str,
    signal: str,
    signature: str = "",
    body: Sequence[Any] = (),
) -> Message:
    _check_path(path)
    check_interface(interface)
    check_member(signal)
    emitter = DBusAddress(path, interface=interface)
    return new_signal(emitter, signal, signature or None, tuple(body))


# === Header accessors =========================================================
def _field(message: Message, name: HeaderFields) -> Optional[Any]:
    return message.header.fields.get(name)


def message_sender(message: Message) -> Optional[str]:
    return _field(message, HeaderFields.sender)


def message_path(message: Message) -> Optional[str]:
    return _field(message, HeaderFields.path)


def message_interface(message: Message) -> Optional[str]:
    return _field(message, HeaderFields.interface)


def message_member(message: Message) -> Optional[str]:
    return _field(message, HeaderFields.member)


def reply_serial(message: Message) -> Optional[int]:
    return _field(message, HeaderFields.reply_serial)


def is_error_reply(message: Message) -> bool:
    return message.header.message_type == MessageType.error


def error_text(message: Message) -> str:
    name = _field(message, HeaderFields.error_name) or "org.freedesktop.DBus.Error.Failed"
    body = message.body or ()
    if body and isinstance(body[0], str):
        return strip_transport_text(f"{name}: {body[0]}")
    return name


__all__ = [
    "build_method_call",
    "build_signal",
    "check_interface",
    "check_member",
    "message_sender",
    "message_path",
    "message_interface",
    "message_member",
    "reply_serial",
    "is_error_reply",
    "error_text",
]
