"""Mapping between Python values and D-Bus wire types.

Encoding covers the five scalar types a caller may pass as an argument.
Decoding walks a message body alongside its signature with a
:class:`WireCursor`; compound values (arrays, variants, structs and dict
entries) all come back as plain lists in wire order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from jeepney.low_level import HeaderFields

from .debug import trace
from .errors import ArgumentTypeError, DecodeError

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF
INT32_MIN = -0x80000000
MAX_DEPTH = 64


class WireType(str, Enum):
    BOOLEAN = "b"
    UINT32 = "u"
    INT32 = "i"
    DOUBLE = "d"
    STRING = "s"
    OBJECT_PATH = "o"
    ARRAY = "a"
    VARIANT = "v"
    STRUCT = "("
    DICT_ENTRY = "{"


COMPOUND_TYPES = frozenset(
    {WireType.ARRAY, WireType.VARIANT, WireType.STRUCT, WireType.DICT_ENTRY}
)
_CLOSERS = {"(": ")", "{": "}"}


class EncodedArg(NamedTuple):
    wire_type: WireType
    value: Any


# === Encoding =================================================================
def encode(value: Any) -> EncodedArg:
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        wire = EncodedArg(WireType.BOOLEAN, value)
    elif isinstance(value, int):
        if 0 <= value <= UINT32_MAX:
            wire = EncodedArg(WireType.UINT32, value)
        elif INT32_MIN <= value < 0:
            wire = EncodedArg(WireType.INT32, value)
        else:
            raise ArgumentTypeError("Integer out of 32-bit range", value)
    elif isinstance(value, float):
        wire = EncodedArg(WireType.DOUBLE, value)
    elif isinstance(value, str):
        wire = EncodedArg(WireType.STRING, value)
    else:
        raise ArgumentTypeError("Not a valid argument", value)
    trace(logger, "encode %s %r", wire.wire_type.value, value)
    return wire


def encode_args(args: Iterable[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Encode every argument, returning ``(signature, body)``.

    Nothing is returned unless all arguments encode, so callers never
    build a message from a partial argument list.
    """
    encoded = [encode(arg) for arg in args]
    signature = "".join(item.wire_type.value for item in encoded)
    return signature, tuple(item.value for item in encoded)


# === Signatures ===============================================================
def _complete_type_end(signature: str, start: int) -> int:
    if start >= len(signature):
        raise DecodeError("Truncated signature", signature)
    code = signature[start]
    if code == "a":
        return _complete_type_end(signature, start + 1)
    if code in _CLOSERS:
        depth = 0
        for index in range(start, len(signature)):
            char = signature[index]
            if char in _CLOSERS:
                depth += 1
            elif char in (")", "}"):
                depth -= 1
                if depth == 0:
                    return index + 1
        raise DecodeError("Unbalanced signature", signature)
    if code in (")", "}"):
        raise DecodeError("Unbalanced signature", signature)
    return start + 1


def split_signature(signature: str) -> List[str]:
    """Split a signature into its complete types."""
    types: List[str] = []
    index = 0
    while index < len(signature):
        end = _complete_type_end(signature, index)
        types.append(signature[index:end])
        index = end
    return types


def _wire_type(code: str) -> Optional[WireType]:
    try:
        return WireType(code)
    except ValueError:
        return None


# === Cursor ===================================================================
class WireCursor:
    """Position inside a sequence of typed wire values."""

    def __init__(self, signature: str, values: Sequence[Any], depth: int = 0) -> None:
        types = split_signature(signature or "")
        values = list(values)
        if len(types) != len(values):
            raise DecodeError("Signature does not match body", signature, len(values))
        self.signature = signature or ""
        self.depth = depth
        self._items: List[Tuple[str, Any]] = list(zip(types, values))
        self._index = 0

    @classmethod
    def for_message(cls, message) -> "WireCursor":
        signature = message.header.fields.get(HeaderFields.signature, "")
        return cls(signature, message.body or ())

    def arg_type(self) -> Optional[str]:
        """Type code at the current position, ``None`` past the end."""
        if self._index >= len(self._items):
            return None
        return self._items[self._index][0][0]

    def current(self) -> Tuple[str, Any]:
        if self._index >= len(self._items):
            raise DecodeError("Cursor exhausted", self.signature)
        return self._items[self._index]

    def next(self) -> bool:
        if self._index < len(self._items):
            self._index += 1
        return self._index < len(self._items)

    def recurse(self) -> "WireCursor":
        type_sig, value = self.current()
        depth = self.depth + 1
        if depth > MAX_DEPTH:
            raise DecodeError("Nesting too deep", type_sig)
        code = type_sig[0]
        if code == "a":
            element = type_sig[1:]
            if isinstance(value, dict):
                entries = list(value.items())
                return WireCursor(element * len(entries), entries, depth)
            entries = list(value)
            return WireCursor(element * len(entries), entries, depth)
        if code == "v":
            inner_sig, inner_value = value
            return WireCursor(inner_sig, [inner_value], depth)
        if code in _CLOSERS:
            return WireCursor(type_sig[1:-1], list(value), depth)
        raise DecodeError("Not a compound type", type_sig)


# === Decoding =================================================================
def decode(cursor: WireCursor) -> Any:
    type_sig, value = cursor.current()
    wire_type = _wire_type(type_sig[0])
    if wire_type is WireType.BOOLEAN:
        result: Any = bool(value)
    elif wire_type in (WireType.UINT32, WireType.INT32):
        result = int(value)
    elif wire_type is WireType.DOUBLE:
        result = float(value)
    elif wire_type in (WireType.STRING, WireType.OBJECT_PATH):
        result = str(value)
    elif wire_type is WireType.ARRAY and _wire_type(type_sig[1]) is None:
        # One warning per container, not per element.
        logger.warning("DBusType %s not supported", type_sig)
        return None
    elif wire_type in COMPOUND_TYPES:
        try:
            child = cursor.recurse()
        except (DecodeError, TypeError, ValueError) as exc:
            logger.warning("Cannot decode %s value: %s", type_sig, exc)
            return None
        result = decode_fields(child)
    else:
        logger.warning("DBusType %s not supported", type_sig)
        return None
    trace(logger, "decode %s %r", type_sig, result)
    return result


def decode_fields(cursor: WireCursor) -> List[Any]:
    """Decode every remaining field of ``cursor`` in order."""
    items: List[Any] = []
    while cursor.arg_type() is not None:
        items.append(decode(cursor))
        cursor.next()
    return items


__all__ = [
    "WireType",
    "EncodedArg",
    "COMPOUND_TYPES",
    "MAX_DEPTH",
    "encode",
    "encode_args",
    "split_signature",
    "WireCursor",
    "decode",
    "decode_fields",
]
