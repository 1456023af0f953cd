from __future__ import annotations

import sys
from enum import Enum
from typing import Optional, Union

from .errors import InvalidBusError

KEY_SEPARATOR = "."


class BusScope(str, Enum):
    SYSTEM = "system"
    SESSION = "session"

    @property
    def symbol_name(self) -> str:
        return f":{self.value}"

    @property
    def transport_name(self) -> str:
        return self.value.upper()


ScopeLike = Union[BusScope, str]


def resolve_scope(scope: ScopeLike) -> BusScope:
    if isinstance(scope, BusScope):
        return scope
    if isinstance(scope, str):
        name = scope.strip().lower().lstrip(":")
        for candidate in BusScope:
            if candidate.value == name:
                return candidate
    raise InvalidBusError("Wrong bus name", scope)


def dispatch_key(scope: ScopeLike, interface: Optional[str], member: Optional[str]) -> str:
    """Key shared by ``register`` and the pump for one (scope, interface, member)."""
    bus = resolve_scope(scope)
    key = KEY_SEPARATOR.join((bus.symbol_name, interface or "", member or ""))
    return sys.intern(key)


__all__ = ["BusScope", "ScopeLike", "KEY_SEPARATOR", "resolve_scope", "dispatch_key"]
