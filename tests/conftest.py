from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bus_fakes import FakeTransport  # noqa: E402
from busbind import debug, tracing  # noqa: E402
from busbind.binding import BusBinding  # noqa: E402
from busbind.connections import ConnectionRegistry  # noqa: E402
from busbind.scopes import BusScope  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_diagnostics() -> Iterator[None]:
    debug.set_debug(None)
    tracing.clear_spans()
    yield
    debug.set_debug(None)
    tracing.clear_spans()


@pytest.fixture()
def transports() -> Dict[BusScope, FakeTransport]:
    return {
        BusScope.SYSTEM: FakeTransport(unique_name=":1.10"),
        BusScope.SESSION: FakeTransport(unique_name=":1.42"),
    }


@pytest.fixture()
def registry(transports: Dict[BusScope, FakeTransport]) -> ConnectionRegistry:
    return ConnectionRegistry(opener=lambda scope: transports[scope])


@pytest.fixture()
def session(transports: Dict[BusScope, FakeTransport]) -> FakeTransport:
    return transports[BusScope.SESSION]


@pytest.fixture()
def binding(registry: ConnectionRegistry) -> BusBinding:
    return BusBinding(registry)
