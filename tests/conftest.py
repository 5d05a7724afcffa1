from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from services.bridge import TelemetryBridge
from storage.base import KeyValueStore, StoreError, StoreLocation

ScriptItem = Union[bytes, Exception, Callable[[], bytes]]


class ScriptedTransport:
    """Replays a fixed sequence of reads, then requests shutdown."""

    def __init__(self, script: Sequence[ScriptItem], stop_event: threading.Event) -> None:
        self.script: List[ScriptItem] = list(script)
        self.stop_event = stop_event
        self.open_error: Optional[Exception] = None
        self.open_calls = 0
        self.close_calls = 0
        self.reads = 0

    def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error

    def read(self, size: Optional[int] = None) -> bytes:
        self.reads += 1
        if not self.script:
            self.stop_event.set()
            return b""
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item()
        return item

    def close(self) -> None:
        self.close_calls += 1


class MemoryLocation(StoreLocation):

    def __init__(self, store: "MemoryStore", path: str) -> None:
        super().__init__(path)
        self._store = store
        self.release_calls = 0

    def set_value(self, name: str, value: str) -> None:
        self._ensure_open()
        if self._store.failing.get(name, 0) > 0:
            self._store.failing[name] -= 1
            raise StoreError(f"simulated failure writing {name}")
        self._store.writes.append((name, value))
        self._store.data.setdefault(self.path, {})[name] = value

    def get_value(self, name: str) -> Optional[str]:
        return self._store.data.get(self.path, {}).get(name)

    def values(self) -> Dict[str, str]:
        return dict(self._store.data.get(self.path, {}))

    def _release(self) -> None:
        self.release_calls += 1


class MemoryStore(KeyValueStore):

    def __init__(self) -> None:
        self.data: Dict[str, Dict[str, str]] = {}
        self.writes: List[tuple[str, str]] = []
        self.failing: Dict[str, int] = {}
        self.open_error: Optional[Exception] = None
        self.locations: List[MemoryLocation] = []

    def open_location(self, path: str) -> MemoryLocation:
        if self.open_error is not None:
            raise self.open_error
        self.data.setdefault(path, {})
        location = MemoryLocation(self, path)
        self.locations.append(location)
        return location

    def values_written(self) -> List[str]:
        return [value for name, value in self.writes if name == "Value"]


@pytest.fixture()
def stop_event() -> threading.Event:
    return threading.Event()


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def make_transport(stop_event: threading.Event) -> Callable[..., ScriptedTransport]:
    def factory(*script: ScriptItem) -> ScriptedTransport:
        return ScriptedTransport(script, stop_event)

    return factory


@pytest.fixture()
def make_bridge(
    stop_event: threading.Event, memory_store: MemoryStore
) -> Callable[..., TelemetryBridge]:
    def factory(transport, store: Optional[KeyValueStore] = None, **kwargs) -> TelemetryBridge:
        kwargs.setdefault("idle_interval", 0)
        kwargs.setdefault("error_backoff", 0)
        return TelemetryBridge(
            transport=transport,
            store=store if store is not None else memory_store,
            store_key="Sensors\\Custom\\Test\\Temp0",
            sensor_label="Temperature",
            stop_event=stop_event,
            **kwargs,
        )

    return factory
