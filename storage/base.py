"""Interfaces shared by the key-value store backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional


class StoreError(Exception):
    """Raised when a store location cannot be opened, read or written."""


class StoreLocation(ABC):
    """An open handle on one path of a hierarchical key-value store."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.closed = False

    @abstractmethod
    def set_value(self, name: str, value: str) -> None:
        ...

    @abstractmethod
    def get_value(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def values(self) -> Dict[str, str]:
        ...

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._release()

    def _release(self) -> None:
        pass

    def _ensure_open(self) -> None:
        if self.closed:
            raise StoreError(f"Store location {self.path!r} is closed.")

    def __enter__(self) -> "StoreLocation":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


class KeyValueStore(ABC):

    @abstractmethod
    def open_location(self, path: str) -> StoreLocation:
        """Open ``path``, creating it when it does not exist yet."""
