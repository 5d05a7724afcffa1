from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from settings import get_settings
from storage.base import KeyValueStore, StoreError
from storage.file_store import JsonFileStore
from storage.registry_store import RegistryStore


def build_store(backend: str, store_path: Optional[str] = None) -> KeyValueStore:
    if backend == "file":
        return JsonFileStore(persistence_path=Path(store_path or "./tmp/telemetry_store.json"))
    if backend == "registry":
        return RegistryStore()
    raise StoreError(f"Unknown store backend {backend!r}.")


@lru_cache
def build_default_store(
    backend: Optional[str] = None,
    store_path: Optional[str] = None,
) -> KeyValueStore:
    settings = get_settings()
    chosen = settings.store_backend if backend is None else backend
    path = settings.store_path if store_path is None else store_path
    return build_store(chosen, path)
