from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from models.schemas import StoreDocument, StoreEntry
from storage.base import KeyValueStore, StoreError, StoreLocation


class JsonFileStore(KeyValueStore):
    """Key-value store persisted as a single JSON document.

    Every write rewrites the document through a temporary file and
    ``os.replace`` so readers never observe a half-written file.
    """

    def __init__(self, persistence_path: Path) -> None:
        self.persistence_path = persistence_path

    def open_location(self, path: str) -> "FileStoreLocation":
        if not path:
            raise StoreError("Store path must not be empty.")
        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(
                f"Cannot create store directory {self.persistence_path.parent}: {exc}"
            ) from exc

        document = self._load()
        if path not in document.locations:
            document.locations[path] = {}
            self._persist(document)
        return FileStoreLocation(self, path)

    def set_entry(self, entry: StoreEntry) -> None:
        document = self._load()
        document.locations.setdefault(entry.path, {})[entry.name] = entry.value
        self._persist(document)

    def read_location(self, path: str) -> Dict[str, str]:
        return dict(self._load().locations.get(path, {}))

    def _load(self) -> StoreDocument:
        if not self.persistence_path.exists():
            return StoreDocument()
        try:
            raw = self.persistence_path.read_text(encoding="utf-8") or "{}"
            return StoreDocument.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise StoreError(
                f"Cannot read store document {self.persistence_path}: {exc}"
            ) from exc

    def _persist(self, document: StoreDocument) -> None:
        payload = json.dumps(document.model_dump(mode="json"), indent=2, sort_keys=True)
        directory = self.persistence_path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.persistence_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(
                f"Cannot write store document {self.persistence_path}: {exc}"
            ) from exc


class FileStoreLocation(StoreLocation):

    def __init__(self, store: JsonFileStore, path: str) -> None:
        super().__init__(path)
        self._store = store

    def set_value(self, name: str, value: str) -> None:
        self._ensure_open()
        try:
            entry = StoreEntry(path=self.path, name=name, value=value)
        except ValidationError as exc:
            raise StoreError(f"Invalid store entry {name!r}: {exc}") from exc
        self._store.set_entry(entry)

    def get_value(self, name: str) -> Optional[str]:
        self._ensure_open()
        return self._store.read_location(self.path).get(name)

    def values(self) -> Dict[str, str]:
        self._ensure_open()
        return self._store.read_location(self.path)
