"""Windows registry backend.

Hardware monitors such as HWiNFO pick up custom sensors from
``HKEY_CURRENT_USER\\Software\\HWiNFO64\\Sensors\\Custom``; each sensor key holds
string ``Name`` and ``Value`` entries.
"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Any, Dict, Optional

from storage.base import KeyValueStore, StoreError, StoreLocation

_HIVES = {
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
}


def _load_winreg() -> ModuleType:
    try:
        return importlib.import_module("winreg")
    except ImportError as exc:
        raise StoreError("The registry store is only available on Windows.") from exc


class RegistryStore(KeyValueStore):

    def __init__(self, root: str = "HKCU", winreg: Optional[ModuleType] = None) -> None:
        hive_name = _HIVES.get(root.upper())
        if hive_name is None:
            raise StoreError(f"Unsupported registry hive {root!r}.")
        self.root = hive_name
        self._winreg = winreg

    @property
    def winreg(self) -> ModuleType:
        if self._winreg is None:
            self._winreg = _load_winreg()
        return self._winreg

    def open_location(self, path: str) -> "RegistryLocation":
        winreg = self.winreg
        hive = getattr(winreg, self.root)
        try:
            handle = winreg.CreateKeyEx(
                hive, path, 0, winreg.KEY_WRITE | winreg.KEY_READ
            )
        except OSError as exc:
            raise StoreError(f"Could not create/open registry key {path!r}: {exc}") from exc
        return RegistryLocation(winreg, handle, path)


class RegistryLocation(StoreLocation):

    def __init__(self, winreg: ModuleType, handle: Any, path: str) -> None:
        super().__init__(path)
        self._winreg = winreg
        self._handle = handle

    def set_value(self, name: str, value: str) -> None:
        self._ensure_open()
        try:
            self._winreg.SetValueEx(self._handle, name, 0, self._winreg.REG_SZ, value)
        except OSError as exc:
            raise StoreError(f"Failed to write {name!r} under {self.path!r}: {exc}") from exc

    def get_value(self, name: str) -> Optional[str]:
        self._ensure_open()
        try:
            value, _kind = self._winreg.QueryValueEx(self._handle, name)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Failed to read {name!r} under {self.path!r}: {exc}") from exc
        return str(value)

    def values(self) -> Dict[str, str]:
        self._ensure_open()
        entries: Dict[str, str] = {}
        index = 0
        while True:
            try:
                name, value, _kind = self._winreg.EnumValue(self._handle, index)
            except OSError:
                # EnumValue signals the end of the value list with OSError.
                break
            entries[name] = str(value)
            index += 1
        return entries

    def _release(self) -> None:
        try:
            self._winreg.CloseKey(self._handle)
        except OSError as exc:
            raise StoreError(f"Failed to close registry key {self.path!r}: {exc}") from exc
