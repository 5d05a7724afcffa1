"""Registry backend tests against an in-memory stand-in for ``winreg``."""

from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from storage.base import StoreError
from storage.registry_store import RegistryStore


class FakeKey:
    def __init__(self, path: str) -> None:
        self.path = path
        self.values: dict[str, tuple[str, int]] = {}
        self.closed = False


def _fake_winreg(fail_create: bool = False, fail_set: bool = False) -> SimpleNamespace:
    keys: dict[str, FakeKey] = {}

    def create_key_ex(hive, path, reserved, access):
        if fail_create:
            raise PermissionError("access denied")
        return keys.setdefault(f"{hive}\\{path}", FakeKey(path))

    def set_value_ex(key, name, reserved, kind, value):
        if fail_set:
            raise OSError("write refused")
        key.values[name] = (value, kind)

    def query_value_ex(key, name):
        if name not in key.values:
            raise FileNotFoundError(name)
        return key.values[name]

    def enum_value(key, index):
        items = list(key.values.items())
        if index >= len(items):
            raise OSError("no more data")
        name, (value, kind) = items[index]
        return name, value, kind

    def close_key(key):
        key.closed = True

    return SimpleNamespace(
        HKEY_CURRENT_USER="HKCU",
        HKEY_LOCAL_MACHINE="HKLM",
        KEY_READ=1,
        KEY_WRITE=2,
        REG_SZ=1,
        CreateKeyEx=create_key_ex,
        SetValueEx=set_value_ex,
        QueryValueEx=query_value_ex,
        EnumValue=enum_value,
        CloseKey=close_key,
        keys=keys,
    )


def test_writes_string_values_under_current_user() -> None:
    winreg = _fake_winreg()
    store = RegistryStore(winreg=winreg)

    with store.open_location("Software\\HWiNFO64\\Sensors\\Custom\\Water\\Temp0") as location:
        location.set_value("Name", "Temperature")
        location.set_value("Value", "24.5")
        assert location.get_value("Value") == "24.5"
        assert location.get_value("Missing") is None
        assert location.values() == {"Name": "Temperature", "Value": "24.5"}

    key = winreg.keys["HKCU\\Software\\HWiNFO64\\Sensors\\Custom\\Water\\Temp0"]
    assert key.values["Value"] == ("24.5", winreg.REG_SZ)
    assert key.closed is True


def test_create_failure_raises_store_error() -> None:
    store = RegistryStore(winreg=_fake_winreg(fail_create=True))

    with pytest.raises(StoreError, match="Could not create/open registry key"):
        store.open_location("Software\\Test")


def test_set_failure_raises_store_error() -> None:
    location = RegistryStore(winreg=_fake_winreg(fail_set=True)).open_location("Software\\Test")

    with pytest.raises(StoreError, match="Failed to write"):
        location.set_value("Value", "1")


def test_unknown_hive_is_rejected() -> None:
    with pytest.raises(StoreError, match="Unsupported registry hive"):
        RegistryStore(root="HKXX")


@pytest.mark.skipif(sys.platform.startswith("win"), reason="winreg exists on Windows")
def test_registry_unavailable_off_windows() -> None:
    with pytest.raises(StoreError, match="only available on Windows"):
        RegistryStore().open_location("Software\\Test")
