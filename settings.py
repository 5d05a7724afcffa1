from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache


_SERIAL_PORT_ENV = "BRIDGE_SERIAL_PORT"
_BAUD_RATE_ENV = "BRIDGE_BAUD_RATE"
_STORE_BACKEND_ENV = "BRIDGE_STORE_BACKEND"
_STORE_PATH_ENV = "BRIDGE_STORE_PATH"
_STORE_KEY_ENV = "BRIDGE_STORE_KEY"
_SENSOR_LABEL_ENV = "BRIDGE_SENSOR_LABEL"
_MAX_LINE_BYTES_ENV = "BRIDGE_MAX_LINE_BYTES"
_IDLE_INTERVAL_ENV = "BRIDGE_IDLE_INTERVAL"
_ERROR_BACKOFF_ENV = "BRIDGE_ERROR_BACKOFF"
_LOG_LEVEL_ENV = "LOG_LEVEL"

STORE_BACKENDS = ("file", "registry")

DEFAULT_STORE_KEY = "Software\\HWiNFO64\\Sensors\\Custom\\PC Water Sensor\\Temp0"


@dataclass(frozen=True)
class Settings:
    serial_port: str
    baud_rate: int
    store_backend: str
    store_path: str
    store_key: str
    sensor_label: str
    max_line_bytes: int
    idle_interval: float
    error_backoff: float
    log_level: str


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_int_env(name: str, default: int, minimum: int = 1) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_STORE_BACKEND_ENV, default).lower()
    return candidate if candidate in STORE_BACKENDS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    windows = _is_windows()
    return Settings(
        serial_port=_read_str_env(_SERIAL_PORT_ENV, "COM4" if windows else "/dev/ttyUSB0"),
        baud_rate=_read_int_env(_BAUD_RATE_ENV, 9600),
        store_backend=_read_backend("registry" if windows else "file"),
        store_path=_read_str_env(_STORE_PATH_ENV, "./tmp/telemetry_store.json"),
        store_key=_read_str_env(_STORE_KEY_ENV, DEFAULT_STORE_KEY),
        sensor_label=_read_str_env(_SENSOR_LABEL_ENV, "Temperature"),
        max_line_bytes=_read_int_env(_MAX_LINE_BYTES_ENV, 4096, minimum=0),
        idle_interval=_read_float_env(_IDLE_INTERVAL_ENV, 0.01),
        error_backoff=_read_float_env(_ERROR_BACKOFF_ENV, 0.05),
        log_level=_read_log_level("INFO"),
    )
