"""Serial byte-stream source backed by pyserial."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import serial

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Base class for transport failures."""


class TransportOpenError(TransportError):
    """The port could not be opened or configured."""


class TransportReadError(TransportError):
    """A bounded read failed for a reason other than a timeout."""


@dataclass(frozen=True)
class SerialConfig:
    """Framing and timeout policy for the serial port.

    Timeouts are expressed in milliseconds the way serial drivers usually
    describe them: an inter-byte interval plus a total budget of
    ``constant + multiplier * bytes_requested``.
    """

    port: str
    baudrate: int = 9600
    bytesize: int = serial.EIGHTBITS
    stopbits: float = serial.STOPBITS_ONE
    parity: str = serial.PARITY_NONE
    read_interval_timeout_ms: int = 50
    read_total_timeout_constant_ms: int = 1000
    read_total_timeout_multiplier_ms: int = 10
    write_total_timeout_constant_ms: int = 1000
    write_total_timeout_multiplier_ms: int = 10
    chunk_size: int = 256

    @property
    def read_timeout(self) -> float:
        total = self.read_total_timeout_constant_ms + (
            self.read_total_timeout_multiplier_ms * self.chunk_size
        )
        return total / 1000.0

    @property
    def inter_byte_timeout(self) -> Optional[float]:
        if self.read_interval_timeout_ms <= 0:
            return None
        return self.read_interval_timeout_ms / 1000.0

    def write_timeout(self, size: int) -> float:
        total = self.write_total_timeout_constant_ms + (
            self.write_total_timeout_multiplier_ms * size
        )
        return total / 1000.0


class SerialTransport:
    """Owns one serial port handle for the lifetime of a bridge run."""

    def __init__(self, config: SerialConfig) -> None:
        self.config = config
        self._serial: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        config = self.config
        port = serial.Serial()
        try:
            port.port = config.port
            port.baudrate = config.baudrate
            port.bytesize = config.bytesize
            port.stopbits = config.stopbits
            port.parity = config.parity
            port.timeout = config.read_timeout
            port.inter_byte_timeout = config.inter_byte_timeout
            port.write_timeout = config.write_timeout(config.chunk_size)
            port.open()
        except (serial.SerialException, ValueError) as exc:
            raise TransportOpenError(
                f"Cannot open serial port {config.port}: {exc}"
            ) from exc
        self._serial = port
        logger.info(
            "Serial port open at %s baud, %s%s%s",
            config.baudrate,
            config.bytesize,
            config.parity,
            config.stopbits,
            extra={"port": config.port},
        )

    def read(self, size: Optional[int] = None) -> bytes:
        if self._serial is None:
            raise TransportReadError("Serial port is not open.")
        try:
            return self._serial.read(size or self.config.chunk_size)
        except serial.SerialException as exc:
            raise TransportReadError(f"Read from {self.config.port} failed: {exc}") from exc

    def close(self) -> None:
        port, self._serial = self._serial, None
        if port is None:
            return
        port.close()
        logger.info("Serial port closed", extra={"port": self.config.port})

    def __enter__(self) -> "SerialTransport":
        self.open()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
