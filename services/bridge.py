"""Run loop that mirrors serial sensor readings into a key-value store."""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack
from typing import Callable, Optional, Protocol

from models.schemas import BridgeState, BridgeSummary
from services.change_gate import ChangeGate
from services.line_assembler import LineAssembler
from services.store_writer import StoreWriter
from services.validator import ReadingValidator
from settings import Settings
from storage.base import KeyValueStore, StoreError
from storage.factory import build_default_store
from transport.serial_transport import (
    SerialConfig,
    SerialTransport,
    TransportError,
    TransportReadError,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


class ByteSource(Protocol):
    def open(self) -> None: ...
    def read(self, size: Optional[int] = None) -> bytes: ...
    def close(self) -> None: ...


class TelemetryBridge:
    """Drives transport reads through the line/validate/dedupe/write pipeline.

    ``stop_event`` is the cooperative run flag: setting it asks the loop to
    finish. It is only checked between iterations, so a read already in
    flight completes (up to its timeout) first.
    """

    def __init__(
        self,
        transport: ByteSource,
        store: KeyValueStore,
        store_key: str,
        sensor_label: str,
        stop_event: Optional[threading.Event] = None,
        *,
        max_line_bytes: Optional[int] = None,
        idle_interval: float = 0.01,
        error_backoff: float = 0.05,
    ) -> None:
        self.transport = transport
        self.store = store
        self.store_key = store_key
        self.sensor_label = sensor_label
        self.stop_event = stop_event or threading.Event()
        self.idle_interval = idle_interval
        self.error_backoff = error_backoff

        self.assembler = LineAssembler(max_pending=max_line_bytes)
        self.validator = ReadingValidator()
        self.gate = ChangeGate()
        self.writer: Optional[StoreWriter] = None
        self.summary = BridgeSummary()
        self.state = BridgeState.starting

    def stop(self) -> None:
        self.stop_event.set()

    def run(self) -> int:
        self._set_state(BridgeState.starting)
        try:
            with ExitStack() as stack:
                try:
                    self.transport.open()
                    stack.callback(self._release, "transport", self.transport.close)
                    location = self.store.open_location(self.store_key)
                    stack.callback(self._release, "store location", location.close)
                except (TransportError, StoreError) as exc:
                    logger.error(
                        "Fatal startup error",
                        extra={"reason": str(exc), "exit_code": EXIT_FATAL},
                    )
                    return EXIT_FATAL

                self.writer = StoreWriter(location)
                self.writer.initialize(self.sensor_label)

                self._set_state(BridgeState.running)
                logger.info("Listening for serial lines", extra={"store_key": self.store_key})
                self._loop()
                self._set_state(BridgeState.stopping)
                logger.info("Shutting down")
        finally:
            self._set_state(BridgeState.stopped)

        logger.info("Exit complete: %s", self.summary.model_dump(), extra={"exit_code": EXIT_OK})
        return EXIT_OK

    def process_chunk(self, chunk: bytes) -> None:
        """Push one transport read through the pipeline, preserving line order."""
        self.summary.chunks_read += 1
        self.summary.bytes_read += len(chunk)
        for line in self.assembler.feed(chunk):
            self._handle_line(line)

    def _loop(self) -> None:
        while not self.stop_event.is_set():
            try:
                chunk = self.transport.read()
            except TransportReadError as exc:
                self.summary.read_errors += 1
                logger.error("Serial read failed", extra={"reason": str(exc)})
                self.stop_event.wait(self.error_backoff)
                continue

            if not chunk:
                self.stop_event.wait(self.idle_interval)
                continue

            self.process_chunk(chunk)

    def _handle_line(self, line: bytes) -> None:
        assert self.writer is not None
        self.summary.lines += 1
        reading = self.validator.validate(line)
        self.summary.invalid_lines = self.validator.rejected
        if reading is None:
            return

        self.summary.readings += 1
        if not self.gate.admit(reading):
            self.summary.suppressed += 1
            return

        if self.writer.write_value(reading.text):
            self.summary.writes += 1
        else:
            self.summary.write_failures += 1

    def _set_state(self, state: BridgeState) -> None:
        if state is not self.state:
            logger.debug("Bridge state %s -> %s", self.state.value, state.value)
        self.state = state

    @staticmethod
    def _release(name: str, closer: Callable[[], None]) -> None:
        try:
            closer()
        except (OSError, StoreError, TransportError) as exc:
            logger.warning("Failed to release %s", name, extra={"reason": str(exc)})


def serial_config_from_settings(settings: Settings) -> SerialConfig:
    return SerialConfig(port=settings.serial_port, baudrate=settings.baud_rate)


def build_bridge(
    settings: Settings,
    stop_event: Optional[threading.Event] = None,
    store: Optional[KeyValueStore] = None,
    transport: Optional[ByteSource] = None,
) -> TelemetryBridge:
    """Wire a bridge from settings, allowing the store or transport to be swapped."""
    return TelemetryBridge(
        transport=transport or SerialTransport(serial_config_from_settings(settings)),
        store=store or build_default_store(settings.store_backend, settings.store_path),
        store_key=settings.store_key,
        sensor_label=settings.sensor_label,
        stop_event=stop_event,
        max_line_bytes=settings.max_line_bytes,
        idle_interval=settings.idle_interval,
        error_backoff=settings.error_backoff,
    )
