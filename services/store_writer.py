"""Writes sensor metadata and values into an open store location."""

from __future__ import annotations

import logging

from storage.base import StoreError, StoreLocation

logger = logging.getLogger(__name__)

NAME_ENTRY = "Name"
VALUE_ENTRY = "Value"


class StoreWriter:
    """Non-fatal writer: failures are logged and reported through the return value."""

    def __init__(self, location: StoreLocation) -> None:
        self.location = location

    def initialize(self, label: str) -> bool:
        try:
            self.location.set_value(NAME_ENTRY, label)
        except StoreError as exc:
            logger.warning(
                "Failed to write sensor name",
                extra={"store_key": self.location.path, "reason": str(exc)},
            )
            return False
        logger.info(
            "Store location ready",
            extra={"store_key": self.location.path, "value": label},
        )
        return True

    def write_value(self, text: str) -> bool:
        try:
            self.location.set_value(VALUE_ENTRY, text)
        except StoreError as exc:
            logger.error(
                "Failed to write value",
                extra={"store_key": self.location.path, "value": text, "reason": str(exc)},
            )
            return False
        logger.info("Wrote value", extra={"value": text})
        return True
