"""Validation of raw sensor lines into numeric readings."""

from __future__ import annotations

import logging
import re
from typing import Optional

from models.records import Reading

logger = logging.getLogger(__name__)

# Whitespace as C's isspace() sees it in the default locale.
ASCII_WHITESPACE = " \t\n\r\v\f"

_DECIMAL_PREFIX = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


class InvalidReadingError(ValueError):
    """Raised when trimmed text is not entirely a decimal number."""


def trim_ascii(text: str) -> str:
    return text.strip(ASCII_WHITESPACE)


def parse_reading(text: str) -> Reading:
    """Parse already-trimmed ``text`` into a :class:`Reading`.

    The longest decimal literal at the start of the text is consumed first;
    anything left over other than whitespace makes the whole text invalid,
    so ``"5 6"`` and ``"12.5 extra"`` are rejected.
    """
    match = _DECIMAL_PREFIX.match(text)
    if match is None:
        raise InvalidReadingError(f"no numeric value in {text!r}")
    remainder = text[match.end():]
    if remainder.strip(ASCII_WHITESPACE):
        raise InvalidReadingError(f"trailing content {remainder!r} after number")
    return Reading(text=text, value=float(match.group(0)))


class ReadingValidator:

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.rejected = 0

    def validate(self, line: bytes) -> Optional[Reading]:
        """Return a reading for ``line``, or ``None`` when it is blank or invalid."""
        trimmed = trim_ascii(line.decode(self.encoding, errors="replace"))
        if not trimmed:
            return None

        try:
            return parse_reading(trimmed)
        except InvalidReadingError as exc:
            self.rejected += 1
            logger.info(
                "Ignored non-numeric line",
                extra={"line": trimmed, "reason": str(exc)},
            )
            return None
