"""Domain records flowing through the bridge pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Reading:
    """A validated sensor reading.

    ``text`` is the trimmed line exactly as the sensor reported it; it is what
    gets mirrored into the store. ``value`` is only its parsed float.
    """

    text: str
    value: float
