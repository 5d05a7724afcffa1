"""Pydantic schemas for persisted store data and bridge status."""

from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class BridgeState(str, Enum):
    """Lifecycle states of the stream driver."""

    starting = "starting"
    running = "running"
    stopping = "stopping"
    stopped = "stopped"


class StoreEntry(BaseModel):
    """A single name/value pair at a store path."""

    path: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    value: str


class StoreDocument(BaseModel):
    """On-disk shape of the JSON file store: ``{path: {name: value}}``."""

    locations: Dict[str, Dict[str, str]] = Field(default_factory=dict)


class BridgeSummary(BaseModel):
    """Counters accumulated over one bridge run."""

    chunks_read: int = Field(default=0, ge=0)
    bytes_read: int = Field(default=0, ge=0)
    lines: int = Field(default=0, ge=0)
    readings: int = Field(default=0, ge=0)
    invalid_lines: int = Field(default=0, ge=0)
    suppressed: int = Field(default=0, ge=0)
    writes: int = Field(default=0, ge=0)
    write_failures: int = Field(default=0, ge=0)
    read_errors: int = Field(default=0, ge=0)
