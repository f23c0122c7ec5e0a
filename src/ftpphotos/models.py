from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class RawEntry:
    """One line of a remote directory listing, before any decoding."""

    name: str
    is_dir: bool
    timestamp: datetime | None
    size: int


@dataclass(frozen=True, slots=True)
class Photo:
    name: str
    path: str
    creation_time: datetime | None
    size: int
