from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ftpphotos.errors import ListingError, RemoteConnectionError
from ftpphotos.models import RawEntry

TARGET = "фотографии"
PREFIX = "GRP327_"
STAMP = datetime(2023, 5, 17, 9, 30, tzinfo=timezone.utc)


def d(name: str) -> RawEntry:
    return RawEntry(name=name, is_dir=True, timestamp=STAMP, size=4096)


def f(name: str, size: int = 1024) -> RawEntry:
    return RawEntry(name=name, is_dir=False, timestamp=STAMP, size=size)


class FakeTree:
    """In-memory listing function; unknown or failing paths raise ListingError."""

    def __init__(self, listings: dict[str, list[RawEntry]], failing: set[str] | None = None) -> None:
        self.listings = listings
        self.failing = failing or set()
        self.calls: list[str] = []

    def list_dir(self, path: str) -> list[RawEntry]:
        self.calls.append(path)
        if path in self.failing:
            raise ListingError(path, "550 permission denied")
        if path not in self.listings:
            raise ListingError(path, "550 no such directory")
        return list(self.listings[path])


class FakeConnection:
    def __init__(self, tree: FakeTree, fail_open: bool = False) -> None:
        self.tree = tree
        self.fail_open = fail_open
        self.opened = 0
        self.closed = 0

    def open(self) -> None:
        self.opened += 1
        if self.fail_open:
            raise RemoteConnectionError("cannot connect to ftp.example:21: refused")

    def close(self) -> None:
        self.closed += 1

    def list_dir(self, path: str) -> list[RawEntry]:
        return self.tree.list_dir(path)


@pytest.fixture()
def sample_tree() -> FakeTree:
    return FakeTree(
        {
            "/": [d("."), d(".."), d("alpha"), d("beta"), d("gamma"), f("readme.txt")],
            "/alpha": [d(TARGET)],
            f"/alpha/{TARGET}": [f("GRP327_1.jpg", 2048), f("other.jpg")],
            "/gamma": [d(TARGET)],
            f"/gamma/{TARGET}": [f("GRP327_2.jpg", 4096)],
        },
        failing={"/beta"},
    )
