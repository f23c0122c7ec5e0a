"""Depth-first search of a remote tree for every copy of a target folder.

The walker never talks to the network itself. It is driven by a ``list_dir``
callable returning ``RawEntry`` rows for a path, which in production is
``FtpConnection.list_dir`` and in tests an in-memory tree.

Matching happens when a target folder is discovered in its parent's listing.
Its contents are listed through the plain joined path, while recursion goes
through ``EncodingNormalizer.repair_path``. A folder whose listing fails is
logged, counted in ``WalkStats.failures`` and treated as empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import posixpath
from typing import Callable, Sequence

from ftpphotos.builder import build_photo
from ftpphotos.encoding import EncodingNormalizer
from ftpphotos.errors import DecodingError, ListingError
from ftpphotos.models import Photo, RawEntry

log = logging.getLogger(__name__)

ListDir = Callable[[str], Sequence[RawEntry]]

SKIP_NAMES = {".", ".."}
# A decoded name holding these would escape its parent in posixpath.join.
UNSAFE_CHARS = ("/", "\x00")
DEFAULT_MAX_DEPTH = 64


@dataclass(slots=True)
class WalkStats:
    listed: int = 0
    matched_folders: int = 0
    skipped_names: int = 0
    depth_capped: int = 0
    failures: list[ListingError] = field(default_factory=list)


class RemoteTreeWalker:
    def __init__(
        self,
        list_dir: ListDir,
        normalizer: EncodingNormalizer | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.list_dir = list_dir
        self.normalizer = normalizer or EncodingNormalizer()
        self.max_depth = max_depth
        self.stats = WalkStats()

    def walk(self, root: str, target_folder: str, name_prefix: str) -> list[Photo]:
        self.stats = WalkStats()
        photos: list[Photo] = []

        if posixpath.basename(root.rstrip("/")) == target_folder:
            photos.extend(self._collect(root, name_prefix))

        stack: list[tuple[str, int]] = [(root, 0)]
        while stack:
            path, depth = stack.pop()
            children: list[str] = []
            for entry in self._list(path):
                if not entry.is_dir or entry.name in SKIP_NAMES:
                    continue
                name = self._decode(entry.name)
                if name is None or name in SKIP_NAMES:
                    continue
                child = posixpath.join(path, name)
                if name == target_folder:
                    self.stats.matched_folders += 1
                    photos.extend(self._collect(child, name_prefix))
                children.append(self.normalizer.repair_path(child))

            if not children:
                continue
            if depth >= self.max_depth:
                log.warning("depth limit %d reached at %s; %d subfolders not visited", self.max_depth, path, len(children))
                self.stats.depth_capped += len(children)
                continue
            # Reversed so siblings pop in listing order.
            stack.extend((child, depth + 1) for child in reversed(children))

        log.debug(
            "walk of %s done: %d listings, %d matched folders, %d failures",
            root,
            self.stats.listed,
            self.stats.matched_folders,
            len(self.stats.failures),
        )
        return photos

    def _list(self, path: str) -> Sequence[RawEntry]:
        try:
            entries = self.list_dir(path)
        except ListingError as exc:
            log.warning("listing failed, continuing: %s", exc)
            self.stats.failures.append(exc)
            return []
        self.stats.listed += 1
        return entries

    def _decode(self, value: str) -> str | None:
        name = self.normalizer.decode_name(value)
        if name is not None and any(ch in name for ch in UNSAFE_CHARS):
            log.warning("skipping name with path separator: %r", value)
            name = None
        if name is None:
            self.stats.skipped_names += 1
        return name

    def _collect(self, folder: str, name_prefix: str) -> list[Photo]:
        out: list[Photo] = []
        for entry in self._list(folder):
            if entry.name in SKIP_NAMES:
                continue
            name = self._decode(entry.name)
            if name is None or not name.startswith(name_prefix):
                continue
            try:
                out.append(build_photo(replace(entry, name=name), folder, self.normalizer))
            except DecodingError as exc:
                log.warning("skipping %s: %s", name, exc)
                self.stats.skipped_names += 1
        return out


def walk(
    list_dir: ListDir,
    root: str,
    target_folder: str,
    name_prefix: str,
    normalizer: EncodingNormalizer | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Photo]:
    return RemoteTreeWalker(list_dir, normalizer, max_depth).walk(root, target_folder, name_prefix)
