"""Repairs for the mixed encodings a remote server uses in its listings.

Two independent steps live here. ``repair_path`` is applied to every path the
walker hands to the next listing call. ``decode_name`` percent-decodes names
taken from a listing before they are matched, displayed or joined into a path.

The path repair is a heuristic inherited from observed server behaviour: a
path holding whitespace loses all of it, any other path has its wire bytes
re-read under a legacy single-byte Cyrillic code page. Setting
``repair=False`` turns it into a pass-through.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from urllib.parse import unquote

from ftpphotos.errors import DecodingError

log = logging.getLogger(__name__)


def strip_whitespace(path: str) -> str:
    return "".join(path.split())


def reinterpret(path: str, wire_encoding: str, codepage: str) -> str:
    raw = path.encode(wire_encoding, errors="surrogateescape")
    return raw.decode(codepage, errors="replace")


def percent_decode(value: str) -> str:
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodingError(value, str(exc)) from exc


@dataclass(slots=True)
class EncodingNormalizer:
    wire_encoding: str = "utf-8"
    legacy_codepage: str = "cp1251"
    repair: bool = True

    def repair_path(self, path: str) -> str:
        if not self.repair:
            return path
        if any(ch.isspace() for ch in path):
            return strip_whitespace(path)
        return reinterpret(path, self.wire_encoding, self.legacy_codepage)

    def decode_name(self, value: str) -> str | None:
        try:
            return percent_decode(value)
        except DecodingError as exc:
            log.warning("skipping undecodable name: %s", exc)
            return None
