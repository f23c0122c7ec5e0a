from __future__ import annotations

from ftpphotos.encoding import EncodingNormalizer
from ftpphotos.errors import DecodingError
from ftpphotos.models import Photo, RawEntry


def build_photo(entry: RawEntry, containing_path: str, normalizer: EncodingNormalizer) -> Photo:
    path = normalizer.decode_name(containing_path)
    if path is None:
        raise DecodingError(containing_path, "containing path")
    return Photo(
        name=entry.name,
        path=path,
        creation_time=entry.timestamp,
        size=entry.size,
    )
