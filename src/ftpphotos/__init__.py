"""Photo metadata harvested from a remote FTP directory tree."""

from ftpphotos.errors import (
    DecodingError,
    ListingError,
    NoResultsError,
    PhotoServiceError,
    RemoteConnectionError,
)
from ftpphotos.models import Photo, RawEntry

__all__ = [
    "DecodingError",
    "ListingError",
    "NoResultsError",
    "Photo",
    "PhotoServiceError",
    "RawEntry",
    "RemoteConnectionError",
]
