"""Error kinds raised while harvesting photo metadata."""

from __future__ import annotations


class PhotoServiceError(Exception):
    """Base class for every error raised by ftpphotos."""


class ConfigError(PhotoServiceError):
    """Raised when the configuration file holds an unusable value."""


class ListingError(PhotoServiceError):
    """A single remote directory could not be listed."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"cannot list {path!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodingError(PhotoServiceError):
    """A remote name could not be turned into text."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        self.reason = reason
        message = f"cannot decode {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RemoteConnectionError(PhotoServiceError, ConnectionError):
    """The remote session could not be established."""


class NoResultsError(PhotoServiceError):
    """A full walk finished without a single matching photo."""


__all__ = [
    "PhotoServiceError",
    "ConfigError",
    "ListingError",
    "DecodingError",
    "RemoteConnectionError",
    "NoResultsError",
]
