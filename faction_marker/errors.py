"""Error taxonomy for faction list loading and storage."""

from __future__ import annotations


class MarkerError(Exception):
    """Base class for every error raised inside faction_marker."""


class ConfigError(MarkerError):
    """Invalid or unreadable configuration."""


class ListLoadError(MarkerError):
    """A single list source failed; the loader moves on to the next one."""


class TransportError(ListLoadError):
    """Network unreachable or the fetch timed out."""


class ProtocolError(ListLoadError):
    """Non-success status, or a success status with an empty ("ghost") body."""


class FormatError(ListLoadError):
    """Body is not valid JSON, or not a JSON array of strings."""


class StorageCorruption(MarkerError):
    """A persisted record could not be parsed. Treated as if it were absent."""
