from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import FormatError, StorageCorruption

logger = logging.getLogger(__name__)

CACHE_KEY = "factions.cache"
MANUAL_KEY = "factions.manual"


def epoch_ms() -> int:
    return int(time.time() * 1000)


class CacheRecord(BaseModel):
    """Last successfully loaded faction list, stored exactly as received."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    captured_at_ms: int = Field(alias="capturedAtEpochMs")
    raw_list: List[str] = Field(alias="rawList")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class KeyValueBackend:
    """Minimal string key/value persistence used by ListStore."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueBackend(KeyValueBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueBackend(KeyValueBackend):
    """One JSON file per key inside a store directory.

    Directory structure:
    store_dir/
    ├── factions.cache.json     # {"capturedAtEpochMs": ..., "rawList": [...]}
    └── factions.manual.json    # [...]

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers only ever see a whole record.
    """

    def __init__(self, store_dir: str | os.PathLike):
        self.store_dir = os.path.abspath(store_dir)
        os.makedirs(self.store_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.store_dir, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.store_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete(self, key: str) -> None:
        try:
            os.unlink(self._path(key))
        except FileNotFoundError:
            pass


class ListStore:
    """Persistent home of the cached faction list and the manual override."""

    def __init__(self, backend: KeyValueBackend, clock: Callable[[], int] = epoch_ms):
        """
        Args:
            backend: Where records are persisted
            clock: Returns the current time in epoch milliseconds
        """
        self.backend = backend
        self.clock = clock

    # ------------------------------------------------------------------ #
    # Decoding
    # ------------------------------------------------------------------ #

    @staticmethod
    def _decode_cache(raw: str) -> CacheRecord:
        try:
            return CacheRecord.model_validate_json(raw)
        except ValidationError as e:
            raise StorageCorruption(f"cache record unreadable: {e.error_count()} error(s)") from e

    @staticmethod
    def _decode_list(raw: str) -> List[str]:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruption(f"manual list is not JSON: {e}") from e
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise StorageCorruption("manual list is not an array of strings")
        return value

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def read_cache(self) -> Optional[CacheRecord]:
        raw = self.backend.get(CACHE_KEY)
        if raw is None:
            return None
        try:
            return self._decode_cache(raw)
        except StorageCorruption as e:
            logger.warning(f"Ignoring corrupt cache: {e}")
            return None

    def write_cache(self, raw_list: List[str]) -> CacheRecord:
        record = CacheRecord(captured_at_ms=self.clock(), raw_list=list(raw_list))
        self.backend.set(CACHE_KEY, record.to_json())
        return record

    def read_manual_override(self) -> Optional[List[str]]:
        raw = self.backend.get(MANUAL_KEY)
        if raw is None:
            return None
        try:
            return self._decode_list(raw)
        except StorageCorruption as e:
            logger.warning(f"Ignoring corrupt manual list: {e}")
            return None

    def write_manual_override(self, raw_list: List[str]) -> None:
        """Store the manual list and refresh the cache with the same list,
        so clearing the override later falls back to a fresh-looking record."""
        self.backend.set(MANUAL_KEY, json.dumps(list(raw_list), ensure_ascii=False))
        self.write_cache(raw_list)

    def clear_all(self) -> None:
        self.backend.delete(CACHE_KEY)
        self.backend.delete(MANUAL_KEY)

    def cache_age_s(self, record: CacheRecord) -> float:
        return (self.clock() - record.captured_at_ms) / 1000.0

    def is_fresh(self, record: CacheRecord, ttl_s: float) -> bool:
        return self.clock() - record.captured_at_ms < ttl_s * 1000


def parse_manual_list(text: str) -> List[str]:
    """Parse a pasted JSON array of faction names (e.g. '["The Swarm","Stage Fright"]')."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON: {e}") from e
    if not isinstance(value, list):
        raise FormatError("Not an array")
    if not all(isinstance(v, str) for v in value):
        raise FormatError("Array must contain only strings")
    return value
