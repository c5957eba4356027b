from .list_store import (
    CACHE_KEY,
    MANUAL_KEY,
    CacheRecord,
    FileKeyValueBackend,
    KeyValueBackend,
    ListStore,
    MemoryKeyValueBackend,
    epoch_ms,
    parse_manual_list,
)

__all__ = [
    "CACHE_KEY",
    "MANUAL_KEY",
    "CacheRecord",
    "FileKeyValueBackend",
    "KeyValueBackend",
    "ListStore",
    "MemoryKeyValueBackend",
    "epoch_ms",
    "parse_manual_list",
]
