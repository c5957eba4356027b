from __future__ import annotations

import json
import os

import pytest

from faction_marker.errors import FormatError
from faction_marker.store.list_store import (
    CACHE_KEY,
    MANUAL_KEY,
    FileKeyValueBackend,
    ListStore,
    MemoryKeyValueBackend,
    parse_manual_list,
)

from .conftest import HOUR_MS, START_MS, FakeClock


def test_write_cache_keeps_original_casing_and_stamps_time(store) -> None:
    record = store.write_cache(["The Swarm", " Stage Fright "])

    assert record.captured_at_ms == START_MS
    loaded = store.read_cache()
    assert loaded is not None
    assert loaded.raw_list == ["The Swarm", " Stage Fright "]
    assert loaded.captured_at_ms == START_MS


def test_cache_record_uses_wire_field_names(store) -> None:
    store.write_cache(["Alpha"])

    stored = json.loads(store.backend.get(CACHE_KEY))
    assert stored == {"capturedAtEpochMs": START_MS, "rawList": ["Alpha"]}


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"capturedAtEpochMs": "yesterday", "rawList": []}',
        '{"rawList": ["Alpha"]}',
        '{"capturedAtEpochMs": 1, "rawList": [1, 2]}',
        "[]",
    ],
)
def test_corrupt_cache_reads_as_absent(clock, raw) -> None:
    store = ListStore(MemoryKeyValueBackend({CACHE_KEY: raw}), clock=clock)

    assert store.read_cache() is None


@pytest.mark.parametrize("raw", ["nope", '{"a": 1}', '["ok", 3]'])
def test_corrupt_manual_override_reads_as_absent(clock, raw) -> None:
    store = ListStore(MemoryKeyValueBackend({MANUAL_KEY: raw}), clock=clock)

    assert store.read_manual_override() is None


def test_manual_override_also_refreshes_cache(store, clock) -> None:
    store.write_cache(["Old"])
    clock.advance_hours(30)

    store.write_manual_override(["Alpha", "Beta"])

    assert store.read_manual_override() == ["Alpha", "Beta"]
    record = store.read_cache()
    assert record.raw_list == ["Alpha", "Beta"]
    assert record.captured_at_ms == clock.now_ms


def test_clear_all_removes_both_records(store) -> None:
    store.write_manual_override(["Alpha"])

    store.clear_all()

    assert store.read_cache() is None
    assert store.read_manual_override() is None
    store.clear_all()


def test_freshness_and_age(store, clock) -> None:
    record = store.write_cache(["Alpha"])
    ttl_s = 12 * 3600

    clock.now_ms = record.captured_at_ms + 12 * HOUR_MS - 1
    assert store.is_fresh(record, ttl_s)

    clock.now_ms = record.captured_at_ms + 12 * HOUR_MS
    assert not store.is_fresh(record, ttl_s)
    assert store.cache_age_s(record) == 12 * 3600


def test_file_backend_persists_across_instances(tmp_path) -> None:
    clock = FakeClock()
    first = ListStore(FileKeyValueBackend(tmp_path), clock=clock)
    first.write_manual_override(["Gamma"])

    second = ListStore(FileKeyValueBackend(tmp_path), clock=clock)

    assert second.read_manual_override() == ["Gamma"]
    assert second.read_cache().raw_list == ["Gamma"]
    assert sorted(os.listdir(tmp_path)) == ["factions.cache.json", "factions.manual.json"]


def test_file_backend_corrupt_file_is_ignored(tmp_path) -> None:
    (tmp_path / "factions.cache.json").write_text("{truncated", encoding="utf-8")
    store = ListStore(FileKeyValueBackend(tmp_path), clock=FakeClock())

    assert store.read_cache() is None

    store.write_cache(["Alpha"])
    assert store.read_cache().raw_list == ["Alpha"]


def test_file_backend_delete_missing_key_is_noop(tmp_path) -> None:
    backend = FileKeyValueBackend(tmp_path)
    backend.delete("factions.manual")
    assert backend.get("factions.manual") is None


def test_parse_manual_list() -> None:
    assert parse_manual_list('["The Swarm", "Stage Fright"]') == ["The Swarm", "Stage Fright"]

    with pytest.raises(FormatError, match="Invalid JSON"):
        parse_manual_list("[The Swarm]")
    with pytest.raises(FormatError, match="Not an array"):
        parse_manual_list('{"name": "The Swarm"}')
    with pytest.raises(FormatError, match="only strings"):
        parse_manual_list('["The Swarm", 4]')
