from __future__ import annotations

import json

import pytest

from faction_marker.config import (
    DEFAULT_MIRRORS,
    DEFAULT_STORE_DIR,
    HOME_ENV_VAR,
    MarkerConfig,
    default_store_dir,
    load_config,
)
from faction_marker.errors import ConfigError


def write_config(tmp_path, data) -> str:
    path = tmp_path / "marker.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults_are_valid() -> None:
    config = load_config()

    assert config.mirrors == DEFAULT_MIRRORS
    assert config.marker_ids == ["iron-dome-banner", "iron-dome-tag"]
    assert config.cache_ttl_s == 12 * 60 * 60
    assert config.selectors.container == ".buttons-list"
    assert config.selectors.fallback_mounts[-1] == "body"
    assert not config.force_show


def test_from_file_overrides_fields(tmp_path) -> None:
    path = write_config(
        tmp_path,
        {
            "mirrors": ["https://mirror.example.com/list.json"],
            "force_show": True,
            "selectors": {"container": ".profile-buttons"},
            "store_dir": str(tmp_path / "store"),
        },
    )

    config = MarkerConfig.from_file(path)

    assert config.mirrors == ["https://mirror.example.com/list.json"]
    assert config.force_show
    assert config.selectors.container == ".profile-buttons"
    assert config.selectors.identity == MarkerConfig().selectors.identity
    assert config.store_dir == tmp_path / "store"


@pytest.mark.parametrize(
    "data",
    [
        {"mirrors": ["not a url"]},
        {"unknown_option": 1},
        {"selectors": {"bogus": "x"}},
        {"banner_id": "  "},
        {"debounce_s": 0},
        ["not", "an", "object"],
    ],
)
def test_invalid_files_raise_config_error(tmp_path, data) -> None:
    path = write_config(tmp_path, data)

    with pytest.raises(ConfigError):
        MarkerConfig.from_file(path)


def test_unreadable_file_raises_config_error(tmp_path) -> None:
    bad = tmp_path / "broken.json"
    bad.write_text("{ nope", encoding="utf-8")

    with pytest.raises(ConfigError, match="Cannot read config"):
        load_config(bad)
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_store_dir_follows_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path / "home"))
    assert default_store_dir() == tmp_path / "home"
    assert MarkerConfig().store_dir == tmp_path / "home"

    monkeypatch.delenv(HOME_ENV_VAR)
    assert default_store_dir() == DEFAULT_STORE_DIR
