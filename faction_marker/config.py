"""Configuration for the faction marker."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

import validators
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

# Mirrors (first working one wins)
DEFAULT_MIRRORS = [
    "https://cdn.jsdelivr.net/gh/WetNightmare/FactionAlliance@main/iron-dome-factions.json?v=1",
    "https://wetnightmare.github.io/FactionAlliance/iron-dome-factions.json",
    "https://raw.githubusercontent.com/WetNightmare/FactionAlliance/main/iron-dome-factions.json",
]

# Marker
DEFAULT_BANNER_URL = (
    "https://github.com/WetNightmare/FactionAlliance/blob/"
    "f373bfec9fd256ca995895a19c64141c05c685a0/iron-dome-banner-750x140.png?raw=true"
)
DEFAULT_BADGE_TEXT = "MEMBER OF THE IRON DOME"
BANNER_ID = "iron-dome-banner"
BADGE_ID = "iron-dome-tag"

# Timings (seconds)
CACHE_TTL_S = 12 * 60 * 60
FETCH_TIMEOUT_S = 8.0
MAX_WAIT_S = 12.0
POLL_INTERVAL_S = 0.2
DEBOUNCE_S = 0.25

# Bodies shorter than this are treated as ghost responses
MIN_BODY_LENGTH = 5

# Storage
HOME_ENV_VAR = "FACTION_MARKER_HOME"
DEFAULT_STORE_DIR = Path.home() / ".faction_marker"


def default_store_dir() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_STORE_DIR


class PageSelectors(BaseModel):
    """CSS selectors locating the anchors on the host page."""

    model_config = ConfigDict(extra="forbid")

    container: str = ".buttons-list"
    identity: str = 'span[title*=" of "] a[href*="/factions.php"]'
    fallback_mounts: List[str] = Field(
        default_factory=lambda: ["#mainContainer", "main", "#content", "body"]
    )


class MarkerConfig(BaseModel):
    """Validated settings for one marker pipeline."""

    model_config = ConfigDict(extra="forbid")

    mirrors: List[str] = Field(default_factory=lambda: list(DEFAULT_MIRRORS))
    builtin_list: Optional[List[str]] = None

    banner_url: str = DEFAULT_BANNER_URL
    banner_width: int = Field(default=750, gt=0)
    banner_height: int = Field(default=140, gt=0)
    badge_text: str = DEFAULT_BADGE_TEXT
    banner_id: str = BANNER_ID
    badge_id: str = BADGE_ID

    cache_ttl_s: float = Field(default=CACHE_TTL_S, gt=0)
    fetch_timeout_s: float = Field(default=FETCH_TIMEOUT_S, gt=0)
    min_body_length: int = Field(default=MIN_BODY_LENGTH, ge=0)
    max_wait_s: float = Field(default=MAX_WAIT_S, ge=0)
    poll_interval_s: float = Field(default=POLL_INTERVAL_S, gt=0)
    debounce_s: float = Field(default=DEBOUNCE_S, gt=0)

    # Bypass only the membership check (still waits for DOM anchors)
    force_show: bool = False
    debug: bool = False

    selectors: PageSelectors = Field(default_factory=PageSelectors)
    store_dir: Path = Field(default_factory=default_store_dir)

    @field_validator("mirrors")
    @classmethod
    def _check_mirrors(cls, value: List[str]) -> List[str]:
        bad = [u for u in value if validators.url(u) is not True]
        if bad:
            raise ValueError(f"invalid mirror URL(s): {', '.join(bad)}")
        return value

    @field_validator("banner_id", "badge_id")
    @classmethod
    def _check_ids(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("element ids must not be empty")
        return value

    @property
    def marker_ids(self) -> List[str]:
        return [self.banner_id, self.badge_id]

    @classmethod
    def from_file(cls, path: str | Path) -> "MarkerConfig":
        """Load a JSON config file. Raises ConfigError on any problem."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a JSON object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e


def load_config(path: str | Path | None = None) -> MarkerConfig:
    if path is None:
        return MarkerConfig()
    return MarkerConfig.from_file(path)
