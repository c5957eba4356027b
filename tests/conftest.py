from __future__ import annotations

from typing import Callable, Dict, List, Union

import httpx
import pytest

from faction_marker.config import MarkerConfig
from faction_marker.store.list_store import ListStore, MemoryKeyValueBackend

HOUR_MS = 60 * 60 * 1000
START_MS = 1_700_000_000_000

M1 = "https://mirror1.example.com/factions.json"
M2 = "https://mirror2.example.com/factions.json"
M3 = "https://mirror3.example.com/factions.json"

PROFILE_HTML = """<html><body>
<div id="mainContainer">
  <div class="profile-wrapper">
    <span title="Member of {faction}"><a href="/factions.php?step=profile&amp;ID=7">{faction}</a></span>
    <div class="buttons-list"><a class="attack">Attack</a></div>
  </div>
</div>
</body></html>"""

CONTAINER_ONLY_HTML = """<html><body>
<div id="mainContainer">
  <div class="buttons-list"><a class="attack">Attack</a></div>
</div>
</body></html>"""


class FakeClock:
    def __init__(self, now_ms: int = START_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance_hours(self, hours: float) -> None:
        self.now_ms += int(hours * HOUR_MS)


RouteSpec = Union[Exception, tuple]


class MirrorStub:
    """httpx.MockTransport wrapper that records requested URLs."""

    def __init__(self, routes: Dict[str, RouteSpec]):
        self.routes = routes
        self.calls: List[str] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        route = self.routes.get(url, (404, "not found"))
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, text=body)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> ListStore:
    return ListStore(MemoryKeyValueBackend(), clock=clock)


@pytest.fixture
def mirrors() -> Callable[[Dict[str, RouteSpec]], MirrorStub]:
    return MirrorStub


@pytest.fixture
def fast_config(tmp_path) -> MarkerConfig:
    return MarkerConfig(
        mirrors=[],
        max_wait_s=0.05,
        poll_interval_s=0.01,
        debounce_s=0.02,
        store_dir=tmp_path / "store",
    )


def profile_html(faction: str = "The Swarm") -> str:
    return PROFILE_HTML.format(faction=faction)
