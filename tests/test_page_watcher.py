from __future__ import annotations

import logging

from faction_marker.page.page_watcher import BINDING_NAME, HostPageWatcher


class FakeFrame:
    def __init__(self, url: str):
        self.url = url


class FakePage:
    """Just enough of playwright's Page for the watcher."""

    def __init__(self, url: str = "https://www.torn.com/profiles.php?XID=1"):
        self.url = url
        self.main_frame = FakeFrame(url)
        self.bindings = {}
        self.listeners = {}
        self.evaluations = []

    async def expose_function(self, name, fn) -> None:
        self.bindings[name] = fn

    def on(self, event, cb) -> None:
        self.listeners.setdefault(event, []).append(cb)

    def remove_listener(self, event, cb) -> None:
        self.listeners[event].remove(cb)

    async def evaluate(self, script, arg=None):
        self.evaluations.append(arg)
        return True


async def started_watcher():
    page = FakePage()
    reasons = []
    watcher = HostPageWatcher(page, reasons.append, ["iron-dome-banner", "iron-dome-tag"], logging.getLogger("test"))
    await watcher.start()
    return page, watcher, reasons


async def test_start_installs_observer_with_marker_ids() -> None:
    page, _, _ = await started_watcher()

    assert BINDING_NAME in page.bindings
    assert page.evaluations == [[BINDING_NAME, ["iron-dome-banner", "iron-dome-tag"]]]
    assert set(page.listeners) == {"framenavigated", "load", "crash", "close"}


async def test_binding_calls_become_mutation_triggers() -> None:
    page, _, reasons = await started_watcher()

    page.bindings[BINDING_NAME]("mutation")

    assert reasons == ["mutation"]


async def test_only_main_frame_url_changes_trigger() -> None:
    page, watcher, reasons = await started_watcher()
    on_navigate = page.listeners["framenavigated"][0]

    on_navigate(FakeFrame("https://ads.example.com/frame"))
    on_navigate(page.main_frame)
    page.main_frame.url = "https://www.torn.com/profiles.php?XID=2"
    on_navigate(page.main_frame)

    assert reasons == ["url-change"]
    assert watcher.last_url.endswith("XID=2")


async def test_load_reinstalls_observer() -> None:
    page, _, reasons = await started_watcher()

    await page.listeners["load"][0](page)

    assert len(page.evaluations) == 2
    assert reasons == ["load"]


async def test_close_detaches_and_silences() -> None:
    page, watcher, reasons = await started_watcher()

    page.listeners["close"][0](page)
    page.bindings[BINDING_NAME]("mutation")

    assert watcher.closing
    assert all(not cbs for cbs in page.listeners.values())
    assert reasons == []
