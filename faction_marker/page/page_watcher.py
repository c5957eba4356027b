from __future__ import annotations

from logging import Logger
from typing import Callable, List, Sequence

from playwright.async_api import Frame, Page

BINDING_NAME = "__factionMarkerNotify"

# Mutations made only of marker nodes are our own reconcile and are ignored
_OBSERVER_JS = """([binding, ownIds]) => {
  if (window.__factionMarkerObserver || !document.documentElement) return false;
  const own = (n) => n.nodeType === 1 && ownIds.includes(n.id);
  const obs = new MutationObserver((records) => {
    const foreign = records.some((r) =>
      [...r.addedNodes, ...r.removedNodes].some((n) => !own(n)));
    if (foreign) window[binding]('mutation');
  });
  obs.observe(document.documentElement, { childList: true, subtree: true });
  window.__factionMarkerObserver = obs;
  return true;
}"""


class HostPageWatcher:
    """
    Forward DOM mutations and navigations of a live page as evaluation triggers.
    """

    def __init__(self, page: Page, on_change: Callable[[str], None], marker_ids: Sequence[str], logger: Logger):
        self.page = page
        self.on_change = on_change
        self.marker_ids = list(marker_ids)
        self.logger = logger
        self.closing = False
        self.last_url = page.url
        self._handlers: List[tuple] = []

    async def start(self) -> None:
        await self.page.expose_function(BINDING_NAME, self._on_binding)
        for event, cb in (
            ('framenavigated', self._on_navigate),
            ('load', self._on_load),
            ('crash', self._on_crash),
            ('close', self._on_close),
        ):
            self.page.on(event, cb)
            self._handlers.append((event, cb))
        await self.install_observer()

    async def install_observer(self) -> bool:
        try:
            return await self.page.evaluate(_OBSERVER_JS, [BINDING_NAME, self.marker_ids])
        except Exception as e:
            self.logger.debug(f'Observer install failed (page navigating?): {e}')
            return False

    def _notify(self, reason: str) -> None:
        if self.closing:
            return
        self.on_change(reason)

    def _on_binding(self, reason: str) -> None:
        self._notify(reason)

    def _on_navigate(self, frame: Frame) -> None:
        if frame != self.page.main_frame:
            return
        if frame.url != self.last_url:
            self.logger.debug(f'URL changed: {self.last_url} -> {frame.url}')
            self.last_url = frame.url
            self._notify('url-change')

    async def _on_load(self, page: Page) -> None:
        # A full load replaces the document and its observer
        await self.install_observer()
        self._notify('load')

    def _on_crash(self, page: Page) -> None:
        self.logger.error(f'Page crashed: {page.url}')

    def _on_close(self, page: Page) -> None:
        self.logger.warning(f'Page closed: {page.url}')
        self.dispose()

    def dispose(self) -> None:
        """Stop listening for page events."""
        self.closing = True
        for event, cb in self._handlers:
            try:
                self.page.remove_listener(event, cb)
            except Exception as e:
                self.logger.debug(f'Could not detach {event} handler: {e}')
        self._handlers.clear()
