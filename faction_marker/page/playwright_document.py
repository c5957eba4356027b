from __future__ import annotations

from typing import Optional

from playwright.async_api import Page

from .document import HostDocument

_TEXT_OF_FIRST_JS = """(sel) => {
  const el = document.querySelector(sel);
  return el ? el.textContent : null;
}"""

_REMOVE_BY_ID_JS = """(id) => {
  let removed = 0, el;
  while ((el = document.getElementById(id))) { el.remove(); removed++; }
  return removed;
}"""

_INSERT_JS = """([sel, html, position]) => {
  const el = document.querySelector(sel);
  if (!el) return false;
  el.insertAdjacentHTML(position, html);
  return true;
}"""


class PlaywrightDocument(HostDocument):
    """HostDocument over a live Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    async def exists(self, selector: str) -> bool:
        return await self.page.query_selector(selector) is not None

    async def text_of_first(self, selector: str) -> Optional[str]:
        return await self.page.evaluate(_TEXT_OF_FIRST_JS, selector)

    async def remove_by_id(self, element_id: str) -> int:
        return await self.page.evaluate(_REMOVE_BY_ID_JS, element_id)

    async def insert_after(self, selector: str, html: str) -> bool:
        return await self.page.evaluate(_INSERT_JS, [selector, html, "afterend"])

    async def append_child(self, selector: str, html: str) -> bool:
        return await self.page.evaluate(_INSERT_JS, [selector, html, "beforeend"])
