"""Narrow async DOM interface the membership pipeline works against."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup


class HostDocument:
    """The handful of DOM operations the pipeline needs from a host page."""

    async def exists(self, selector: str) -> bool:
        raise NotImplementedError

    async def text_of_first(self, selector: str) -> Optional[str]:
        """Text content of the first element matching selector, or None."""
        raise NotImplementedError

    async def remove_by_id(self, element_id: str) -> int:
        """Remove every element carrying element_id. Returns how many were removed."""
        raise NotImplementedError

    async def insert_after(self, selector: str, html: str) -> bool:
        """Insert html right after the first match. False if nothing matched."""
        raise NotImplementedError

    async def append_child(self, selector: str, html: str) -> bool:
        """Append html as the last children of the first match. False if nothing matched."""
        raise NotImplementedError


class SoupDocument(HostDocument):
    """HostDocument over a static HTML snapshot, backed by BeautifulSoup."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html, "html.parser")

    @classmethod
    def from_file(cls, path: str | Path) -> "SoupDocument":
        return cls(Path(path).read_text(encoding="utf-8", errors="replace"))

    @property
    def html(self) -> str:
        return str(self.soup)

    @staticmethod
    def _fragment(html: str) -> list:
        return list(BeautifulSoup(html, "html.parser").contents)

    async def exists(self, selector: str) -> bool:
        return self.soup.select_one(selector) is not None

    async def text_of_first(self, selector: str) -> Optional[str]:
        el = self.soup.select_one(selector)
        return el.get_text() if el is not None else None

    async def remove_by_id(self, element_id: str) -> int:
        found = self.soup.find_all(id=element_id)
        for el in found:
            el.decompose()
        return len(found)

    async def insert_after(self, selector: str, html: str) -> bool:
        anchor = self.soup.select_one(selector)
        if anchor is None:
            return False
        previous = anchor
        for node in self._fragment(html):
            previous.insert_after(node)
            previous = node
        return True

    async def append_child(self, selector: str, html: str) -> bool:
        parent = self.soup.select_one(selector)
        if parent is None:
            return False
        for node in self._fragment(html):
            parent.append(node)
        return True
