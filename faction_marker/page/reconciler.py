from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Sequence

from .document import HostDocument


@dataclass(frozen=True)
class Placement:
    placed: bool
    where: str

    def __str__(self) -> str:
        return f"{self.placed} @ {self.where}"


SKIPPED = Placement(placed=False, where="(skipped)")


@dataclass(frozen=True)
class MarkerSpec:
    """What the marker looks like. Layout details stay inline and minimal."""
    banner_id: str
    badge_id: str
    banner_url: str
    badge_text: str
    width: int = 750
    height: int = 140
    alt: str = "Iron Dome Alliance"

    def render(self) -> str:
        banner = (
            f'<img id="{html.escape(self.banner_id)}" src="{html.escape(self.banner_url)}" '
            f'alt="{html.escape(self.alt)}" referrerpolicy="no-referrer" decoding="async" '
            f'loading="lazy" style="width:{self.width}px;height:{self.height}px;'
            f'border:1px solid rgba(255,255,255,0.12);border-radius:8px;display:block;'
            f'margin:10px auto 4px auto">'
        )
        badge = (
            f'<div id="{html.escape(self.badge_id)}" style="color:#ff4444;font-weight:bold;'
            f'text-align:center;margin-top:6px">{html.escape(self.badge_text)}</div>'
        )
        return banner + badge


class MarkerReconciler:
    """Converges the DOM to "marker shown" or "marker absent".

    The host page may drop or move a previous marker while re-rendering, so
    every call removes whatever is there before deciding to insert again.
    """

    def __init__(
        self,
        document: HostDocument,
        marker: MarkerSpec,
        container_selector: str,
        fallback_mounts: Sequence[str] = ("#mainContainer", "main", "#content", "body"),
    ):
        self.document = document
        self.marker = marker
        self.container_selector = container_selector
        self.fallback_mounts = list(fallback_mounts)
        if "body" not in self.fallback_mounts:
            self.fallback_mounts.append("body")

    async def remove_existing(self) -> int:
        removed = 0
        for element_id in (self.marker.banner_id, self.marker.badge_id):
            removed += await self.document.remove_by_id(element_id)
        return removed

    async def reconcile(self, should_show: bool) -> Placement:
        await self.remove_existing()
        if not should_show:
            return SKIPPED

        fragment = self.marker.render()
        if await self.document.insert_after(self.container_selector, fragment):
            return Placement(True, f"{self.container_selector}(afterend)")

        # Visible somewhere predictable if the container is missing
        for mount in self.fallback_mounts:
            if await self.document.append_child(mount, fragment):
                return Placement(True, f"{mount}(append)")
        return Placement(False, "(no mount point)")
