from __future__ import annotations

import asyncio
import logging
from enum import Enum

from .document import HostDocument

logger = logging.getLogger(__name__)


class ReadinessPhase(str, Enum):
    BOTH = "both"
    ANCHOR_ONLY = "anchor-only"
    CONTAINER_ONLY = "container-only"
    TIMEOUT = "timeout"


def classify(have_container: bool, have_identity: bool) -> ReadinessPhase:
    if have_container and have_identity:
        return ReadinessPhase.BOTH
    if have_identity:
        return ReadinessPhase.ANCHOR_ONLY
    if have_container:
        return ReadinessPhase.CONTAINER_ONLY
    return ReadinessPhase.TIMEOUT


class PageReadinessWaiter:
    """Polls the host document until both anchors exist or the deadline passes."""

    def __init__(self, document: HostDocument, container_selector: str, identity_selector: str):
        self.document = document
        self.container_selector = container_selector
        self.identity_selector = identity_selector

    async def _present(self, selector: str) -> bool:
        try:
            return await self.document.exists(selector)
        except Exception as e:
            # Host page may be mid-navigation
            logger.debug(f"Anchor probe failed for {selector!r}: {e}")
            return False

    async def poll_once(self) -> ReadinessPhase:
        have_container = await self._present(self.container_selector)
        have_identity = await self._present(self.identity_selector)
        return classify(have_container, have_identity)

    async def wait(self, max_duration: float, poll_interval: float) -> ReadinessPhase:
        """
        Returns on the first poll that finds either anchor (`both`,
        `anchor-only` or `container-only`); `timeout` once the deadline passes
        with neither present.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_duration
        while True:
            phase = await self.poll_once()
            if phase is not ReadinessPhase.TIMEOUT:
                return phase
            remaining = deadline - loop.time()
            if remaining <= 0:
                return phase
            await asyncio.sleep(min(poll_interval, remaining))
