from __future__ import annotations

from typing import Optional

from ..loading.models import MembershipSet, normalize_name
from .document import HostDocument


class MembershipEvaluator:
    """Reads the subject's faction from the page and tests it against the list."""

    def __init__(self, document: HostDocument, identity_selector: str):
        self.document = document
        self.identity_selector = identity_selector

    async def extract_identity(self) -> Optional[str]:
        text = await self.document.text_of_first(self.identity_selector)
        if text is None:
            return None
        return text.strip() or None

    @staticmethod
    def is_member(identity: Optional[str], members: MembershipSet, force_override: bool = False) -> bool:
        if force_override:
            return True
        return identity is not None and normalize_name(identity) in members
