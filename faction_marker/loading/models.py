from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

MembershipSet = FrozenSet[str]


def normalize_name(name: Optional[str]) -> str:
    """Trimmed, lower-cased form used both to build and to query a MembershipSet."""
    return (name or "").strip().lower()


def build_membership_set(raw_list: Iterable[str]) -> MembershipSet:
    return frozenset(normalize_name(n) for n in raw_list)


class SourceKind(str, Enum):
    MANUAL = "manual"
    CACHE = "cache"
    MIRROR = "mirror"
    STALE_CACHE = "stale-cache"
    BUILTIN = "builtin"
    NONE = "none"


@dataclass(frozen=True)
class LoadOutcome:
    """Result of resolving the faction list. `source_label` and `error` are for diagnostics only."""
    members: MembershipSet
    source_kind: SourceKind
    source_label: str
    count: int
    error: Optional[str] = None

    @classmethod
    def from_list(
        cls,
        raw_list: list[str],
        kind: SourceKind,
        label: Optional[str] = None,
        error: Optional[str] = None,
    ) -> "LoadOutcome":
        return cls(
            members=build_membership_set(raw_list),
            source_kind=kind,
            source_label=label or kind.value,
            count=len(raw_list),
            error=error,
        )

    @classmethod
    def empty(cls, error: Optional[str]) -> "LoadOutcome":
        return cls(
            members=frozenset(),
            source_kind=SourceKind.NONE,
            source_label=SourceKind.NONE.value,
            count=0,
            error=error,
        )
