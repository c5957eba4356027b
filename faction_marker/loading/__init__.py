from .list_loader import (
    BuiltinListSource,
    FreshCacheSource,
    ListLoader,
    ListSource,
    ManualOverrideSource,
    MirrorSource,
    StaleCacheSource,
    first_success,
)
from .models import LoadOutcome, MembershipSet, SourceKind, build_membership_set, normalize_name

__all__ = [
    "BuiltinListSource",
    "FreshCacheSource",
    "ListLoader",
    "ListSource",
    "ManualOverrideSource",
    "MirrorSource",
    "StaleCacheSource",
    "first_success",
    "LoadOutcome",
    "MembershipSet",
    "SourceKind",
    "build_membership_set",
    "normalize_name",
]
