"""Mark alliance faction members on profile pages."""

from .config import MarkerConfig, PageSelectors, load_config
from .loading import ListLoader, LoadOutcome, SourceKind, normalize_name
from .pipeline import EvaluationReport, MembershipPipeline, open_store
from .store import ListStore

__version__ = "1.5.0"

__all__ = [
    "MarkerConfig",
    "PageSelectors",
    "load_config",
    "ListLoader",
    "LoadOutcome",
    "SourceKind",
    "normalize_name",
    "EvaluationReport",
    "MembershipPipeline",
    "open_store",
    "ListStore",
]
