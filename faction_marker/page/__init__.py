from .document import HostDocument, SoupDocument
from .evaluator import MembershipEvaluator
from .readiness import PageReadinessWaiter, ReadinessPhase
from .reconciler import MarkerReconciler, MarkerSpec, Placement
from .scheduler import EvaluationScheduler, SchedulerState

__all__ = [
    "HostDocument",
    "SoupDocument",
    "MembershipEvaluator",
    "PageReadinessWaiter",
    "ReadinessPhase",
    "MarkerReconciler",
    "MarkerSpec",
    "Placement",
    "EvaluationScheduler",
    "SchedulerState",
]
