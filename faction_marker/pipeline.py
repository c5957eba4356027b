"""Wires list loading, readiness, evaluation and marker reconciliation together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging import Logger
from typing import Any, Dict, List, Optional

from .config import MarkerConfig
from .loading.list_loader import ListLoader
from .loading.models import LoadOutcome
from .page.document import HostDocument
from .page.evaluator import MembershipEvaluator
from .page.readiness import PageReadinessWaiter, ReadinessPhase
from .page.reconciler import MarkerReconciler, MarkerSpec, Placement
from .page.scheduler import EvaluationScheduler
from .store.list_store import FileKeyValueBackend, ListStore
from .utils.logging_setup import create_sub_logger


@dataclass(frozen=True)
class EvaluationReport:
    reason: str
    phase: ReadinessPhase
    identity: Optional[str]
    matched: bool
    forced: bool
    placement: Placement
    source: str
    count: int

    @property
    def shown(self) -> bool:
        return self.placement.placed

    def log_extra(self) -> Dict[str, Any]:
        return {
            "reason": self.reason,
            "phase": self.phase.value,
            "identity": self.identity,
            "matched": self.matched,
            "forced": self.forced,
            "placement": str(self.placement),
            "source": self.source,
            "count": self.count,
        }


def open_store(config: MarkerConfig) -> ListStore:
    return ListStore(FileKeyValueBackend(config.store_dir))


def marker_spec(config: MarkerConfig) -> MarkerSpec:
    return MarkerSpec(
        banner_id=config.banner_id,
        badge_id=config.badge_id,
        banner_url=config.banner_url,
        badge_text=config.badge_text,
        width=config.banner_width,
        height=config.banner_height,
    )


class MembershipPipeline:
    """
    One pipeline per page view: the faction list is resolved once in start(),
    then every trigger re-evaluates the page against that list.
    """

    def __init__(
        self,
        config: MarkerConfig,
        document: HostDocument,
        store: ListStore,
        loader: Optional[ListLoader] = None,
        logger: Optional[Logger] = None,
    ):
        self.config = config
        self.document = document
        self.store = store
        self.loader = loader or ListLoader(
            store,
            min_body_length=config.min_body_length,
            builtin_list=config.builtin_list,
        )
        self.logger = logger or logging.getLogger(__name__)

        selectors = config.selectors
        self.waiter = PageReadinessWaiter(document, selectors.container, selectors.identity)
        self.evaluator = MembershipEvaluator(document, selectors.identity)
        self.reconciler = MarkerReconciler(
            document, marker_spec(config), selectors.container, selectors.fallback_mounts
        )
        self.scheduler = EvaluationScheduler(
            self.evaluate, config.debounce_s, create_sub_logger(self.logger, "scheduler")
        )

        self.outcome: Optional[LoadOutcome] = None
        self.last_report: Optional[EvaluationReport] = None

    async def load_list(self) -> LoadOutcome:
        if self.outcome is None:
            self.outcome = await self.loader.resolve(
                self.config.mirrors,
                self.config.cache_ttl_s,
                self.config.fetch_timeout_s,
            )
            self.logger.info(
                f"Faction list ready: {self.outcome.source_label} ({self.outcome.count})"
                + (f", last error: {self.outcome.error}" if self.outcome.error else "")
            )
        return self.outcome

    async def start(self) -> Optional[EvaluationReport]:
        await self.load_list()
        await self.scheduler.run_now("init")
        return self.last_report

    async def evaluate(self, reason: str = "manual") -> EvaluationReport:
        outcome = self.outcome or LoadOutcome.empty(None)

        phase = await self.waiter.wait(self.config.max_wait_s, self.config.poll_interval_s)
        identity = await self.evaluator.extract_identity()
        matched = self.evaluator.is_member(identity, outcome.members)
        should_show = self.evaluator.is_member(identity, outcome.members, self.config.force_show)
        placement = await self.reconciler.reconcile(should_show)

        report = EvaluationReport(
            reason=reason,
            phase=phase,
            identity=identity,
            matched=matched,
            forced=self.config.force_show,
            placement=placement,
            source=outcome.source_label,
            count=outcome.count,
        )
        self.last_report = report
        self.logger.info("Profile evaluated", extra=report.log_extra())
        return report

    def trigger(self, reason: str = "mutation") -> None:
        self.scheduler.trigger(reason)

    def apply_manual_list(self, raw_list: List[str]) -> None:
        """Entry point for the list editor: persist the override, then re-evaluate."""
        self.store.write_manual_override(raw_list)
        self.logger.info(f"Manual list saved: {len(raw_list)} factions")
        self.trigger("manual-save")

    def close(self) -> None:
        self.scheduler.close()
