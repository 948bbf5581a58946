"""Categories: shared usage statistics and the allocation escalation policy.

A category groups nodes that are expected to use similar resources. Every
measured summary of a node is folded into its category; the accumulated
observations decide the first allocation tried for new nodes, and on a
resource overflow the policy decides whether the node may be retried with a
larger allocation.

Escalation only ever goes FIRST -> MAX. A node that overflows its MAX
allocation, or any node of a FIXED category, cannot be escalated.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import TYPE_CHECKING, Optional

from resmon.models.enums import AllocationLabel, CategoryMode
from resmon.models.summary import RESOURCE_FIELDS, ResourceSummary

if TYPE_CHECKING:
    from resmon.models.dag import WorkflowNode

logger = logging.getLogger(__name__)

# Resources for which a first allocation is computed from observations.
ALLOCATED_RESOURCES: tuple[str, ...] = ("cores", "gpus", "memory", "disk")


class Category:
    def __init__(
        self,
        name: str,
        mode: CategoryMode = CategoryMode.FIXED,
        max_allocation: Optional[ResourceSummary] = None,
        first_allocation: Optional[ResourceSummary] = None,
    ):
        self.name = name
        self.mode = mode
        self.max_allocation = max_allocation
        self.first_allocation = first_allocation
        self.total_tasks = 0
        self.max_resources_seen: Optional[ResourceSummary] = None
        self._sums: dict[str, float] = {}
        self._counts: dict[str, int] = {}
        self._histograms: dict[str, Counter] = {r: Counter() for r in ALLOCATED_RESOURCES}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Category({self.name!r}, mode={self.mode.value}, tasks={self.total_tasks})"

    # ── Accumulation ────────────────────────────────────────────

    def accumulate_summary(self, summary: ResourceSummary) -> None:
        """Fold one measurement into the statistics as a single atomic merge."""
        with self._lock:
            self.total_tasks += 1
            if self.max_resources_seen is None:
                self.max_resources_seen = ResourceSummary(**summary.resources())
            else:
                self.max_resources_seen = self.max_resources_seen.merge_max(summary)
            for name, value in summary.resources().items():
                self._sums[name] = self._sums.get(name, 0.0) + value
                self._counts[name] = self._counts.get(name, 0) + 1
                if name in self._histograms:
                    self._histograms[name][value] += 1
            if self.mode != CategoryMode.FIXED:
                self.first_allocation = self._compute_first_allocation()

    def _compute_first_allocation(self) -> Optional[ResourceSummary]:
        """Pick a first allocation per resource according to the mode.

        Called with the lock held.
        """
        values: dict[str, float] = {}
        for name, histogram in self._histograms.items():
            if not histogram:
                continue
            if self.mode == CategoryMode.MAX:
                values[name] = max(histogram)
            elif self.mode == CategoryMode.MIN_WASTE:
                values[name] = self._min_waste(name, histogram)
            else:
                values[name] = self._max_throughput(name, histogram)
        if not values:
            return None
        return ResourceSummary(category=self.name, **values)

    def _retry_allocation(self, name: str, histogram: Counter) -> float:
        """What a task that overflows its first allocation is retried with."""
        if self.max_allocation is not None:
            limit = getattr(self.max_allocation, name)
            if limit is not None:
                return limit
        return max(histogram)

    def _min_waste(self, name: str, histogram: Counter) -> float:
        # Waste of candidate a: unused a - v for tasks that fit, and the whole
        # first attempt plus the unused retry for tasks that do not.
        retry = self._retry_allocation(name, histogram)
        best, best_waste = None, None
        for candidate in sorted(histogram):
            waste = 0.0
            for value, count in histogram.items():
                if value <= candidate:
                    waste += (candidate - value) * count
                else:
                    waste += (candidate + retry - value) * count
            if best_waste is None or waste < best_waste:
                best, best_waste = candidate, waste
        return best

    def _max_throughput(self, name: str, histogram: Counter) -> float:
        # Tasks completed per unit of resource handed out.
        retry = self._retry_allocation(name, histogram)
        total = sum(histogram.values())
        best, best_rate = None, None
        for candidate in sorted(histogram):
            spent = 0.0
            for value, count in histogram.items():
                spent += (candidate if value <= candidate else candidate + retry) * count
            rate = total / spent if spent > 0 else 0.0
            if best_rate is None or rate > best_rate:
                best, best_rate = candidate, rate
        return best

    def stats(self) -> dict:
        """Snapshot of the accumulated statistics."""
        with self._lock:
            mean = {
                name: self._sums[name] / self._counts[name]
                for name in RESOURCE_FIELDS
                if self._counts.get(name)
            }
            return {
                "category": self.name,
                "mode": self.mode.value,
                "total_tasks": self.total_tasks,
                "max": self.max_resources_seen.resources() if self.max_resources_seen else {},
                "mean": mean,
                "first_allocation": (
                    self.first_allocation.resources() if self.first_allocation else {}
                ),
            }

    # ── Allocation policy ───────────────────────────────────────

    def next_label(
        self,
        current: AllocationLabel,
        resource_overflow: bool,
        requested: Optional[ResourceSummary],
        measured: Optional[ResourceSummary],
    ) -> AllocationLabel:
        """Allocation to use for the next attempt, or ERROR when exhausted."""
        if not resource_overflow:
            return current

        if self.mode == CategoryMode.FIXED:
            logger.debug("Category %s uses fixed allocations, no escalation", self.name)
            return AllocationLabel.ERROR

        if current == AllocationLabel.MAX:
            logger.debug("Category %s: maximum allocation already exceeded", self.name)
            return AllocationLabel.ERROR

        if requested is not None and measured is not None:
            over = requested.exceeded_by(measured)
            if over:
                # Explicit requests are not overridden by the category
                logger.debug(
                    "Category %s: explicitly requested %s exceeded",
                    self.name, ", ".join(over),
                )
                return AllocationLabel.ERROR

        if self.max_allocation is not None and measured is not None:
            over = self.max_allocation.exceeded_by(measured)
            if over:
                logger.debug(
                    "Category %s: measured %s above the maximum allocation",
                    self.name, ", ".join(over),
                )
                return AllocationLabel.ERROR

        return AllocationLabel.MAX

    def dynamic_label(self, node: WorkflowNode) -> Optional[ResourceSummary]:
        """Resource limits a node runs under for its current allocation label."""
        limits = self.max_allocation
        if node.resource_request == AllocationLabel.FIRST and self.mode != CategoryMode.FIXED:
            if self.first_allocation is not None:
                limits = self.first_allocation.overlay(limits)
        # Explicit requests always win
        if node.resources_requested is not None:
            limits = node.resources_requested.overlay(limits)
        return limits
