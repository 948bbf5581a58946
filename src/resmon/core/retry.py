"""Failure classification and allocation escalation for failed nodes.

Priority order of the classification:
- the task ran out of its disk allocation: reported, never escalated
- the probe killed the task for exceeding a limit: escalated through the
  category policy until the policy reports exhaustion
- anything else is left to the engine's own failure handling
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from resmon.adapters.base import WorkflowEngine
from resmon.config import Settings
from resmon.models.dag import BatchTask, TaskInfo, WorkflowNode
from resmon.models.enums import AllocationLabel, FailureKind, NodeState, RetryDecision

logger = logging.getLogger(__name__)


def classify_failure(info: TaskInfo, overflow_exit_code: int) -> FailureKind:
    """Classify a failed attempt from the backend's post-execution info."""
    if info.disk_allocation_exhausted:
        return FailureKind.DISK_EXHAUSTED
    if info.exit_code == overflow_exit_code:
        return FailureKind.RESOURCE_OVERFLOW
    return FailureKind.UNRELATED


class RetryController:
    def __init__(self, engine: WorkflowEngine, settings: Settings, stream: TextIO | None = None):
        self.engine = engine
        self.settings = settings
        self.stream = stream

    def _emit(self, text: str) -> None:
        print(text, file=self.stream or sys.stderr)

    def handle_failure(self, node: WorkflowNode, task: BatchTask) -> RetryDecision:
        kind = classify_failure(task.info, self.settings.overflow_exit_code)

        if kind == FailureKind.DISK_EXHAUSTED:
            self._emit(f"\nrule {node.node_id} failed because it exceeded its disk allocation capacity.")
            if node.resources_measured is not None:
                self._emit(node.resources_measured.format_text())
            return RetryDecision.TERMINAL

        if kind == FailureKind.UNRELATED:
            return RetryDecision.NOT_HANDLED

        logger.info("rule %d failed because it exceeded the resources limits.", node.node_id)
        measured = node.resources_measured
        if measured is not None and measured.limits_exceeded is not None:
            logger.info("%s", measured.limits_exceeded.format_text(pprint=True))

        next_label = node.category.next_label(
            node.resource_request,
            True,
            node.resources_requested,
            measured,
        )
        if next_label == AllocationLabel.ERROR:
            logger.warning(
                "rule %d cannot be given a larger allocation in category %s",
                node.node_id, node.category.name,
            )
            return RetryDecision.TERMINAL

        logger.info(
            "Rule %d resubmitted using new resource allocation (%s -> %s).",
            node.node_id, node.resource_request.value, next_label.value,
        )
        node.resource_request = next_label
        self.engine.log_node_state_change(node, NodeState.WAITING)
        return RetryDecision.RESUBMIT
