"""Reads a finished node's summary into the node and its category."""

from __future__ import annotations

import logging
from typing import Optional

from resmon.errors import MeasurementAbsent
from resmon.models.dag import WorkflowNode
from resmon.models.summary import ResourceSummary

from .prefix import SUMMARY_SUFFIX
from .summary_parser import parse_summary_file

logger = logging.getLogger(__name__)


class MeasurementIngester:
    def ingest(self, node: WorkflowNode, output_prefix: str) -> Optional[ResourceSummary]:
        """Replace the node's measurement with the one at ``output_prefix``.

        A missing or unreadable summary leaves the node without a measurement
        and returns None; it is never an error at this layer.
        """
        summary_path = output_prefix + SUMMARY_SUFFIX

        # The previous attempt's measurement is released before anything else
        node.resources_measured = None
        try:
            summary = parse_summary_file(summary_path)
        except MeasurementAbsent as e:
            logger.warning("Resource monitor failed to measure resources of rule %d: %s", node.node_id, e)
            return None

        node.resources_measured = summary
        node.category.accumulate_summary(summary)
        logger.debug(
            "Rule %d measured: %s",
            node.node_id,
            ", ".join(f"{k}={v:g}" for k, v in summary.resources().items()),
        )
        return summary
