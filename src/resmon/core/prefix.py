"""Per-node log prefixes.

Both ``node_submit`` and ``node_end`` derive the prefix from the template and
the node id alone, so a node resubmitted with the same id maps to the same
files.
"""

import os

from resmon.adapters.queues import BatchQueue
from resmon.models.enums import QueueFeature

NODE_ID_PLACEHOLDER = "%%"

# Artifact suffixes written by the probe.
SUMMARY_SUFFIX = ".summary"
SERIES_SUFFIX = ".series"
FILES_SUFFIX = ".files"


def resolve_prefix(template: str, node_id: int) -> str:
    """Substitute the node id for every placeholder in ``template``."""
    return template.replace(NODE_ID_PLACEHOLDER, str(node_id))


def output_prefix(prefix: str, queue: BatchQueue) -> str:
    """Where the probe writes, relative to the task's working directory.

    Backends that cannot create output directories get only the last path
    component; the files are moved into place after the node ends.
    """
    if queue.supports_feature(QueueFeature.OUTPUT_DIRECTORIES):
        return prefix
    return os.path.basename(prefix)


def artifact_suffixes(enable_time_series: bool, enable_list_files: bool) -> list[str]:
    """Suffixes of the artifacts the probe produces with these options."""
    suffixes = [SUMMARY_SUFFIX]
    if enable_time_series:
        suffixes.append(SERIES_SUFFIX)
    if enable_list_files:
        suffixes.append(FILES_SUFFIX)
    return suffixes
