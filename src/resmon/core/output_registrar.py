"""Declares the probe's artifacts as outputs of the wrapped task."""

import logging

from resmon.adapters.base import WorkflowEngine
from resmon.models.dag import BatchTask
from resmon.models.enums import FileType
from resmon.models.monitor import MonitorConfig

from .prefix import artifact_suffixes

logger = logging.getLogger(__name__)


def register_outputs(
    engine: WorkflowEngine, task: BatchTask, prefix: str, config: MonitorConfig
) -> list[str]:
    """Register summary (always), series and file list (when enabled).

    Returns the registered file names.
    """
    names = []
    for suffix in artifact_suffixes(config.enable_time_series, config.enable_list_files):
        name = prefix + suffix
        engine.add_output_file(task, name, None, FileType.INTERMEDIATE)
        names.append(name)
    logger.debug("Task %d will produce %s", task.task_id, ", ".join(names))
    return names
