"""Moves probe artifacts from flat backend-local names to their log prefix."""

from __future__ import annotations

import logging
import os

from resmon.adapters.queues import BatchQueue
from resmon.errors import MonitorEnvironmentError
from resmon.models.enums import QueueFeature
from resmon.models.monitor import MonitorConfig

from .prefix import artifact_suffixes

logger = logging.getLogger(__name__)


class OutputRelocator:
    def __init__(self, config: MonitorConfig):
        self.config = config

    def needs_relocation(self, prefix: str, queue: BatchQueue) -> bool:
        if queue.supports_feature(QueueFeature.OUTPUT_DIRECTORIES):
            return False
        return os.path.basename(prefix) != prefix

    def relocate(self, prefix: str, queue: BatchQueue) -> list[tuple[str, str]]:
        """Rename every enabled artifact into place.

        Returns the (source, destination) pairs that were moved. Raises
        MonitorEnvironmentError on the first failed rename.
        """
        if not self.needs_relocation(prefix, queue):
            return []

        flat = os.path.basename(prefix)
        moved = []
        for suffix in artifact_suffixes(
            self.config.enable_time_series, self.config.enable_list_files
        ):
            old_path = flat + suffix
            new_path = prefix + suffix
            try:
                os.rename(old_path, new_path)
            except OSError as e:
                raise MonitorEnvironmentError(
                    f"Error moving resource monitor output {old_path}:{new_path}. {e.strerror or e}"
                ) from e
            logger.debug("Moved %s to %s", old_path, new_path)
            moved.append((old_path, new_path))
        return moved
