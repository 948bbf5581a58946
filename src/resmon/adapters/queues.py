"""Batch queue capability sets, as advertised by each execution backend."""

from __future__ import annotations

from resmon.models.enums import QueueFeature

# Features each backend type supports out of the box.
QUEUE_FEATURES: dict[str, frozenset[str]] = {
    # Local processes share the filesystem, outputs land in place
    "local": frozenset({
        QueueFeature.OUTPUT_DIRECTORIES.value,
        QueueFeature.ABSOLUTE_PATH.value,
    }),
    # HTCondor transfers outputs back flat into the submit directory
    "condor": frozenset({
        QueueFeature.REMOTE_RENAME.value,
        QueueFeature.BATCH_LOG_NAME.value,
    }),
    "wq": frozenset({
        QueueFeature.REMOTE_RENAME.value,
        QueueFeature.OUTPUT_DIRECTORIES.value,
    }),
    "dryrun": frozenset(),
}


class BatchQueue:
    """Capability set of one execution backend. Read-only for the monitor."""

    def __init__(self, queue_type: str, features: frozenset[str] | set[str] = frozenset()):
        self.queue_type = queue_type
        self._features = frozenset(features)

    def supports_feature(self, name: str | QueueFeature) -> bool:
        if isinstance(name, QueueFeature):
            name = name.value
        return name in self._features

    @property
    def features(self) -> frozenset[str]:
        return self._features

    def __repr__(self) -> str:
        return f"BatchQueue({self.queue_type!r}, {sorted(self._features)!r})"


def create_queue(queue_type: str) -> BatchQueue:
    """Build the capability set for a known backend type."""
    try:
        features = QUEUE_FEATURES[queue_type]
    except KeyError:
        raise ValueError(
            f"Unknown batch queue type {queue_type!r}; "
            f"expected one of {', '.join(sorted(QUEUE_FEATURES))}"
        ) from None
    return BatchQueue(queue_type, features)
