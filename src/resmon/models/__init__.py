from .dag import BatchTask, TaskFile, TaskInfo, TrackedFile, WorkflowNode
from .enums import (
    AllocationLabel,
    CategoryMode,
    FailureKind,
    FileState,
    FileType,
    HookStatus,
    NodeState,
    QueueFeature,
    RetryDecision,
)
from .monitor import MonitorConfig
from .summary import RESOURCE_FIELDS, ResourceSummary

__all__ = [
    "AllocationLabel",
    "BatchTask",
    "CategoryMode",
    "FailureKind",
    "FileState",
    "FileType",
    "HookStatus",
    "MonitorConfig",
    "NodeState",
    "QueueFeature",
    "RESOURCE_FIELDS",
    "ResourceSummary",
    "RetryDecision",
    "TaskFile",
    "TaskInfo",
    "TrackedFile",
    "WorkflowNode",
]
