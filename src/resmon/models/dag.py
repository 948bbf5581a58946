from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel

from .enums import AllocationLabel, FileState, FileType, NodeState
from .summary import ResourceSummary

if TYPE_CHECKING:
    from resmon.core.category import Category


@dataclass
class TrackedFile:
    """A file known to the engine's file-tracking model."""
    filename: str
    file_type: FileType = FileType.INTERMEDIATE
    state: FileState = FileState.UNKNOWN


@dataclass
class TaskFile:
    """A file attached to one task; ``remote_name`` is its name on the worker."""
    file: TrackedFile
    remote_name: Optional[str] = None

    @property
    def outer_name(self) -> str:
        return self.file.filename

    @property
    def inner_name(self) -> str:
        return self.remote_name or self.file.filename


class TaskInfo(BaseModel):
    """Post-execution information reported by the backend for one attempt."""

    exited_normally: bool = True
    exit_code: int = 0
    exit_signal: int = 0
    disk_allocation_exhausted: bool = False


@dataclass
class BatchTask:
    """A single execution attempt of a node."""
    task_id: int
    command: str
    input_files: list[TaskFile] = field(default_factory=list)
    output_files: list[TaskFile] = field(default_factory=list)
    info: TaskInfo = field(default_factory=TaskInfo)


@dataclass
class WorkflowNode:
    """One schedulable unit of work in the workflow graph."""
    node_id: int
    command: str
    category: Category
    resource_request: AllocationLabel = AllocationLabel.FIRST
    resources_requested: Optional[ResourceSummary] = None
    resources_measured: Optional[ResourceSummary] = None
    state: NodeState = NodeState.WAITING
