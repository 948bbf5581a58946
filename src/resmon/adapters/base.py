from abc import ABC, abstractmethod
from typing import Optional

from resmon.models.dag import BatchTask, TrackedFile, WorkflowNode
from resmon.models.enums import FileState, FileType, NodeState

from .queues import BatchQueue


class WorkflowEngine(ABC):
    """The part of the workflow engine the monitor hook talks to."""

    @abstractmethod
    def get_queue(self, node: WorkflowNode) -> BatchQueue:
        """Return the batch queue the node is dispatched to."""

    @abstractmethod
    def lookup_or_create_file(
        self, filename: str, file_type: FileType = FileType.INTERMEDIATE
    ) -> TrackedFile:
        """Return the tracked file for ``filename``, creating it if needed."""

    @abstractmethod
    def add_input_file(
        self,
        task: BatchTask,
        local_name: str,
        remote_name: Optional[str],
        file_type: FileType,
    ) -> TrackedFile:
        """Declare ``local_name`` as an input of ``task``."""

    @abstractmethod
    def add_output_file(
        self,
        task: BatchTask,
        local_name: str,
        remote_name: Optional[str],
        file_type: FileType,
    ) -> TrackedFile:
        """Declare ``local_name`` as an output of ``task``."""

    @abstractmethod
    def log_file_state_change(self, tracked: TrackedFile, state: FileState) -> None:
        """Record a file state transition in the engine's state log."""

    @abstractmethod
    def log_node_state_change(self, node: WorkflowNode, state: NodeState) -> None:
        """Move a node to ``state`` and record it in the state log."""
