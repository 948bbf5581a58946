from typing import Optional

from resmon.models.dag import BatchTask, TaskFile, TrackedFile, WorkflowNode
from resmon.models.enums import FileState, FileType, NodeState

from .base import WorkflowEngine
from .queues import BatchQueue, create_queue


class MockWorkflowEngine(WorkflowEngine):
    """In-memory engine that records every call made by the hook."""

    def __init__(self, queue: Optional[BatchQueue] = None):
        self.calls: list[tuple[str, tuple, dict]] = []
        self.queue = queue or create_queue("local")
        self.files: dict[str, TrackedFile] = {}
        self.file_log: list[tuple[str, FileState]] = []
        self.node_log: list[tuple[int, NodeState]] = []

    def get_queue(self, node: WorkflowNode) -> BatchQueue:
        return self.queue

    def lookup_or_create_file(
        self, filename: str, file_type: FileType = FileType.INTERMEDIATE
    ) -> TrackedFile:
        self.calls.append(("lookup_or_create_file", (filename,), {"file_type": file_type}))
        tracked = self.files.get(filename)
        if tracked is None:
            tracked = TrackedFile(filename=filename, file_type=file_type)
            self.files[filename] = tracked
        return tracked

    def add_input_file(
        self,
        task: BatchTask,
        local_name: str,
        remote_name: Optional[str],
        file_type: FileType,
    ) -> TrackedFile:
        self.calls.append(("add_input_file", (local_name, remote_name), {"file_type": file_type}))
        tracked = self.lookup_or_create_file(local_name, file_type)
        task.input_files.append(TaskFile(file=tracked, remote_name=remote_name))
        return tracked

    def add_output_file(
        self,
        task: BatchTask,
        local_name: str,
        remote_name: Optional[str],
        file_type: FileType,
    ) -> TrackedFile:
        self.calls.append(("add_output_file", (local_name, remote_name), {"file_type": file_type}))
        tracked = self.lookup_or_create_file(local_name, file_type)
        tracked.state = FileState.EXPECT
        task.output_files.append(TaskFile(file=tracked, remote_name=remote_name))
        return tracked

    def log_file_state_change(self, tracked: TrackedFile, state: FileState) -> None:
        self.calls.append(("log_file_state_change", (tracked.filename, state), {}))
        tracked.state = state
        self.file_log.append((tracked.filename, state))

    def log_node_state_change(self, node: WorkflowNode, state: NodeState) -> None:
        self.calls.append(("log_node_state_change", (node.node_id, state), {}))
        node.state = state
        self.node_log.append((node.node_id, state))

    def call_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]
