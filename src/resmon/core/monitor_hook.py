"""Resource Monitor hook: wraps every node in the measurement probe.

- node_submit: registers the probe and its artifacts, wraps the command
- node_end: reads the summary into the node and its category, moves the
  artifacts under the log directory when the backend left them flat
- node_fail: escalates the node's allocation after a resource overflow

Submit and end both derive the log prefix from the node id alone; nothing
else is carried between the two calls.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, TextIO

from resmon.adapters.base import WorkflowEngine
from resmon.config import Settings
from resmon.errors import ConfigurationError, MonitorEnvironmentError, WrapError
from resmon.models.dag import BatchTask, WorkflowNode
from resmon.models.enums import FileState, FileType, HookStatus, QueueFeature, RetryDecision
from resmon.models.monitor import MonitorConfig

from .command_wrapper import BatchWrapper, category_options, wrap_command, write_monitor_command
from .hooks import LifecycleHook
from .ingester import MeasurementIngester
from .monitor_config import create_monitor_config
from .output_registrar import register_outputs
from .prefix import output_prefix, resolve_prefix
from .relocator import OutputRelocator
from .retry import RetryController

logger = logging.getLogger(__name__)


class ResourceMonitorHook(LifecycleHook):
    name = "Resource Monitor"

    def __init__(
        self,
        engine: WorkflowEngine,
        settings: Optional[Settings] = None,
        stream: Optional[TextIO] = None,
    ):
        self.engine = engine
        self.settings = settings or Settings()
        self.config: Optional[MonitorConfig] = None
        self.ingester = MeasurementIngester()
        self.relocator: Optional[OutputRelocator] = None
        self.retry = RetryController(engine, self.settings, stream=stream)

    # ── Hook lifetime ────────────────────────────────────────────

    def create(self, options: dict[str, Any]) -> HookStatus:
        try:
            self.config = create_monitor_config(options, self.settings)
        except ConfigurationError as e:
            logger.error("%s", e)
            return HookStatus.FATAL
        self.relocator = OutputRelocator(self.config)
        return HookStatus.SUCCESS

    def destroy(self) -> HookStatus:
        self.config = None
        self.relocator = None
        return HookStatus.SUCCESS

    def _require_config(self, callback: str) -> Optional[MonitorConfig]:
        if self.config is None:
            logger.error("%s called on the resource monitor before create", callback)
        return self.config

    def prefix_for(self, node: WorkflowNode) -> str:
        return resolve_prefix(self.config.log_prefix_template, node.node_id)

    # ── Workflow start ───────────────────────────────────────────

    def dag_start(self) -> HookStatus:
        config = self._require_config("dag_start")
        if config is None:
            return HookStatus.FAILURE

        self.engine.lookup_or_create_file(config.probe_executable, FileType.GLOBAL)

        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError as e:
            # A peer may still create it; the nodes report their own failures
            err = MonitorEnvironmentError(
                f"Monitor mode was enabled, but could not create output directory. {e.strerror or e}"
            )
            logger.error("%s", err)
            return HookStatus.SUCCESS

        tracked = self.engine.lookup_or_create_file(config.log_dir, FileType.GLOBAL)
        self.engine.log_file_state_change(tracked, FileState.EXISTS)
        return HookStatus.SUCCESS

    # ── Node lifecycle ───────────────────────────────────────────

    def node_submit(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        config = self._require_config("node_submit")
        if config is None:
            return HookStatus.FAILURE
        queue = self.engine.get_queue(node)

        if queue.supports_feature(QueueFeature.REMOTE_RENAME):
            remote_name = config.probe_remote_name
            executable = f"./{remote_name}"
        else:
            remote_name = None
            executable = config.probe_executable
        self.engine.add_input_file(task, config.probe_executable, remote_name, FileType.GLOBAL)

        prefix = self.prefix_for(node)
        register_outputs(self.engine, task, prefix, config)

        monitor_cmd = write_monitor_command(
            executable,
            output_prefix(prefix, queue),
            limits=node.category.dynamic_label(node),
            extra_options=category_options(node.category.name),
            interval=config.interval,
            enable_debug=config.enable_debug,
            enable_time_series=config.enable_time_series,
            enable_list_files=config.enable_list_files,
        )
        task.command = wrap_command(task.command, monitor_cmd)

        wrapper = BatchWrapper(self.settings.wrapper_prefix, self.settings.wrapper_dir)
        wrapper.add_command(task.command)
        try:
            script = wrapper.write(f"resource monitor launcher for rule {node.node_id}")
        except WrapError as e:
            logger.error("Failed to create wrapper for rule %d: %s", node.node_id, e)
            return HookStatus.FAILURE

        task.command = script
        tracked = self.engine.add_input_file(task, script, script, FileType.TEMP)
        self.engine.log_file_state_change(tracked, FileState.EXISTS)
        return HookStatus.SUCCESS

    def node_end(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        config = self._require_config("node_end")
        if config is None:
            return HookStatus.FAILURE
        queue = self.engine.get_queue(node)

        prefix = self.prefix_for(node)
        summary = self.ingester.ingest(node, output_prefix(prefix, queue))
        if summary is None:
            # Nothing was measured, so there is nothing to move either
            return HookStatus.SUCCESS

        try:
            self.relocator.relocate(prefix, queue)
        except MonitorEnvironmentError as e:
            logger.error("Rule %d: %s", node.node_id, e)
            return HookStatus.FAILURE
        return HookStatus.SUCCESS

    def node_fail(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        if self._require_config("node_fail") is None:
            return HookStatus.FAILURE
        decision = self.retry.handle_failure(node, task)
        if decision == RetryDecision.NOT_HANDLED:
            return HookStatus.SUCCESS
        return HookStatus.FAILURE
