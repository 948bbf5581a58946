"""Lifecycle hooks: the listener interface the workflow engine dispatches to.

The engine calls, in order: ``create`` once, ``dag_start`` once, then per
attempt ``node_submit`` followed by ``node_end``, then ``node_fail`` when the
attempt failed, and finally ``destroy``. Every callback returns a HookStatus; none may raise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from resmon.models.dag import BatchTask, WorkflowNode
from resmon.models.enums import HookStatus

logger = logging.getLogger(__name__)


class LifecycleHook(ABC):
    name: str = "hook"

    @abstractmethod
    def create(self, options: dict[str, Any]) -> HookStatus:
        """Validate options and set up state. FATAL stops the workflow."""

    @abstractmethod
    def destroy(self) -> HookStatus:
        """Release state. Safe to call when ``create`` never ran."""

    def dag_start(self) -> HookStatus:
        return HookStatus.SUCCESS

    def node_submit(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return HookStatus.SUCCESS

    def node_end(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return HookStatus.SUCCESS

    def node_fail(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return HookStatus.SUCCESS


class HookRegistry:
    """Holds the registered hooks and invokes each in registration order.

    Dispatch of a callback stops at the first hook that does not succeed and
    that hook's status is returned.
    """

    def __init__(self, hooks: list[LifecycleHook] | None = None):
        self.hooks: list[LifecycleHook] = list(hooks or [])

    def register(self, hook: LifecycleHook) -> None:
        if any(type(h) is type(hook) for h in self.hooks):
            logger.warning("Hook %s is already registered, ignoring", hook.name)
            return
        self.hooks.append(hook)

    def _dispatch(self, callback: str, *args: Any) -> HookStatus:
        for hook in self.hooks:
            status = getattr(hook, callback)(*args)
            if status != HookStatus.SUCCESS:
                logger.debug("Hook %s returned %s from %s", hook.name, status.value, callback)
                return status
        return HookStatus.SUCCESS

    def create(self, options: dict[str, Any]) -> HookStatus:
        return self._dispatch("create", options)

    def destroy(self) -> HookStatus:
        # Every hook gets to release its state
        worst = HookStatus.SUCCESS
        for hook in self.hooks:
            status = hook.destroy()
            if status == HookStatus.FATAL or worst == HookStatus.SUCCESS:
                worst = status
        return worst

    def dag_start(self) -> HookStatus:
        return self._dispatch("dag_start")

    def node_submit(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return self._dispatch("node_submit", node, task)

    def node_end(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return self._dispatch("node_end", node, task)

    def node_fail(self, node: WorkflowNode, task: BatchTask) -> HookStatus:
        return self._dispatch("node_fail", node, task)
