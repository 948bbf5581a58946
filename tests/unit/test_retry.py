"""Tests for failure classification and allocation escalation."""

import io

import pytest

from resmon.config import Settings
from resmon.core.category import Category
from resmon.core.retry import RetryController, classify_failure
from resmon.models.dag import TaskInfo
from resmon.models.enums import AllocationLabel, FailureKind, NodeState, RetryDecision
from resmon.models.summary import ResourceSummary

from .conftest import make_node, make_task


def _task(node, **info):
    task = make_task(node)
    task.info = TaskInfo(**info)
    return task


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def controller(engine, stream):
    return RetryController(engine, Settings(), stream=stream)


class TestClassifyFailure:
    def test_disk_takes_priority_over_overflow(self):
        info = TaskInfo(exit_code=147, disk_allocation_exhausted=True)
        assert classify_failure(info, 147) == FailureKind.DISK_EXHAUSTED

    def test_overflow(self):
        assert classify_failure(TaskInfo(exit_code=147), 147) == FailureKind.RESOURCE_OVERFLOW

    @pytest.mark.parametrize("code", [0, 1, 137, 146, 148])
    def test_unrelated(self, code):
        assert classify_failure(TaskInfo(exit_code=code), 147) == FailureKind.UNRELATED

    def test_configured_overflow_code(self):
        assert classify_failure(TaskInfo(exit_code=99), 99) == FailureKind.RESOURCE_OVERFLOW


class TestDiskExhausted:
    def test_never_escalated(self, controller, engine, max_category, stream):
        node = make_node(8, category=max_category)
        decision = controller.handle_failure(node, _task(node, disk_allocation_exhausted=True))
        assert decision == RetryDecision.TERMINAL
        assert node.resource_request == AllocationLabel.FIRST
        assert engine.node_log == []
        assert "rule 8 failed because it exceeded its disk allocation capacity." in stream.getvalue()

    def test_prints_measurement(self, controller, max_category, stream):
        node = make_node(8, category=max_category,
                         resources_measured=ResourceSummary(disk=12000, memory=10))
        controller.handle_failure(node, _task(node, disk_allocation_exhausted=True))
        out = stream.getvalue()
        assert "disk: 12000 MB" in out
        assert "memory: 10 MB" in out


class TestOverflow:
    def test_escalates_to_max(self, controller, engine, max_category):
        node = make_node(
            3, category=max_category,
            resources_measured=ResourceSummary(memory=3000, limits_exceeded={"memory": 2048}),
        )
        decision = controller.handle_failure(node, _task(node, exit_code=147))
        assert decision == RetryDecision.RESUBMIT
        assert node.resource_request == AllocationLabel.MAX
        assert node.state == NodeState.WAITING
        assert engine.node_log == [(3, NodeState.WAITING)]

    def test_second_overflow_is_terminal(self, controller, engine, max_category):
        node = make_node(3, category=max_category, resource_request=AllocationLabel.MAX,
                         state=NodeState.RUNNING)
        decision = controller.handle_failure(node, _task(node, exit_code=147))
        assert decision == RetryDecision.TERMINAL
        assert node.resource_request == AllocationLabel.MAX
        assert node.state == NodeState.RUNNING
        assert engine.node_log == []

    def test_fixed_category_is_terminal(self, controller):
        node = make_node(3, category=Category("fixed"))
        assert controller.handle_failure(node, _task(node, exit_code=147)) == RetryDecision.TERMINAL
        assert node.resource_request == AllocationLabel.FIRST

    def test_passes_request_and_measurement_to_policy(self, engine, stream):
        category = Category("sim")
        seen = []

        def next_label(current, overflow, requested, measured):
            seen.append((current, overflow, requested, measured))
            return AllocationLabel.MAX

        category.next_label = next_label
        requested = ResourceSummary(memory=100)
        measured = ResourceSummary(memory=200)
        node = make_node(1, category=category, resources_requested=requested,
                         resources_measured=measured)
        RetryController(engine, Settings(), stream=stream).handle_failure(
            node, _task(node, exit_code=147)
        )
        assert seen == [(AllocationLabel.FIRST, True, requested, measured)]


class TestUnrelated:
    def test_not_handled(self, controller, engine, max_category):
        node = make_node(3, category=max_category)
        assert controller.handle_failure(node, _task(node, exit_code=2)) == RetryDecision.NOT_HANDLED
        assert node.resource_request == AllocationLabel.FIRST
        assert engine.calls == []
