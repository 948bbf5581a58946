import json
import os

import pytest

from resmon.adapters.mock import MockWorkflowEngine
from resmon.adapters.queues import create_queue
from resmon.config import Settings
from resmon.core.category import Category
from resmon.core.monitor_hook import ResourceMonitorHook
from resmon.models.dag import BatchTask, WorkflowNode
from resmon.models.enums import CategoryMode


def write_probe(path):
    """A stand-in for the probe: runs the command and writes a summary."""
    path.write_text("""\
#!/bin/sh
prefix=""
while [ $# -gt 0 ]; do
    case "$1" in
        --with-output-files=*) prefix="${1#--with-output-files=}" ;;
        --) shift; break ;;
    esac
    shift
done
"$@"
status=$?
printf '{"category": "default", "exit_status": %d, "memory": [12, "MB"], "wall_time": [0.5, "s"]}\\n' "$status" > "$prefix.summary"
exit $status
""")
    os.chmod(path, 0o755)
    return str(path)


def write_summary(path, **fields):
    """Write a probe summary in the current JSON format."""
    data = {"category": "default", "exit_type": "normal", "exit_status": 0}
    data.update(fields)
    path.write_text(json.dumps(data, indent=4) + "\n")
    return str(path)


def make_node(node_id=42, category=None, command="echo hello", **kwargs):
    return WorkflowNode(
        node_id=node_id,
        command=command,
        category=category or Category("default"),
        **kwargs,
    )


def make_task(node, task_id=1):
    return BatchTask(task_id=task_id, command=node.command)


@pytest.fixture
def probe(tmp_path):
    return write_probe(tmp_path / "resource_monitor")


@pytest.fixture
def log_dir(tmp_path):
    return str(tmp_path / "logs")


@pytest.fixture
def settings(tmp_path):
    return Settings(wrapper_dir=str(tmp_path / "wrappers"))


@pytest.fixture
def engine():
    return MockWorkflowEngine(create_queue("local"))


@pytest.fixture
def options(log_dir, probe):
    return {"log_dir": log_dir, "probe_path": probe}


@pytest.fixture
def hook(engine, settings, options):
    h = ResourceMonitorHook(engine, settings)
    h.create(options)
    return h


@pytest.fixture
def max_category():
    from resmon.models.summary import ResourceSummary

    return Category(
        "analysis",
        mode=CategoryMode.MAX,
        max_allocation=ResourceSummary(memory=4096, disk=10000, cores=4),
    )
