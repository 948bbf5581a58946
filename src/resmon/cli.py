"""CLI: inspect probe summaries and run a command under the resource monitor."""

from __future__ import annotations

import argparse
import glob
import json
import logging
import os
import subprocess
import sys

from resmon.adapters.mock import MockWorkflowEngine
from resmon.adapters.queues import create_queue
from resmon.config import Settings
from resmon.core.category import Category
from resmon.core.monitor_hook import ResourceMonitorHook
from resmon.core.summary_parser import parse_summary_file
from resmon.errors import MeasurementAbsent
from resmon.models.dag import BatchTask, TaskInfo, WorkflowNode
from resmon.models.enums import CategoryMode, FileType, HookStatus, NodeState
from resmon.models.summary import ResourceSummary

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resmon",
        description="resmon: resource monitor hook tools",
    )
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command")

    show = sub.add_parser("summary", help="Parse and print a .summary file")
    show.add_argument("path", help="Summary file written by the probe")
    show.add_argument("--json", action="store_true", help="Print as JSON")

    agg = sub.add_parser("aggregate", help="Aggregate all summaries in a log directory by category")
    agg.add_argument("log_dir", help="Directory holding *.summary files")

    run = sub.add_parser("run", help="Run one command under the resource monitor")
    run.add_argument("--log-dir", required=True, help="Directory for the probe's artifacts")
    run.add_argument("--log-format", default=None, help='File name template, "%%%%" is the node id')
    run.add_argument("--interval", type=int, default=1, help="Probe sampling interval (seconds)")
    run.add_argument("--time-series", action="store_true", help="Also record a time series")
    run.add_argument("--list-files", action="store_true", help="Also record the files accessed")
    run.add_argument("--debug", action="store_true", help="Keep the probe's debug log")
    run.add_argument("--probe", default=None, help="Path to the probe executable")
    run.add_argument("--queue", default="local", help="Backend capability set (local, condor, wq, dryrun)")
    run.add_argument("--node-id", type=int, default=1)
    run.add_argument("--category", default="default")
    run.add_argument("--category-mode", default=CategoryMode.MAX.value,
                     choices=[m.value for m in CategoryMode])
    run.add_argument("--memory", type=float, default=None, help="Requested memory (MB)")
    run.add_argument("--max-memory", type=float, default=None, help="Category maximum memory (MB)")
    run.add_argument("--max-disk", type=float, default=None, help="Category maximum disk (MB)")
    run.add_argument("argv", nargs=argparse.REMAINDER, help="-- command to run")

    return parser


def cmd_summary(args: argparse.Namespace) -> int:
    try:
        summary = parse_summary_file(args.path)
    except MeasurementAbsent as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if args.json:
        print(summary.model_dump_json(exclude_none=True, indent=2))
    else:
        print(summary.format_text(pprint=True))
    return 0


def aggregate_directory(log_dir: str) -> dict[str, Category]:
    """Fold every summary in ``log_dir`` into a category named by its tag."""
    categories: dict[str, Category] = {}
    for path in sorted(glob.glob(os.path.join(log_dir, "*.summary"))):
        try:
            summary = parse_summary_file(path)
        except MeasurementAbsent as e:
            logger.warning("Skipping %s", e)
            continue
        name = summary.category or "default"
        if name not in categories:
            categories[name] = Category(name)
        categories[name].accumulate_summary(summary)
    return categories


def cmd_aggregate(args: argparse.Namespace) -> int:
    if not os.path.isdir(args.log_dir):
        print(f"error: {args.log_dir} is not a directory", file=sys.stderr)
        return 1
    categories = aggregate_directory(args.log_dir)
    report = [categories[name].stats() for name in sorted(categories)]
    print(json.dumps(report, indent=2))
    return 0


def _max_allocation(args: argparse.Namespace) -> ResourceSummary | None:
    values = {}
    if args.max_memory is not None:
        values["memory"] = args.max_memory
    if args.max_disk is not None:
        values["disk"] = args.max_disk
    return ResourceSummary(**values) if values else None


def _cleanup_temp_inputs(task: BatchTask) -> None:
    for tf in task.input_files:
        if tf.file.file_type == FileType.TEMP and os.path.exists(tf.outer_name):
            os.unlink(tf.outer_name)


def cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    argv = args.argv[1:] if args.argv and args.argv[0] == "--" else args.argv
    if not argv:
        print("error: no command given (use: resmon run --log-dir DIR -- CMD ...)", file=sys.stderr)
        return 2

    engine = MockWorkflowEngine(create_queue(args.queue))
    hook = ResourceMonitorHook(engine, settings)
    options = {
        "log_dir": args.log_dir,
        "log_format": args.log_format,
        "interval": args.interval,
        "enable_debug": args.debug,
        "enable_time_series": args.time_series,
        "enable_list_files": args.list_files,
        "probe_path": args.probe,
    }
    if hook.create(options) == HookStatus.FATAL:
        return 2
    hook.dag_start()

    category = Category(
        args.category,
        mode=CategoryMode(args.category_mode),
        max_allocation=_max_allocation(args),
    )
    requested = ResourceSummary(memory=args.memory) if args.memory is not None else None
    node = WorkflowNode(
        node_id=args.node_id,
        command=" ".join(argv),
        category=category,
        resources_requested=requested,
    )

    attempt = 0
    exit_code = 1
    try:
        while node.state == NodeState.WAITING:
            attempt += 1
            task = BatchTask(task_id=attempt, command=node.command)
            if hook.node_submit(node, task) != HookStatus.SUCCESS:
                engine.log_node_state_change(node, NodeState.FAILED)
                break
            engine.log_node_state_change(node, NodeState.RUNNING)
            logger.info("Attempt %d of rule %d (%s)", attempt, node.node_id, node.resource_request.value)

            proc = subprocess.run(task.command, shell=True)
            exit_code = proc.returncode
            if proc.returncode < 0:
                task.info = TaskInfo(exited_normally=False, exit_code=1, exit_signal=-proc.returncode)
            else:
                task.info = TaskInfo(exit_code=proc.returncode)
            _cleanup_temp_inputs(task)

            end_status = hook.node_end(node, task)
            if task.info.exited_normally and task.info.exit_code == 0 and end_status == HookStatus.SUCCESS:
                engine.log_node_state_change(node, NodeState.COMPLETE)
                break

            hook.node_fail(node, task)
            if node.state != NodeState.WAITING:
                engine.log_node_state_change(node, NodeState.FAILED)
    finally:
        hook.destroy()

    if node.resources_measured is not None:
        print(node.resources_measured.format_text(pprint=True))
    print(f"rule {node.node_id}: {node.state.value} after {attempt} attempt(s)")
    return 0 if node.state == NodeState.COMPLETE else (exit_code or 1)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings()

    level = args.log_level or settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "summary":
        return cmd_summary(args)
    if args.command == "aggregate":
        return cmd_aggregate(args)
    if args.command == "run":
        return cmd_run(args, settings)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
