"""Probe command construction and launcher scripts."""

from __future__ import annotations

import logging
import os
import shlex
import tempfile
from typing import Optional

from resmon.errors import WrapError
from resmon.models.summary import ResourceSummary

logger = logging.getLogger(__name__)

# Marks where the wrapped command goes inside a wrapper template.
COMMAND_PLACEHOLDER = "[]"

# Resources passed to the probe as limits it enforces.
LIMIT_FIELDS: tuple[str, ...] = (
    "cores", "gpus", "memory", "virtual_memory", "swap_memory", "disk", "wall_time",
)


def wrap_command(command: str, wrapper: str) -> str:
    """Wrap ``command`` with ``wrapper``.

    The last "[]" in the wrapper is replaced by the shell-quoted command;
    earlier ones may belong to option values. Without a "[]" the command is
    appended after a space.
    """
    head, sep, tail = wrapper.rpartition(COMMAND_PLACEHOLDER)
    if sep:
        return f"{head}{shlex.quote(command)}{tail}"
    return f"{wrapper} {command}"


def format_limits(limits: Optional[ResourceSummary]) -> list[str]:
    """-L options for the limits the probe should enforce."""
    if limits is None:
        return []
    options = []
    for name in LIMIT_FIELDS:
        value = getattr(limits, name)
        if value is None:
            continue
        options.append("-L " + shlex.quote(f"{name}: {value:g}"))
    return options


def category_options(category_name: str) -> str:
    """Extra probe options tagging the summary with the node's category."""
    return "-V " + shlex.quote(f"category:{category_name}")


def write_monitor_command(
    executable: str,
    output_prefix: str,
    limits: Optional[ResourceSummary] = None,
    extra_options: str = "",
    interval: int = 1,
    enable_debug: bool = False,
    enable_time_series: bool = False,
    enable_list_files: bool = False,
) -> str:
    """Build the probe invocation as a wrapper template ending in "[]"."""
    parts = [
        shlex.quote(executable),
        "--no-pprint",
        f"--with-output-files={shlex.quote(output_prefix)}",
        f"--interval={interval}",
    ]
    if enable_debug:
        parts.append(f"-dall -o {shlex.quote(output_prefix + '.debug')}")
    if enable_time_series:
        parts.append("--with-time-series")
    if enable_list_files:
        parts.append("--with-inotify")
    parts.extend(format_limits(limits))
    if extra_options:
        parts.append(extra_options)
    parts.append(f"-- /bin/sh -c {COMMAND_PLACEHOLDER}")
    return " ".join(parts)


class BatchWrapper:
    """Collects shell commands and writes them out as a launcher script."""

    def __init__(self, prefix: str = "wrapper", directory: str = "."):
        self.prefix = prefix
        self.directory = directory
        self.commands: list[str] = []

    def add_command(self, command: str) -> None:
        self.commands.append(command)

    def render(self, description: str = "") -> str:
        lines = ["#!/bin/sh"]
        if description:
            lines.append(f"# {description}")
        lines.append("set -e")
        lines.extend(self.commands)
        return "\n".join(lines) + "\n"

    def write(self, description: str = "") -> str:
        """Write the script with a unique name and return its path."""
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, path = tempfile.mkstemp(prefix=f"{self.prefix}.", suffix=".sh", dir=self.directory)
            with os.fdopen(fd, "w") as f:
                f.write(self.render(description))
            os.chmod(path, 0o755)
        except OSError as e:
            raise WrapError(f"Failed to create wrapper in {self.directory}: {e}") from e
        logger.debug("Wrapper written to %s", path)
        return path
