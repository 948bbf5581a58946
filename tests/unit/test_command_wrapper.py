"""Tests for probe command construction and launcher scripts."""

import os
import stat

import pytest

from resmon.core.command_wrapper import (
    BatchWrapper,
    category_options,
    format_limits,
    wrap_command,
    write_monitor_command,
)
from resmon.errors import WrapError
from resmon.models.summary import ResourceSummary


class TestWrapCommand:
    def test_placeholder_is_replaced_quoted(self):
        assert wrap_command("echo 'hi' > out", "sh -c []") == "sh -c 'echo '\"'\"'hi'\"'\"' > out'"

    def test_only_last_placeholder_is_replaced(self):
        wrapper = write_monitor_command("rm", "logs[]/r-1", extra_options=category_options("grp[]"))
        cmd = wrap_command("touch ran", wrapper)
        assert "--with-output-files='logs[]/r-1'" in cmd
        assert "-V 'category:grp[]'" in cmd
        assert cmd.endswith("-- /bin/sh -c 'touch ran'")

    def test_append_without_placeholder(self):
        assert wrap_command("make all", "time") == "time make all"


class TestMonitorCommand:
    def test_minimal(self):
        cmd = write_monitor_command("/usr/bin/resource_monitor", "/logs/resource-rule-42")
        assert cmd.startswith("/usr/bin/resource_monitor --no-pprint")
        assert "--with-output-files=/logs/resource-rule-42" in cmd
        assert "--interval=1" in cmd
        assert "--with-time-series" not in cmd
        assert "--with-inotify" not in cmd
        assert "-dall" not in cmd
        assert cmd.endswith("-- /bin/sh -c []")

    def test_flags(self):
        cmd = write_monitor_command(
            "./cctools-monitor", "resource-rule-42",
            interval=5, enable_debug=True, enable_time_series=True, enable_list_files=True,
        )
        assert "--interval=5" in cmd
        assert "-dall -o resource-rule-42.debug" in cmd
        assert "--with-time-series" in cmd
        assert "--with-inotify" in cmd

    def test_limits_and_extra_options(self):
        cmd = write_monitor_command(
            "rm", "p",
            limits=ResourceSummary(memory=2048, cores=2, bytes_read=9),
            extra_options=category_options("sim"),
        )
        assert "-L 'cores: 2'" in cmd
        assert "-L 'memory: 2048'" in cmd
        assert "bytes_read" not in cmd
        assert "-V category:sim" in cmd
        # probe options come before the command separator
        assert cmd.index("-V category:sim") < cmd.index("-- /bin/sh")

    def test_wrapped_end_to_end(self):
        cmd = wrap_command("python run.py --n 3", write_monitor_command("rm", "p"))
        assert cmd.endswith("-- /bin/sh -c 'python run.py --n 3'")

    def test_paths_with_spaces_are_quoted(self):
        cmd = write_monitor_command("/opt/my tools/rm", "/my logs/r-1")
        assert cmd.startswith("'/opt/my tools/rm'")
        assert "--with-output-files='/my logs/r-1'" in cmd


class TestFormatLimits:
    def test_none(self):
        assert format_limits(None) == []

    def test_category_name_with_spaces(self):
        assert category_options("my cat") == "-V 'category:my cat'"


class TestBatchWrapper:
    def test_write(self, tmp_path):
        w = BatchWrapper("resource_monitor", str(tmp_path / "wrappers"))
        w.add_command("echo one")
        w.add_command("echo two")
        path = w.write("launcher for rule 1")

        assert os.path.basename(path).startswith("resource_monitor.")
        assert path.endswith(".sh")
        content = open(path).read()
        assert content.startswith("#!/bin/sh\n# launcher for rule 1\nset -e\n")
        assert content.endswith("echo one\necho two\n")
        assert os.stat(path).st_mode & stat.S_IXUSR

    def test_unique_names(self, tmp_path):
        w = BatchWrapper("x", str(tmp_path))
        assert w.write() != w.write()

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        w = BatchWrapper("x", str(blocker))
        with pytest.raises(WrapError, match="Failed to create wrapper"):
            w.write()
