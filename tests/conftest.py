import shutil

import pytest

# ---------------------------------------------------------------------------
# Environment gating
# ---------------------------------------------------------------------------
# Tests marked with @pytest.mark.probe need the real resource_monitor binary
# and are auto-skipped when it is not on PATH.
#
# Usage:
#   pytest tests/unit/              run only unit tests
#   pytest tests/ -m "not probe"   skip tests needing the probe binary
#   pytest tests/                   run everything, auto-skip what cannot run


def pytest_configure(config):
    config.addinivalue_line("markers", "probe: Requires the resource_monitor executable in PATH")


def pytest_collection_modifyitems(config, items):
    if shutil.which("resource_monitor"):
        return
    skip = pytest.mark.skip(reason="resource_monitor not found in PATH")
    for item in items:
        if item.get_closest_marker("probe"):
            item.add_marker(skip)
