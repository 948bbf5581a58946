"""Monitor configuration: option parsing and probe lookup.

Options arrive as the plain dict the engine hands to ``create``. Recognized
keys are ``log_dir``, ``log_format``, ``interval``, ``enable_debug``,
``enable_time_series``, ``enable_list_files`` and ``probe_path``; anything
else is ignored so several hooks can share one options dict.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Any, Optional

from pydantic import ValidationError

from resmon.config import Settings
from resmon.errors import ConfigurationError
from resmon.models.monitor import MonitorConfig

logger = logging.getLogger(__name__)


def locate_probe(settings: Settings, explicit: Optional[str] = None) -> Optional[str]:
    """Find the probe executable.

    Checked in order: an explicit path, the path named by the
    ``settings.probe_env_var`` environment variable, then ``PATH``.
    """
    candidates = [explicit, os.environ.get(settings.probe_env_var)]
    for candidate in candidates:
        if not candidate:
            continue
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return os.path.abspath(candidate)
        logger.warning("Probe candidate %s is not an executable file", candidate)
    return shutil.which(settings.probe_name)


def create_monitor_config(options: dict[str, Any], settings: Settings) -> MonitorConfig:
    """Validate ``options`` into a MonitorConfig. Raises ConfigurationError."""
    log_dir = options.get("log_dir")
    if not log_dir:
        raise ConfigurationError(
            "Monitor mode was enabled, but a log output directory was not specified"
        )

    log_format = options.get("log_format") or settings.default_log_format

    interval = options.get("interval")
    if interval is None:
        interval = 1
    try:
        interval = int(interval)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Monitoring interval must be an integer, got {interval!r}") from None
    if interval < 1:
        raise ConfigurationError("Monitoring interval should be positive.")

    exe = locate_probe(settings, options.get("probe_path"))
    if not exe:
        raise ConfigurationError(
            f"Monitor mode was enabled, but could not find {settings.probe_name} in PATH."
        )

    try:
        config = MonitorConfig(
            log_dir=str(log_dir),
            log_format=log_format,
            interval=interval,
            enable_debug=bool(options.get("enable_debug", settings.debug)),
            enable_time_series=bool(options.get("enable_time_series", False)),
            enable_list_files=bool(options.get("enable_list_files", False)),
            probe_executable=exe,
            probe_remote_name=settings.probe_remote_name,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid monitor options: {e}") from e

    logger.debug(
        "Monitor configured: prefix=%s interval=%ds probe=%s",
        config.log_prefix_template, config.interval, config.probe_executable,
    )
    return config
