"""Error kinds raised inside the monitor and mapped to hook statuses."""


class MonitorError(Exception):
    """Base class for resource monitor errors."""


class ConfigurationError(MonitorError):
    """Invalid monitor options. Fatal: raised only while creating the hook."""


class MonitorEnvironmentError(MonitorError):
    """Filesystem operation failed (log directory creation, artifact rename)."""


class WrapError(MonitorError):
    """The launcher script for a task could not be written."""


class MeasurementAbsent(MonitorError):
    """No usable summary was produced. Never fatal."""
