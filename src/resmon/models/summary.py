from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, field_validator

# Resource fields carried by a probe summary, in print order.
RESOURCE_FIELDS: tuple[str, ...] = (
    "cores",
    "gpus",
    "memory",
    "virtual_memory",
    "swap_memory",
    "disk",
    "wall_time",
    "cpu_time",
    "bytes_read",
    "bytes_written",
    "bytes_received",
    "bytes_sent",
    "bandwidth",
    "total_files",
    "total_processes",
    "max_concurrent_processes",
    "machine_load",
    "machine_cpus",
)

# Units written next to each field when printing.
RESOURCE_UNITS: dict[str, str] = {
    "cores": "cores",
    "gpus": "gpus",
    "memory": "MB",
    "virtual_memory": "MB",
    "swap_memory": "MB",
    "disk": "MB",
    "wall_time": "s",
    "cpu_time": "s",
    "bytes_read": "MB",
    "bytes_written": "MB",
    "bytes_received": "MB",
    "bytes_sent": "MB",
    "bandwidth": "Mbps",
    "total_files": "files",
    "total_processes": "procs",
    "max_concurrent_processes": "procs",
    "machine_load": "procs",
    "machine_cpus": "cpus",
}

# Conversion of reported units into the canonical ones above.
_UNIT_SCALE: dict[str, float] = {
    "us": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "B": 1.0 / (1024 * 1024),
    "KB": 1.0 / 1024,
    "kB": 1.0 / 1024,
    "MB": 1.0,
    "GB": 1024.0,
    "TB": 1024.0 * 1024,
    "bps": 1e-6,
    "Kbps": 1e-3,
    "Mbps": 1.0,
    "Gbps": 1e3,
}


def _to_number(value: Any) -> Optional[float]:
    """Accept a bare number, a [value, unit] pair or a "value unit" string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    unit = ""
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        if len(value) > 1:
            unit = str(value[1])
        value = value[0]
    elif isinstance(value, str):
        parts = value.split()
        if not parts:
            return None
        if len(parts) > 1:
            unit = parts[1]
        value = parts[0]
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number * _UNIT_SCALE.get(unit, 1.0)


class ResourceSummary(BaseModel):
    """Resource usage reported by the probe for one execution attempt."""

    model_config = {"extra": "ignore"}

    category: Optional[str] = None
    command: Optional[str] = None
    taskid: Optional[str] = None
    exit_type: Optional[str] = None
    exit_status: Optional[int] = None

    cores: Optional[float] = None
    gpus: Optional[float] = None
    memory: Optional[float] = None
    virtual_memory: Optional[float] = None
    swap_memory: Optional[float] = None
    disk: Optional[float] = None
    wall_time: Optional[float] = None
    cpu_time: Optional[float] = None
    bytes_read: Optional[float] = None
    bytes_written: Optional[float] = None
    bytes_received: Optional[float] = None
    bytes_sent: Optional[float] = None
    bandwidth: Optional[float] = None
    total_files: Optional[float] = None
    total_processes: Optional[float] = None
    max_concurrent_processes: Optional[float] = None
    machine_load: Optional[float] = None
    machine_cpus: Optional[float] = None

    limits_exceeded: Optional[ResourceSummary] = None

    @field_validator(*RESOURCE_FIELDS, mode="before")
    @classmethod
    def _coerce_measurement(cls, value: Any) -> Optional[float]:
        return _to_number(value)

    @field_validator("taskid", mode="before")
    @classmethod
    def _coerce_taskid(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("exit_status", mode="before")
    @classmethod
    def _coerce_exit_status(cls, value: Any) -> Optional[int]:
        number = _to_number(value)
        return None if number is None else int(number)

    @field_validator("limits_exceeded", mode="before")
    @classmethod
    def _empty_limits_are_none(cls, value: Any) -> Any:
        # The probe writes "limits_exceeded": null (or {}) when nothing overflowed
        if not value:
            return None
        return value

    def resources(self) -> dict[str, float]:
        """Return the resource fields that were measured, in print order."""
        out: dict[str, float] = {}
        for name in RESOURCE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out

    def merge_max(self, other: ResourceSummary) -> ResourceSummary:
        """Field-wise maximum of two summaries."""
        merged = self.resources()
        for name, value in other.resources().items():
            current = merged.get(name)
            merged[name] = value if current is None else max(current, value)
        return ResourceSummary(category=self.category or other.category, **merged)

    def overlay(self, base: Optional[ResourceSummary]) -> ResourceSummary:
        """Fields of ``self`` take precedence; unset ones come from ``base``."""
        merged = base.resources() if base is not None else {}
        merged.update(self.resources())
        return ResourceSummary(category=self.category, **merged)

    def exceeded_by(self, measured: ResourceSummary) -> list[str]:
        """Names of fields set here that ``measured`` went above."""
        over = []
        for name, limit in self.resources().items():
            value = getattr(measured, name)
            if value is not None and value > limit:
                over.append(name)
        return over

    def format_text(self, pprint: bool = False) -> str:
        lines = []
        header = {
            "category": self.category,
            "command": self.command,
            "exit_type": self.exit_type,
            "exit_status": self.exit_status,
        }
        for key, value in header.items():
            if value is not None:
                lines.append(f"{key}: {value}")
        for name, value in self.resources().items():
            shown = f"{value:g}"
            if pprint:
                lines.append(f"{name:<25} {shown} {RESOURCE_UNITS[name]}")
            else:
                lines.append(f"{name}: {shown} {RESOURCE_UNITS[name]}")
        if self.limits_exceeded is not None:
            lines.append("limits_exceeded:")
            for line in self.limits_exceeded.format_text(pprint).splitlines():
                lines.append(f"  {line}")
        return "\n".join(lines)
