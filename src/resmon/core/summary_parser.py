"""Parsing of the probe's ``.summary`` artifact.

The probe writes a JSON object per monitored process tree. Numeric fields
are ``[value, "unit"]`` pairs in current releases and plain numbers or
``"value unit"`` strings in older ones. Very old releases wrote one
``key: value unit`` pair per line; that form is still accepted. When a file
holds several summaries only the first is used.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from resmon.errors import MeasurementAbsent
from resmon.models.summary import ResourceSummary

logger = logging.getLogger(__name__)


def parse_summary_text(text: str) -> ResourceSummary:
    """Parse summary content. Raises MeasurementAbsent if nothing usable."""
    stripped = text.lstrip()
    if not stripped:
        raise MeasurementAbsent("summary is empty")

    if stripped.startswith("{"):
        try:
            data, _ = json.JSONDecoder().raw_decode(stripped)
        except json.JSONDecodeError as e:
            raise MeasurementAbsent(f"summary is not valid JSON: {e}") from e
    else:
        data = _parse_key_value(stripped)

    if not isinstance(data, dict) or not data:
        raise MeasurementAbsent("summary holds no fields")

    try:
        return ResourceSummary.model_validate(data)
    except ValidationError as e:
        raise MeasurementAbsent(f"summary has invalid fields: {e}") from e


def _parse_key_value(text: str) -> dict:
    data: dict = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line == "%%":  # separator between consecutive summaries
            if data:
                break
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if key == "limits_exceeded":
            # nested structure, only available in the JSON form
            continue
        data[key] = value.strip()
    return data


def parse_summary_file(path: str) -> ResourceSummary:
    """Read and parse a summary file. Raises MeasurementAbsent."""
    try:
        with open(path) as f:
            text = f.read()
    except OSError as e:
        raise MeasurementAbsent(f"cannot read {path}: {e.strerror or e}") from e
    try:
        return parse_summary_text(text)
    except MeasurementAbsent as e:
        raise MeasurementAbsent(f"{path}: {e}") from e
