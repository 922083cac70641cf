# -*- coding: utf-8 -*-
"""
Fleet-mode classification of a file selection.

A selection drawn from one pod is analysed over time (single unit); a
selection spanning several pods is compared across the fleet (multi
unit).  The decision is recomputed from the filenames, and from file
content when a filename carries no sensor ID, on every call.
"""

import os
import logging

from logcompass.core.types import (
    AnalysisMode, MODE_SINGLE_UNIT, MODE_MULTI_UNIT, MODE_UNKNOWN,
)
from logcompass.core.string_helpers import read_lines
from logcompass.core.config_loader import DEFAULT_HEADER_SCAN_LINES
from logcompass.data_processing.identity import parse_filename, scan_sensor_id

log = logging.getLogger(__name__)

_MODE_CONFIG = {
    MODE_SINGLE_UNIT: {
        "focus": "temporal",
        "x_axis": "date",
        "grouping": "log_file",
        "comparison": "over_time",
        "color_by": "date",
    },
    MODE_MULTI_UNIT: {
        "focus": "comparative",
        "x_axis": "sensor_id",
        "grouping": "sensor_id",
        "comparison": "across_sensors",
        "color_by": "sensor_id",
    },
}


def extract_sensor_id_from_content(path, limit=DEFAULT_HEADER_SCAN_LINES):
    """Sensor ID from the header lines of *path*, or ``None``.

    Missing or unreadable files yield ``None``.
    """
    if not path or not os.path.isfile(path):
        return None
    try:
        lines = read_lines(path, limit=limit)
    except OSError as e:
        log.warning("Cannot read %s for sensor ID: %s", path, e)
        return None
    return scan_sensor_id(lines)


def _sensor_id_for(filename):
    match = parse_filename(filename)
    if match:
        return match.group("sensor_id")
    return extract_sensor_id_from_content(filename)


def classify_mode(filenames):
    """Decide single- vs multi-unit analysis for *filenames*."""
    unit_ids = set()
    for filename in filenames or []:
        sensor_id = _sensor_id_for(filename)
        if sensor_id:
            unit_ids.add(sensor_id)

    if not unit_ids:
        return AnalysisMode(MODE_UNKNOWN)
    if len(unit_ids) == 1:
        return AnalysisMode(MODE_SINGLE_UNIT, unit_ids)
    return AnalysisMode(MODE_MULTI_UNIT, unit_ids)


def mode_config(mode):
    """Presentation defaults for an ``AnalysisMode`` (or a mode name)."""
    name = mode.mode if isinstance(mode, AnalysisMode) else mode
    config = _MODE_CONFIG.get(name)
    if config is None:
        return {"focus": "general", "x_axis": "log_file", "grouping": "log_file",
                "comparison": "none", "color_by": "log_file"}
    return dict(config)


def validate_mode_consistency(filenames, expected_mode):
    """Return ``(valid, message)``: whether *filenames* classify as
    *expected_mode*."""
    actual = classify_mode(filenames)
    if actual.mode == expected_mode:
        return True, "Selection matches %s" % expected_mode
    return False, "Expected %s but selection is %s (%s)" % (
        expected_mode, actual.mode, actual.display_label,
    )
