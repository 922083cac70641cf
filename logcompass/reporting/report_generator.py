# -*- coding: utf-8 -*-
"""
Plain-text processing reports for batch runs.

A report is a list of ``ReportSection``s rendered one after the other:
a header with the run totals, the per-file outcome table and, when any
file failed or was flagged, the messages for those files.
"""

import time

from logcompass.core.types import BATCH_SUCCESS, BATCH_WARNING, BATCH_ERROR
from logcompass.data_processing.family_classifier import family_display_info

REPORT_TITLE = "Log Compass Processing Report"

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


class ReportSection:
    """A titled block of report lines."""

    def __init__(self, title, content_lines=None):
        self.title = str(title)
        self.content_lines = list(content_lines or [])

    def add_line(self, line):
        self.content_lines.append(str(line))

    def render(self):
        header = "=== " + self.title + " ==="
        body = "\n".join(self.content_lines)
        return header + "\n" + body + "\n"


def format_file_size(size):
    """Human-readable byte count: ``1536`` -> ``1.5 KB``."""
    if size is None or size < 0:
        return "-"
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "B":
                return "%d B" % size
            return "%.1f %s" % (value, unit)
        value /= 1024.0


def summary_stats(results):
    """Totals and success rate over a sequence of ``BatchResult``s.

    The rate counts WARNING rows as processed; it is a percentage
    rounded to one decimal, 0.0 for an empty batch.
    """
    results = list(results)
    total = len(results)
    success = sum(1 for r in results if r.status == BATCH_SUCCESS)
    warning = sum(1 for r in results if r.status == BATCH_WARNING)
    failed = sum(1 for r in results if r.status == BATCH_ERROR)
    rate = round(100.0 * (success + warning) / total, 1) if total else 0.0
    return {
        "total": total,
        "success": success,
        "warning": warning,
        "failed": failed,
        "success_rate": rate,
    }


def generate_processing_report(results, family=None, output_dir=None, notice=None):
    """Build the report sections for a finished batch."""
    results = list(results)
    stats = summary_stats(results)

    header = ReportSection(REPORT_TITLE)
    header.add_line("Generated: %s" % time.strftime("%Y-%m-%d %H:%M:%S"))
    if family is not None:
        header.add_line("Log type: %s" % family_display_info(family)["full_name"])
    if output_dir:
        header.add_line("Output directory: %s" % output_dir)
    header.add_line("Files: %d  Success: %d  Warning: %d  Error: %d  (%.1f%% processed)" % (
        stats["total"], stats["success"], stats["warning"], stats["failed"],
        stats["success_rate"]))
    if notice:
        header.add_line(notice)
    sections = [header]

    if results:
        table = ReportSection("Files")
        for r in results:
            table.add_line("  %-7s %-12s %-10s %-20s %s" % (
                r.status, r.sensor_id or "-", r.epoch or "-",
                r.mission_id or "-", r.destination_path or r.source_path))
        sections.append(table)

    problems = [r for r in results if r.status != BATCH_SUCCESS]
    if problems:
        issues = ReportSection("Issues (%d)" % len(problems))
        for r in problems:
            issues.add_line("  [%s] %s: %s" % (r.status, r.source_path, r.message))
        sections.append(issues)

    return sections


def render_report(sections):
    return "\n".join(section.render() for section in sections)
