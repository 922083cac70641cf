# -*- coding: utf-8 -*-
"""
Log file parser for MS110 info logs and DB110 error logs.

Turns a raw pod log into a ``LogBundle``: the chronological entry table,
the key/value attribute table written in the log header, and the two
sub-tables the analysis cares about -- the self-test (SBIT) section and
the maintenance-log records.

DB110 entry::

    2024-08-21 07:38:07.125 (2024-08-21 11:38:07.125) 'TR_Low Starting up the RSM' controller.c 906 startupRsm

MS110 entry::

    2025-01-28 10:15:02.123 INFO [Sensor/sensorInit] Sensor initialization started

The parenthesised secondary timestamp is optional in both dialects.
Long messages wrap onto indented continuation lines; those are joined
back before matching, so ``line_number`` counts logical lines.
"""

import os
import re
import time
import logging
import datetime

from logcompass.core.types import LogFamily, LogRecord, LogBundle
from logcompass.core.exceptions import ParseError
from logcompass.core.string_helpers import (
    safe_decode, has_binary_content, strip_control_characters,
)
from logcompass.core.config_loader import DEFAULT_HEADER_SCAN_LINES
from logcompass.data_processing.text_normalizer import merge_continuation_lines
from logcompass.data_processing.family_classifier import classify

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Log format patterns
# ---------------------------------------------------------------------------

_TS = r"\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}(?:\.\d+)?"

# DB110: "<ts> [(<ts2>)] '<text>' <source file> <line> <function>"
_DB110_PATTERN = re.compile(
    r"^(?P<time>" + _TS + r")\s+"
    r"(?:\((?P<time_alt>" + _TS + r")\)\s+)?"
    r"'(?P<text>.*)'\s+"
    r"(?P<component>\S+)\s+"
    r"(?P<source_line>\d+)\s+"
    r"(?P<function>\S+)\s*$"
)

# MS110: "<ts> [(<ts2>)] LEVEL [component/function] text"
_MS110_PATTERN = re.compile(
    r"^(?P<time>" + _TS + r")\s+"
    r"(?:\((?P<time_alt>" + _TS + r")\)\s+)?"
    r"(?P<level>[A-Z]+)\s+"
    r"\[(?P<component>[^\]/]*)(?:/(?P<function>[^\]]*))?\]\s*"
    r"(?P<text>.*)$"
)

_ENTRY_PATTERNS = {
    LogFamily.DB110: _DB110_PATTERN,
    LogFamily.MS110: _MS110_PATTERN,
}

# Header attribute: "Key: Value"
_ATTRIBUTE_PATTERN = re.compile(
    r"^\s*(?P<key>[A-Za-z][A-Za-z0-9 _/.-]*?)\s*:\s+(?P<value>\S.*?)\s*$"
)

_TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S")

# Self-test section boundaries
_SELF_TEST_START = re.compile(r"running SBIT|SBIT (?:start|begin)", re.IGNORECASE)
_SELF_TEST_END = re.compile(
    r"bitInProg\s*=\s*0|SBIT (?:complete|completed|done|finished)", re.IGNORECASE,
)
_SELF_TEST_FUNCTION = re.compile(r"^bit", re.IGNORECASE)
_SELF_TEST_COMPONENT = re.compile(r"\bS?BIT\b", re.IGNORECASE)
_SELF_TEST_TEXT = re.compile(r"\bTID\b")

# Maintenance log records: "TSY|122 1724225887", "TR_Rare STU|175", ...
MAINTENANCE_FUNCTIONS = ("CS_addMaintLogEnt", "bitMaintLogWrite")
_MAINTENANCE_RECORD = re.compile(r"^(?:TR_\w+\s+)?[A-Z]{3}\|")


# ---------------------------------------------------------------------------
# Timestamp parsing
# ---------------------------------------------------------------------------

def parse_timestamp(ts_str):
    """Parse ``YYYY-MM-DD HH:MM:SS[.fff]`` into a ``datetime``.

    Returns ``None`` for malformed values.  Fractions longer than
    microseconds are truncated.
    """
    if not ts_str:
        return None
    value = ts_str.strip().replace("T", " ")
    if "." in value:
        base, frac = value.split(".", 1)
        value = "%s.%s" % (base, frac[:6])
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


# ---------------------------------------------------------------------------
# Section slicing
# ---------------------------------------------------------------------------

def slice_self_test_section(entries):
    """Return the self-test (SBIT) rows of an entry table.

    The section runs from the first SBIT start marker through the first
    completion marker after it.  Logs without a start marker fall back
    to rows written by the BIT subsystem or carrying a test ID.
    """
    start = None
    for index, row in enumerate(entries):
        if _SELF_TEST_START.search(row.text):
            start = index
            break

    if start is not None:
        section = []
        for row in entries[start:]:
            section.append(row)
            if len(section) > 1 and _SELF_TEST_END.search(row.text):
                break
        return section

    return [
        row for row in entries
        if _SELF_TEST_FUNCTION.search(row.function)
        or _SELF_TEST_COMPONENT.search(row.component)
        or _SELF_TEST_TEXT.search(row.text)
    ]


def slice_maintenance_log(entries):
    """Return the maintenance-log rows of an entry table."""
    return [
        row for row in entries
        if row.function in MAINTENANCE_FUNCTIONS or _MAINTENANCE_RECORD.search(row.text)
    ]


# ---------------------------------------------------------------------------
# LogParser -- the main parsing engine
# ---------------------------------------------------------------------------

class LogParser:
    """Parse pod log files into ``LogBundle`` objects.

    When *family* is not given it is taken from the filename, then from
    the header lines, then from the shape of the first entry line.
    """

    def __init__(self, family=None, header_scan_lines=DEFAULT_HEADER_SCAN_LINES):
        self._family = family
        self._header_scan_lines = header_scan_lines
        self._parse_errors = []
        self._lines_processed = 0

    def parse_file(self, file_path):
        """Parse the log file at *file_path*.

        Raises ``OSError`` when the file cannot be read and
        ``ParseError`` when its content is not a pod log.
        """
        log.debug("Parsing log file: %s", file_path)
        start_time = time.time()

        with open(file_path, "rb") as f:
            raw = f.read()

        if has_binary_content(raw):
            raise ParseError("binary content in %s" % os.path.basename(file_path))

        lines = safe_decode(raw).splitlines()
        bundle = self.parse_lines(lines, path=file_path)

        log.debug("Parsed %d entries from %d lines in %.2f seconds",
                  len(bundle.entries), len(lines), time.time() - start_time)
        return bundle

    def parse_lines(self, lines, path=None, family=None):
        """Parse already-decoded *lines* into a ``LogBundle``.

        Parse errors and the line count are kept for the latest call only.
        """
        self._parse_errors = []
        self._lines_processed = 0
        family = family or self._family
        if not family or not LogFamily.is_known(family):
            family = classify(path, lines)

        entries = []
        attributes = {}
        detected = family if LogFamily.is_known(family) else None

        for line_num, line in enumerate(merge_continuation_lines(lines), 1):
            self._lines_processed += 1
            line = strip_control_characters(line).rstrip()
            if not line.strip():
                continue

            if detected is None:
                detected = self._detect_family(line)

            entry = self._parse_line(line, line_num, detected)
            if entry is not None:
                entries.append(entry)
                continue

            attr = _ATTRIBUTE_PATTERN.match(line)
            if attr is not None:
                attributes.setdefault(attr.group("key"), attr.group("value"))
                continue

            self._parse_errors.append(
                "Line %d: unrecognised (content: %s)" % (
                    line_num, line[:100] if len(line) > 100 else line,
                )
            )

        if not entries:
            raise ParseError("no recognisable log entries in %s" % (
                os.path.basename(path) if path else "input",
            ))

        return LogBundle(
            path=path,
            family=detected or LogFamily.UNKNOWN,
            entries=entries,
            attributes=attributes,
            self_test=slice_self_test_section(entries),
            maintenance=slice_maintenance_log(entries),
            header_lines=lines[:self._header_scan_lines],
        )

    # ---------------------------------------------------------------
    # Format detection
    # ---------------------------------------------------------------

    def _detect_family(self, line):
        """Detect the dialect from a sample entry line."""
        for family, pattern in _ENTRY_PATTERNS.items():
            if pattern.match(line):
                return family
        return None

    # ---------------------------------------------------------------
    # Line parsing
    # ---------------------------------------------------------------

    def _parse_line(self, line, line_num, family):
        """Parse a single logical line according to *family*."""
        pattern = _ENTRY_PATTERNS.get(family)
        if pattern is None:
            return None
        match = pattern.match(line)
        if not match:
            return None

        timestamp = parse_timestamp(match.group("time"))
        if timestamp is None:
            return None

        return LogRecord(
            time=timestamp,
            time_alt=parse_timestamp(match.group("time_alt")),
            function=match.group("function") or "",
            component=match.group("component").strip(),
            text=match.group("text").strip(),
            line_number=line_num,
        )

    # ---------------------------------------------------------------
    # Statistics
    # ---------------------------------------------------------------

    def lines_processed(self):
        return self._lines_processed

    def parse_errors(self):
        return list(self._parse_errors)
