# -*- coding: utf-8 -*-
"""
Core data types for Log Compass.

Defines the value objects shared by every subsystem: parsed log rows
and the per-file bundle the parser hands over, extracted identity,
boot milestones, self-test results, batch result rows, and the
analysis-mode decision for a selection of files.
"""

import functools


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class LogFamily(object):
    """The two firmware log dialects, plus ``UNKNOWN``.

    MS110 pods write an *info log* (``info.log``); DB110 pods write an
    *error log* (``errorlog.log``).  A file's family is decided once and
    never changes.
    """

    MS110 = "MS110"
    DB110 = "DB110"
    UNKNOWN = "Unknown"

    KNOWN = (MS110, DB110)

    @classmethod
    def is_known(cls, family):
        return family in cls.KNOWN


# Milestone statuses
STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"
STATUS_WARN = "WARN"

# Self-test statuses
TEST_PASS = "PASS"
TEST_FAIL = "FAIL"
TEST_DEGRADED = "DEGR"
TEST_STATUSES = (TEST_PASS, TEST_FAIL, TEST_DEGRADED)

# Batch outcomes
BATCH_SUCCESS = "SUCCESS"
BATCH_WARNING = "WARNING"
BATCH_ERROR = "ERROR"
BATCH_STATUSES = (BATCH_SUCCESS, BATCH_WARNING, BATCH_ERROR)

# Analysis modes
MODE_SINGLE_UNIT = "SINGLE_UNIT"
MODE_MULTI_UNIT = "MULTI_UNIT"
MODE_UNKNOWN = "UNKNOWN"


# ---------------------------------------------------------------------------
# LogRecord -- one parsed log entry
# ---------------------------------------------------------------------------

class LogRecord(object):
    """A single parsed log entry.

    ``time`` is the pod's primary clock; ``time_alt`` is the secondary
    clock some firmware revisions print next to it (``None`` when
    absent).
    """

    __slots__ = ("time", "time_alt", "function", "component", "text", "line_number")

    def __init__(self, time, text, function="", component="", time_alt=None,
                 line_number=0):
        self.time = time
        self.time_alt = time_alt
        self.function = function or ""
        self.component = component or ""
        self.text = text or ""
        self.line_number = line_number

    def __eq__(self, other):
        if not isinstance(other, LogRecord):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self):
        return "LogRecord(%s %s [%s] %s)" % (
            self.time, self.function, self.component,
            self.text[:60] if len(self.text) > 60 else self.text,
        )


# ---------------------------------------------------------------------------
# LogBundle -- everything the parser extracted from one file
# ---------------------------------------------------------------------------

class LogBundle(object):
    """Structured view of one log file.

    This is the single place where the shape of parser output is fixed:
    every table is a list (possibly empty), never ``None``, so the
    extractors downstream do not have to probe for fields.
    """

    def __init__(self, path, family, entries=None, attributes=None,
                 self_test=None, maintenance=None, header_lines=None):
        self.path = path
        self.family = family
        self.entries = list(entries or [])
        self.attributes = dict(attributes or {})
        self.self_test = list(self_test or [])
        self.maintenance = list(maintenance or [])
        self.header_lines = list(header_lines or [])

    def attribute(self, *keys):
        """Return the first non-blank attribute among *keys*."""
        for key in keys:
            value = self.attributes.get(key)
            if value is not None and str(value).strip():
                return str(value).strip()
        return None

    def first_time(self):
        times = [row.time for row in self.entries if row.time is not None]
        return min(times) if times else None

    def last_time(self):
        times = [row.time for row in self.entries if row.time is not None]
        return max(times) if times else None

    def __len__(self):
        return len(self.entries)

    def __repr__(self):
        return "LogBundle(%r, %s, %d entries, %d self-test, %d maintenance)" % (
            self.path, self.family, len(self.entries),
            len(self.self_test), len(self.maintenance),
        )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

class Identity(object):
    """Sensor ID, mission ID and epoch of one log.  Any field may be
    ``None``; a partial identity is a normal, renderable state."""

    __slots__ = ("sensor_id", "mission_id", "epoch")

    def __init__(self, sensor_id=None, mission_id=None, epoch=None):
        self.sensor_id = sensor_id
        self.mission_id = mission_id
        self.epoch = epoch

    def is_empty(self):
        return self.sensor_id is None and self.mission_id is None and self.epoch is None

    def is_complete(self):
        return None not in (self.sensor_id, self.mission_id, self.epoch)

    def as_dict(self):
        return {"sensor_id": self.sensor_id, "mission_id": self.mission_id,
                "epoch": self.epoch}

    def __eq__(self, other):
        if not isinstance(other, Identity):
            return NotImplemented
        return (self.sensor_id, self.mission_id, self.epoch) == \
            (other.sensor_id, other.mission_id, other.epoch)

    def __hash__(self):
        return hash((self.sensor_id, self.mission_id, self.epoch))

    def __repr__(self):
        return "Identity(sensor_id=%r, mission_id=%r, epoch=%r)" % (
            self.sensor_id, self.mission_id, self.epoch,
        )


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

class Milestone(object):
    """One boot/initialisation event detected in a log."""

    __slots__ = ("name", "timestamp", "value", "status")

    def __init__(self, name, timestamp=None, value=None, status=STATUS_PASS):
        self.name = name
        self.timestamp = timestamp
        self.value = value
        self.status = status

    @property
    def passed(self):
        return self.status == STATUS_PASS

    def __eq__(self, other):
        if not isinstance(other, Milestone):
            return NotImplemented
        return (self.name, self.timestamp, self.value, self.status) == \
            (other.name, other.timestamp, other.value, other.status)

    def __repr__(self):
        return "Milestone(%r, %s, value=%r, %s)" % (
            self.name, self.timestamp, self.value, self.status,
        )


class MilestoneSequence(object):
    """Ordered milestones of one log plus the session timing metrics.

    ``first_power_count`` and ``last_power_count`` are the power-on
    counters from the startup and shutdown maintenance records;
    ``elapsed_seconds`` is their difference.
    """

    def __init__(self, log_file, milestones=None, first_power_count=None,
                 last_power_count=None, elapsed_seconds=None):
        self.log_file = log_file
        self.milestones = list(milestones or [])
        self.first_power_count = first_power_count
        self.last_power_count = last_power_count
        self.elapsed_seconds = elapsed_seconds

    def names(self):
        return [m.name for m in self.milestones]

    def statuses(self):
        return [m.status for m in self.milestones]

    def get(self, name):
        for milestone in self.milestones:
            if milestone.name == name:
                return milestone
        return None

    def __iter__(self):
        return iter(self.milestones)

    def __len__(self):
        return len(self.milestones)

    def __repr__(self):
        return "MilestoneSequence(%r, %d milestones, elapsed=%r)" % (
            self.log_file, len(self.milestones), self.elapsed_seconds,
        )


# ---------------------------------------------------------------------------
# Self-test results
# ---------------------------------------------------------------------------

class TestResult(object):
    """One built-in-test outcome."""

    __test__ = False                  # keep pytest from collecting this class
    __slots__ = ("name", "test_id", "status", "message", "timestamp")

    def __init__(self, name, test_id, status, message=None, timestamp=None):
        self.name = name
        self.test_id = test_id
        self.status = status
        self.message = message
        self.timestamp = timestamp

    def __eq__(self, other):
        if not isinstance(other, TestResult):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self):
        return "TestResult(%r, TID=%r, %s)" % (self.name, self.test_id, self.status)


# ---------------------------------------------------------------------------
# Batch results
# ---------------------------------------------------------------------------

class BatchResult(object):
    """Outcome of processing one discovered source file."""

    __slots__ = ("source_path", "destination_path", "identity", "status", "message")

    def __init__(self, source_path, status, message, destination_path=None,
                 identity=None):
        self.source_path = source_path
        self.destination_path = destination_path
        self.identity = identity if identity is not None else Identity()
        self.status = status
        self.message = message

    @property
    def sensor_id(self):
        return self.identity.sensor_id

    @property
    def mission_id(self):
        return self.identity.mission_id

    @property
    def epoch(self):
        return self.identity.epoch

    def __repr__(self):
        return "BatchResult(%r -> %r, %s)" % (
            self.source_path, self.destination_path, self.status,
        )


# ---------------------------------------------------------------------------
# Analysis mode
# ---------------------------------------------------------------------------

@functools.total_ordering
class AnalysisMode(object):
    """Single-unit (temporal) vs multi-unit (fleet) grouping of a file
    selection.  Ordered by unit count so callers can sort selections."""

    def __init__(self, mode, unit_ids=None):
        self.mode = mode
        self.unit_ids = set(unit_ids or ())

    @property
    def count(self):
        return len(self.unit_ids)

    @property
    def display_label(self):
        if self.mode == MODE_SINGLE_UNIT:
            return "Single Pod Analysis - Sensor: %s" % next(iter(self.unit_ids))
        if self.mode == MODE_MULTI_UNIT:
            return "Multi-Pod Fleet Analysis - %d sensors" % self.count
        return "Unable to determine sensor IDs"

    @property
    def display_subtitle(self):
        if self.mode == MODE_SINGLE_UNIT:
            return "Temporal Trend Analysis"
        if self.mode == MODE_MULTI_UNIT:
            return "Sensors: %s" % ", ".join(sorted(self.unit_ids))
        return ""

    def __eq__(self, other):
        if not isinstance(other, AnalysisMode):
            return NotImplemented
        return self.mode == other.mode and self.unit_ids == other.unit_ids

    def __lt__(self, other):
        return self.count < other.count

    def __repr__(self):
        return "AnalysisMode(%s, units=%s)" % (self.mode, sorted(self.unit_ids))
