# -*- coding: utf-8 -*-
"""
Boot milestone sequencing.

A milestone catalogue is an ordered list of ``MilestoneDefinition``s:
which table to search (primary log, maintenance log or self-test
section), which marker to look for, whether the first or the last
matching row counts, how to read a measured value off the row and how
to derive the milestone's status.  ``sequence_milestones`` walks one
catalogue over one log; the two firmware families differ only in their
catalogues.

Milestones are emitted in catalogue order.  A marker that never appears
simply leaves its milestone out -- absence is not failure.  The
"System Ready" milestone is PASS only when every milestone captured
before it is PASS.
"""

import os
import re
import logging

from logcompass.core.types import (
    LogFamily, Milestone, MilestoneSequence,
    STATUS_PASS, STATUS_FAIL,
)
from logcompass.core.exceptions import ValidationError
from logcompass.data_processing.self_test import result_keys, distinct_keys

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Catalogue vocabulary
# ---------------------------------------------------------------------------

SOURCE_PRIMARY = "primary"
SOURCE_MAINTENANCE = "maintenance"
SOURCE_SELF_TEST = "self_test"

PICK_FIRST = "first"
PICK_LAST = "last"
PICK_SECTION_START = "section_start"  # earliest timestamp of the table
PICK_SECTION_END = "section_end"      # latest timestamp of the table

RULE_PASS = "pass"                      # found means PASS
RULE_POSITIVE = "positive"              # measured value > 0
RULE_ZERO = "zero"                      # measured count == 0
RULE_ALL_PRIOR_PASS = "all_prior_pass"  # every earlier milestone PASS


# ---------------------------------------------------------------------------
# Value extractors
#
# Each takes (hit, hits) -- the selected row and every matching row --
# and returns (display_value, numeric_value).  (None, None) means the
# value could not be read.
# ---------------------------------------------------------------------------

def constant(text):
    def extract(hit, hits):
        return text, None
    return extract


def regex_number(pattern, unit="", missing=None):
    """Read a decimal number from the hit row.  *missing* is shown when
    the row carries no number."""
    compiled = re.compile(pattern)

    def extract(hit, hits):
        match = compiled.search(hit.text)
        if not match:
            return missing, None
        raw = match.group(1)
        return "%s%s" % (raw, unit), float(raw)
    return extract


def regex_count(pattern, unit=""):
    """Read an integer count from the hit row."""
    compiled = re.compile(pattern, re.IGNORECASE)

    def extract(hit, hits):
        match = compiled.search(hit.text)
        if not match:
            return None, None
        count = int(match.group(1))
        return "%d%s" % (count, unit), count
    return extract


def hit_count(unit=" tests"):
    """Number of rows that matched the marker."""
    def extract(hit, hits):
        return "%d%s" % (len(hits), unit), len(hits)
    return extract


def unique_test_count(exclude_prefix=None, unit=" tests"):
    """Distinct (name, TID) self-tests among the matching rows.  A row's
    status does not matter here, only that it names the test."""
    def extract(hit, hits):
        count = len(distinct_keys(result_keys(hits), exclude_prefix=exclude_prefix))
        if count == 0:
            return None, None
        return "%d%s" % (count, unit), count
    return extract


# ---------------------------------------------------------------------------
# MilestoneDefinition
# ---------------------------------------------------------------------------

class MilestoneDefinition(object):
    """One catalogue entry.

    *pattern* is matched case-insensitively against row text (as a
    literal when *literal* is set); *function*, when given, must also
    match the row's function name.  With *require_value* the milestone
    is left out when its value cannot be read.  *fallback* is another
    definition tried when this one finds nothing.
    """

    def __init__(self, name, source, pattern, function=None, literal=False,
                 pick=PICK_FIRST, value=None, rule=RULE_PASS,
                 require_value=False, fallback=None):
        self.name = name
        self.source = source
        self.pattern = re.compile(re.escape(pattern) if literal else pattern, re.IGNORECASE)
        self.function = re.compile(function, re.IGNORECASE) if function else None
        self.pick = pick
        self.value = value
        self.rule = rule
        self.require_value = require_value
        self.fallback = fallback

    def matches(self, row):
        if not self.pattern.search(row.text):
            return False
        if self.function is not None and not self.function.search(row.function):
            return False
        return True

    def locate(self, tables):
        """Return ``(hit, hits)`` for this definition, or ``(None, [])``."""
        rows = tables.get(self.source) or []
        hits = [row for row in rows if self.matches(row)]
        if not hits:
            return None, []
        if self.pick in (PICK_SECTION_START, PICK_SECTION_END):
            timed = [row for row in rows if row.time is not None]
            if not timed:
                return None, []
            choose = min if self.pick == PICK_SECTION_START else max
            return choose(timed, key=lambda row: row.time), hits
        return (hits[0] if self.pick == PICK_FIRST else hits[-1]), hits

    def __repr__(self):
        return "MilestoneDefinition(%r, %s)" % (self.name, self.source)


class TimingMarkers(object):
    """Maintenance-log records that bracket a powered session.  Each
    pattern captures the power-on seconds counter."""

    def __init__(self, start_pattern, end_pattern):
        self.start = re.compile(start_pattern, re.IGNORECASE)
        self.end = re.compile(end_pattern, re.IGNORECASE)


class MilestoneCatalogue(object):
    """Ordered milestone definitions for one log family."""

    def __init__(self, family, definitions, timing=None, empty_fallback=None):
        self.family = family
        self.definitions = list(definitions)
        self.timing = timing
        self.empty_fallback = empty_fallback

    def names(self):
        return [d.name for d in self.definitions]

    def __len__(self):
        return len(self.definitions)


# ---------------------------------------------------------------------------
# Catalogues
# ---------------------------------------------------------------------------

DB110_CATALOGUE = MilestoneCatalogue(
    LogFamily.DB110,
    [
        MilestoneDefinition(
            "RSM Startup", SOURCE_PRIMARY, "TR_Low Starting up the RSM",
            function="startupRsm",
        ),
        MilestoneDefinition("Time Sync (TSY)", SOURCE_MAINTENANCE, r"TSY\|"),
        MilestoneDefinition(
            "SCU Comms", SOURCE_PRIMARY, "Established communications with the SCU",
        ),
        MilestoneDefinition(
            "DTM Power Up", SOURCE_PRIMARY, "DTM is powered up and disk mounted",
        ),
        MilestoneDefinition("INS Power Up", SOURCE_PRIMARY, "INS is powered up"),
        MilestoneDefinition(
            "SSR Power Up", SOURCE_PRIMARY,
            "SSR SystemState changed from TUFSRV_NOTREADY to TUFSRV_READY",
        ),
        MilestoneDefinition(
            "SBIT Start", SOURCE_PRIMARY,
            'bitRunSbit: running SBIT on "Pod", run level = "Sru"',
            literal=True, value=constant("Sru Level"),
        ),
        MilestoneDefinition(
            "IRFPA Temp Acq", SOURCE_PRIMARY,
            r"MLV\|.*\|MwirFpa\.Cooler\|IR Cooler Temp\. in degK",
            value=regex_number(r"\|(\d+\.\d+),", unit=" K", missing="N/A"),
            rule=RULE_POSITIVE,
        ),
        MilestoneDefinition(
            "SBIT Complete", SOURCE_SELF_TEST, r"TID.*status",
            pick=PICK_LAST, value=hit_count(),
            fallback=MilestoneDefinition(
                "SBIT Complete", SOURCE_PRIMARY, r"bitInProg=0",
            ),
        ),
        MilestoneDefinition(
            "System Ready", SOURCE_PRIMARY, "State changing event = READY",
            rule=RULE_ALL_PRIOR_PASS,
        ),
    ],
    timing=TimingMarkers(r"STU\|(\d+)", r"SHD\|(\d+)"),
)

MS110_CATALOGUE = MilestoneCatalogue(
    LogFamily.MS110,
    [
        MilestoneDefinition(
            "ABSW Version Detected", SOURCE_PRIMARY, r"ABSW|software version|SW version",
        ),
        MilestoneDefinition(
            "Sensor Initialization", SOURCE_PRIMARY,
            r"sensor.*init|initializing.*sensor|sensor.*start",
        ),
        MilestoneDefinition(
            "Mission Plan Loaded", SOURCE_PRIMARY,
            r"mission.*plan|loading.*mission|mission.*loaded",
        ),
        MilestoneDefinition(
            "EO Focal Plane Ready", SOURCE_PRIMARY, r"EO.*focal.*plane|EOFPA|EO.*ready",
        ),
        MilestoneDefinition(
            "IR Focal Plane Ready", SOURCE_PRIMARY, r"IR.*focal.*plane|IRFPA|IR.*ready",
        ),
        MilestoneDefinition(
            "System Ready", SOURCE_PRIMARY, r"system.*ready|operational|ready.*for.*mission",
            rule=RULE_ALL_PRIOR_PASS,
        ),
        MilestoneDefinition(
            "Mission Start", SOURCE_PRIMARY,
            r"mission.*start|start.*mission|beginning.*mission",
        ),
        MilestoneDefinition(
            "SBIT Start", SOURCE_SELF_TEST, r"TID.*status",
            pick=PICK_SECTION_START, value=unique_test_count(exclude_prefix="INS_"),
            require_value=True,
        ),
        MilestoneDefinition(
            "Validation Errors", SOURCE_SELF_TEST, r"SHA Validation Results:",
            value=regex_count(r"SHA Validation Results:\s*(\d+)", unit=" errors"),
            rule=RULE_ZERO, require_value=True,
        ),
        MilestoneDefinition(
            "SBIT Complete", SOURCE_SELF_TEST, r"TID.*status",
            pick=PICK_SECTION_END, value=unique_test_count(exclude_prefix="INS_"),
            require_value=True,
        ),
    ],
    empty_fallback="Log File Parsed",
)

CATALOGUES = {
    LogFamily.DB110: DB110_CATALOGUE,
    LogFamily.MS110: MS110_CATALOGUE,
}


def catalogue_for(family):
    catalogue = CATALOGUES.get(family)
    if catalogue is None:
        raise ValidationError("no milestone catalogue for log family %r" % family)
    return catalogue


# ---------------------------------------------------------------------------
# Status derivation
# ---------------------------------------------------------------------------

def derive_status(rule, numeric, captured):
    if rule == RULE_PASS:
        return STATUS_PASS
    if rule == RULE_ALL_PRIOR_PASS:
        if all(m.status == STATUS_PASS for m in captured):
            return STATUS_PASS
        return STATUS_FAIL
    if rule == RULE_POSITIVE:
        return STATUS_PASS if numeric is not None and numeric > 0 else STATUS_FAIL
    if rule == RULE_ZERO:
        return STATUS_PASS if numeric == 0 else STATUS_FAIL
    raise ValidationError("unknown status rule: %r" % rule)


# ---------------------------------------------------------------------------
# Sequencing
# ---------------------------------------------------------------------------

def _evaluate(definition, tables, captured):
    """Build the milestone for *definition*, or ``None`` when absent."""
    hit, hits = definition.locate(tables)
    if hit is None:
        if definition.fallback is not None:
            return _evaluate(definition.fallback, tables, captured)
        return None

    display, numeric = None, None
    if definition.value is not None:
        display, numeric = definition.value(hit, hits)
        if display is None and definition.require_value:
            return None

    return Milestone(
        name=definition.name,
        timestamp=hit.time,
        value=display,
        status=derive_status(definition.rule, numeric, captured),
    )


def session_timing(timing, maintenance, primary):
    """Return ``(first_power_count, last_power_count, elapsed_seconds)``.

    When the closing record is missing, the last primary-log timestamp
    minus the opening record's timestamp stands in for it.
    """
    if timing is None or not maintenance:
        return None, None, None

    first_count = last_count = None
    start_time = None

    for row in maintenance:
        match = timing.start.search(row.text)
        if match:
            first_count = float(match.group(1))
            start_time = row.time
            break

    end_row = None
    for row in maintenance:
        if timing.end.search(row.text):
            end_row = row
            break

    if end_row is not None:
        last_count = float(timing.end.search(end_row.text).group(1))
    elif start_time is not None and primary:
        times = [row.time for row in primary if row.time is not None]
        if times:
            last_count = (max(times) - start_time).total_seconds()

    elapsed = None
    if first_count is not None and last_count is not None:
        elapsed = last_count - first_count
    return first_count, last_count, elapsed


def sequence_milestones(catalogue, log_file_name, primary, secondary=None, tests=None):
    """Walk *catalogue* over one log and return a ``MilestoneSequence``."""
    tables = {
        SOURCE_PRIMARY: list(primary or []),
        SOURCE_MAINTENANCE: list(secondary or []),
        SOURCE_SELF_TEST: list(tests or []),
    }

    captured = []
    for definition in catalogue.definitions:
        milestone = _evaluate(definition, tables, captured)
        if milestone is not None:
            captured.append(milestone)

    if not captured and catalogue.empty_fallback and tables[SOURCE_PRIMARY]:
        first = tables[SOURCE_PRIMARY][0]
        captured.append(Milestone(catalogue.empty_fallback, first.time, None, STATUS_PASS))

    first_count, last_count, elapsed = session_timing(
        catalogue.timing, tables[SOURCE_MAINTENANCE], tables[SOURCE_PRIMARY],
    )
    log.debug("%s: %d milestones", log_file_name, len(captured))
    return MilestoneSequence(
        log_file=log_file_name,
        milestones=captured,
        first_power_count=first_count,
        last_power_count=last_count,
        elapsed_seconds=elapsed,
    )


def sequence(log_file_name, primary, secondary=None, tests=None, family=LogFamily.DB110):
    """Sequence milestones for a log of the given *family*."""
    return sequence_milestones(catalogue_for(family), log_file_name, primary,
                               secondary, tests)


def sequence_bundle(bundle):
    """Sequence milestones straight from a parsed ``LogBundle``."""
    return sequence(
        os.path.basename(bundle.path) if bundle.path else "",
        bundle.entries, bundle.maintenance, bundle.self_test,
        family=bundle.family,
    )


# ---------------------------------------------------------------------------
# Boot metrics
# ---------------------------------------------------------------------------

def boot_metrics(sequences):
    """Summarise boot duration per log.

    Returns one dict per sequence that has at least one timestamped
    milestone: ``log_file``, ``first_milestone``, ``last_milestone``,
    ``total_boot_seconds``, ``completed``, ``failed``.
    """
    metrics = []
    for seq in sequences:
        times = [m.timestamp for m in seq.milestones if m.timestamp is not None]
        if not times:
            continue
        first, last = min(times), max(times)
        metrics.append({
            "log_file": seq.log_file,
            "first_milestone": first,
            "last_milestone": last,
            "total_boot_seconds": (last - first).total_seconds(),
            "completed": len(seq.milestones),
            "failed": sum(1 for m in seq.milestones if m.status == STATUS_FAIL),
        })
    return metrics


# ---------------------------------------------------------------------------
# SBIT subassembly commands and component versions (DB110)
# ---------------------------------------------------------------------------

_SUBASSEMBLY_RUN = re.compile(r'commanding "run" to subassembly "([^"]+)"', re.IGNORECASE)

_PPS_TEXT = re.compile(r"PPS S/N|Software Rev|v\d+r\d+", re.IGNORECASE)
_PPS_SOFTWARE = re.compile(r"Software Rev\s+([^',]+)")
_PPS_SERIAL = re.compile(r"PPS S/N\s+([^,]+)")
_TS480_TEXT = re.compile(r"TS480 SW Ver", re.IGNORECASE)
_TS480_SOFTWARE = re.compile(r"TS480 SW Ver\s+([^,]+)")
_TS480_SVN = re.compile(r"Svn\s+(\d+)")


def extract_subassembly_commands(primary):
    """SBIT "run" commands sent to each subassembly, in log order.

    Returns dicts with ``time``, ``subassembly`` and ``text``.
    """
    commands = []
    for row in primary:
        if row.function != "bitRunCmdNode":
            continue
        match = _SUBASSEMBLY_RUN.search(row.text)
        if match:
            commands.append({"time": row.time, "subassembly": match.group(1), "text": row.text})
    return commands


def extract_component_versions(primary):
    """Hardware/software versions of the PPS and TS480 components.

    Returns dicts with ``component``, ``version_string``,
    ``software_version`` and ``hardware_version``.
    """
    versions = []

    pps_rows = [row for row in primary
                if row.function == "scuPpduStartup" and _PPS_TEXT.search(row.text)]
    if pps_rows:
        pps_text = " ".join(row.text for row in pps_rows)
        software = _PPS_SOFTWARE.search(pps_text)
        serial = _PPS_SERIAL.search(pps_text)
        if software or serial:
            versions.append({
                "component": "PPS",
                "version_string": pps_text[:100],
                "software_version": software.group(1).strip() if software else "Unknown",
                "hardware_version": serial.group(1).strip() if serial else "Unknown",
            })

    for row in primary:
        if _TS480_TEXT.search(row.text):
            software = _TS480_SOFTWARE.search(row.text)
            svn = _TS480_SVN.search(row.text)
            versions.append({
                "component": "TS480",
                "version_string": row.text,
                "software_version": software.group(1).strip() if software else "Unknown",
                "hardware_version": "Svn %s" % svn.group(1) if svn else "Unknown",
            })
            break

    return versions
