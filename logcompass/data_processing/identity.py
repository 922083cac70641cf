# -*- coding: utf-8 -*-
"""
Identity extraction: sensor ID, mission ID and epoch of a pod log.

Each field has an ordered list of strategies.  A strategy takes the
filename and (optionally) the parsed ``LogBundle`` and returns a value
or ``None``; the first strategy that returns a value wins for that
field.  Fields are resolved independently, so the sensor ID may come
from the filename while the mission ID comes from the log header.

Renamed files follow ``<FAMILY>_<sensorID>_<epoch>_<missionID>.<ext>``
(three tokens when the mission is unknown), which is what
``build_destination_name`` produces and what the filename
strategy reads back.
"""

import os
import re
import logging

from logcompass.core.types import Identity, LogFamily
from logcompass.core.config_loader import (
    DEFAULT_SENSOR_ID_CEILING, DEFAULT_HEADER_SCAN_LINES,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Patterns and canonical keys
# ---------------------------------------------------------------------------

# <FAMILY>_<sensorID>_<epoch>[_<missionID>][-<N>].<ext>, anchored at the
# start.  The mission token is left out when no mission is known and
# ``-<N>`` is the copy index OutputStore appends on a name collision;
# neither changes the identity read back from the name.
FILENAME_PATTERN = re.compile(
    r"^(?P<family>%s)_"
    r"(?P<sensor_id>[^_]+)_"
    r"(?P<epoch>[^_.]+?)"
    r"(?:_(?P<mission_id>[^.]+?))?"
    r"(?:-(?P<copy>\d+))?"
    r"\.(?P<ext>[A-Za-z0-9]+)$" % "|".join(LogFamily.KNOWN)
)

SENSOR_KEYS = ("Sensor", "Sensor ID", "SensorID")
MISSION_KEYS = ("Mission Plan", "Mission ID", "Mission")
EPOCH_KEYS = ("FlightDate", "Flight Date", "Epoch")

# Flat-text alternatives, tried in order on every header line
SENSOR_PATTERNS = [
    re.compile(r"Sensor:\s+(\w+)"),
    re.compile(r"Sensor ID:\s+(\w+)"),
    re.compile(r"SensorID:\s+(\w+)"),
]
MISSION_PATTERNS = [
    re.compile(r"Mission Plan:\s+(.+?)\s*$"),
    re.compile(r"Mission ID:\s+(\S+)"),
    re.compile(r"Mission:\s+(\S+)"),
]
EPOCH_PATTERNS = [
    re.compile(r"FlightDate:\s+(\d{4}-?\d{2}-?\d{2})"),
    re.compile(r"Flight Date:\s+(\d{4}-?\d{2}-?\d{2})"),
    re.compile(r"Epoch:\s+(\w+)"),
]

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

EPOCH_FORMAT = "%Y%m%d"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def sanitize_mission_id(mission_id):
    """Make *mission_id* safe for use in a filename."""
    if mission_id is None:
        return None
    return _NON_ALNUM.sub("_", mission_id)


def compact_date(value):
    """``2025-01-28`` -> ``20250128``; other values pass through."""
    if value is None:
        return None
    match = _ISO_DATE.match(value.strip())
    if match:
        return "".join(match.groups())
    return value.strip()


def is_suspicious_sensor_id(sensor_id, ceiling=DEFAULT_SENSOR_ID_CEILING):
    """True when a numeric sensor ID exceeds the issued range.

    Non-numeric IDs cannot be range-checked and are never suspicious.
    """
    if sensor_id is None:
        return False
    try:
        return float(sensor_id) > ceiling
    except (TypeError, ValueError):
        return False


def parse_filename(filename):
    """Return the regex match of the renamed-file pattern, or ``None``."""
    if not filename:
        return None
    return FILENAME_PATTERN.match(os.path.basename(str(filename)))


def _scan(lines, patterns):
    for line in lines:
        for pattern in patterns:
            match = pattern.search(line)
            if match:
                return match.group(1).strip()
    return None


def first_success(strategies, filename, bundle):
    """Run *strategies* in order and return the first non-empty value."""
    for strategy in strategies:
        value = strategy(filename, bundle)
        if value:
            return value
    return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _filename_field(field):
    def strategy(filename, bundle):
        match = parse_filename(filename)
        return match.group(field) if match else None
    strategy.__name__ = "filename_%s" % field
    return strategy


def _attribute_field(keys):
    def strategy(filename, bundle):
        if bundle is None:
            return None
        return bundle.attribute(*keys)
    strategy.__name__ = "attribute_%s" % keys[0].lower().replace(" ", "_")
    return strategy


def _text_field(patterns):
    def strategy(filename, bundle):
        if bundle is None:
            return None
        return _scan(bundle.header_lines[:DEFAULT_HEADER_SCAN_LINES], patterns)
    return strategy


def epoch_from_first_timestamp(filename, bundle):
    """Earliest entry timestamp as a compact date."""
    if bundle is None:
        return None
    first = bundle.first_time()
    return first.strftime(EPOCH_FORMAT) if first is not None else None


SENSOR_STRATEGIES = [
    _filename_field("sensor_id"),
    _attribute_field(SENSOR_KEYS),
    _text_field(SENSOR_PATTERNS),
]

MISSION_STRATEGIES = [
    _filename_field("mission_id"),
    _attribute_field(MISSION_KEYS),
    _text_field(MISSION_PATTERNS),
]

EPOCH_STRATEGIES = [
    _filename_field("epoch"),
    lambda filename, bundle: compact_date(_attribute_field(EPOCH_KEYS)(filename, bundle)),
    lambda filename, bundle: compact_date(_text_field(EPOCH_PATTERNS)(filename, bundle)),
    epoch_from_first_timestamp,
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_identity(filename, bundle=None):
    """Extract the identity of a log from its filename and, when given,
    its parsed ``LogBundle``.  Never raises for missing information."""
    return Identity(
        sensor_id=first_success(SENSOR_STRATEGIES, filename, bundle),
        mission_id=first_success(MISSION_STRATEGIES, filename, bundle),
        epoch=first_success(EPOCH_STRATEGIES, filename, bundle),
    )


def extract_sensor_id(filename, bundle=None):
    return first_success(SENSOR_STRATEGIES, filename, bundle)


def scan_sensor_id(lines):
    """Flat-text sensor ID search over already-read *lines*."""
    return _scan(lines[:DEFAULT_HEADER_SCAN_LINES], SENSOR_PATTERNS)


def build_destination_name(family, identity, original_name):
    """Destination filename for a processed log.

    Degrades from four tokens to three when the mission is unknown and
    to ``<FAMILY>_<original name>`` when sensor or epoch is missing.
    """
    base = os.path.basename(original_name)
    ext = os.path.splitext(base)[1] or ".log"

    if identity.sensor_id and identity.epoch:
        mission = sanitize_mission_id(identity.mission_id)
        if mission:
            return "%s_%s_%s_%s%s" % (family, identity.sensor_id, identity.epoch, mission, ext)
        return "%s_%s_%s%s" % (family, identity.sensor_id, identity.epoch, ext)

    return fallback_name(family, base)


def fallback_name(family, original_name):
    return "%s_%s" % (family, os.path.basename(original_name))
