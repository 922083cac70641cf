# -*- coding: utf-8 -*-
"""
Log family detection.

MS110 pods write ``info.log``; DB110 pods write ``errorlog.log``.  Renamed
files carry the family as their first name token.  The filename is
checked first; when it says nothing useful the first lines of the file
are searched for the family name or the log's own header phrase.
"""

import os
import logging

from logcompass.core.types import LogFamily
from logcompass.core.string_helpers import read_lines
from logcompass.core.config_loader import DEFAULT_PEEK_LINES

log = logging.getLogger(__name__)

# Filename tokens (lower-case) that identify each family
_FILENAME_MARKERS = [
    (LogFamily.MS110, ("info", "ms110")),
    (LogFamily.DB110, ("error", "db110")),
]

# Content markers, searched in this order across the joined peek lines
_CONTENT_MARKERS = [
    ("ms110", LogFamily.MS110),
    ("db110", LogFamily.DB110),
    ("info log", LogFamily.MS110),
    ("error log", LogFamily.DB110),
]

_DISPLAY_INFO = {
    LogFamily.MS110: {
        "name": "MS110",
        "full_name": "MS110 Info Log",
        "file_pattern": r"info.*\.log",
    },
    LogFamily.DB110: {
        "name": "DB110",
        "full_name": "DB110 Error Log",
        "file_pattern": r"error.*\.log",
    },
}


def classify(filename, content_peek=None):
    """Return the ``LogFamily`` of a file.

    *content_peek* is an optional sequence of the file's first lines; it
    is only consulted when the filename is inconclusive.  Never raises:
    an undecidable file is ``LogFamily.UNKNOWN``.
    """
    if filename:
        base = os.path.basename(str(filename)).lower()
        for family, markers in _FILENAME_MARKERS:
            for marker in markers:
                if marker in base:
                    return family

    if content_peek:
        content = " ".join(list(content_peek)[:DEFAULT_PEEK_LINES]).lower()
        for marker, family in _CONTENT_MARKERS:
            if marker in content:
                return family

    return LogFamily.UNKNOWN


def peek_file(path, limit=DEFAULT_PEEK_LINES):
    """Return the first *limit* lines of *path*, or ``None`` when the file
    does not exist or cannot be read."""
    if not path or not os.path.isfile(path):
        return None
    try:
        return read_lines(path, limit=limit)
    except OSError as e:
        log.warning("Cannot read %s for log type detection: %s", path, e)
        return None


def classify_file(path):
    """Classify an on-disk file, falling back to its content."""
    family = classify(path)
    if family != LogFamily.UNKNOWN:
        return family
    return classify(path, peek_file(path))


def validate_family_consistency(paths):
    """Check that every file in a selection belongs to one family.

    Returns ``(valid, family, message)``.  Files whose family cannot be
    detected are ignored unless no file can be classified at all.
    """
    if not paths:
        return False, None, "No files provided"

    families = []
    for path in paths:
        family = classify_file(path)
        if family != LogFamily.UNKNOWN and family not in families:
            families.append(family)

    if not families:
        return False, None, "Could not detect log type for any files"
    if len(families) > 1:
        return False, None, (
            "Mixed log types detected: %s. MS110 and DB110 logs cannot be "
            "analyzed together." % " and ".join(families)
        )
    return True, families[0], "All files are %s logs" % families[0]


def family_display_info(family):
    """Display name, full name and file pattern for *family*."""
    info = _DISPLAY_INFO.get(family)
    if info is not None:
        return dict(info)
    return {"name": "Unknown", "full_name": "Unknown Log Type", "file_pattern": None}
