# -*- coding: utf-8 -*-
"""
Exception hierarchy for Log Compass.

All Log Compass exceptions descend from ``LogCompassError``.  The
hierarchy lets callers catch broad categories (e.g. anything wrong with
a single log file) or specific conditions (e.g. the batch output
directory cannot be created).

Absence of information is not an error in this code base: an
unclassifiable file is reported as ``LogFamily.UNKNOWN`` and a missing
sensor ID is ``None``.  Exceptions are reserved for faults.
"""


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LogCompassError(Exception):
    """Root of the Log Compass exception hierarchy."""

    def __init__(self, message=None, code=None):
        if message is None:
            Exception.__init__(self)
        else:
            Exception.__init__(self, message)
        self.code = code


# ---------------------------------------------------------------------------
# Data processing layer
# ---------------------------------------------------------------------------

class DataError(LogCompassError):
    """Raised when log content fails validation or parsing."""
    pass


class ParseError(DataError):
    """Structural parse failure (binary content, no recognisable
    entries, truncated records)."""
    pass


class ValidationError(DataError):
    """Semantic validation failure (out-of-range values, bad options)."""
    pass


class ClassificationError(DataError):
    """Raised by callers that refuse to go on with a file whose log
    family could not be determined."""

    def __init__(self, message, path=None):
        DataError.__init__(self, message)
        self.path = path


# ---------------------------------------------------------------------------
# Storage layer
# ---------------------------------------------------------------------------

class StorageError(LogCompassError):
    """Raised when reading or writing a log file fails."""
    pass


class OutputDirectoryError(StorageError):
    """The batch output directory cannot be created or written.  This is
    the one condition that aborts a whole batch."""

    def __init__(self, message, directory=None):
        StorageError.__init__(self, message)
        self.directory = directory


# ---------------------------------------------------------------------------
# Reporting layer
# ---------------------------------------------------------------------------

class ExportError(LogCompassError):
    """Raised when batch results cannot be exported."""
    pass


# ---------------------------------------------------------------------------
# Error-handling utilities
# ---------------------------------------------------------------------------

def describe_exception(exc):
    """Return the message recorded for a failed file.

    The raw message is preserved verbatim; only an exception without
    any message falls back to its class name.
    """
    message = str(exc)
    if message:
        return message
    return exc.__class__.__name__
