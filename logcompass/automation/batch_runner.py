# -*- coding: utf-8 -*-
"""
Batch processing of pod logs.

``run_batch`` discovers the logs of one family under a set of source
directories and, file by file, reads, optionally cleans, parses and
identifies each one, then writes it into the output directory under
its identity-based name.  Every file yields exactly one ``BatchResult``;
a fault in one file is recorded against that file and the batch moves
on.  The only exception that leaves ``run_batch`` is
``OutputDirectoryError``, because nothing could be written anyway.
"""

import os
import re
import time
import logging

from logcompass.core.types import (
    LogFamily, BatchResult, Identity,
    BATCH_SUCCESS, BATCH_WARNING, BATCH_ERROR,
)
from logcompass.core.exceptions import ParseError, ValidationError, describe_exception
from logcompass.core.config_loader import DEFAULT_SENSOR_ID_CEILING
from logcompass.core.string_helpers import safe_decode, has_binary_content
from logcompass.data_processing.text_normalizer import normalize
from logcompass.data_processing.log_parser import LogParser
from logcompass.data_processing.identity import (
    extract_identity, build_destination_name, fallback_name,
    sanitize_mission_id, is_suspicious_sensor_id,
)
from logcompass.storage.file_store import OutputStore

log = logging.getLogger(__name__)

# Which files are logs of each family
_DISCOVERY_PATTERNS = {
    LogFamily.MS110: re.compile(r"^info.*\.log$"),
    LogFamily.DB110: re.compile(r"error.*\.log$", re.IGNORECASE),
}

MSG_SUCCESS = "Processed successfully"


# ---------------------------------------------------------------------------
# BatchResultSet
# ---------------------------------------------------------------------------

class BatchResultSet:
    """Ordered ``BatchResult`` rows of one batch run.

    Counts are always derived from the rows.  *notice* carries a
    human-readable note for runs that processed nothing.
    """

    def __init__(self, results=None, notice=None, output_dir=None):
        self.results = list(results or [])
        self.notice = notice
        self.output_dir = output_dir
        self.cancelled = False
        self.elapsed_seconds = 0.0

    def append(self, result):
        self.results.append(result)

    def by_status(self, status):
        return [r for r in self.results if r.status == status]

    def counts(self):
        return {
            "total": len(self.results),
            "success": len(self.by_status(BATCH_SUCCESS)),
            "warning": len(self.by_status(BATCH_WARNING)),
            "error": len(self.by_status(BATCH_ERROR)),
        }

    def unique_sensors(self):
        return sorted(set(r.sensor_id for r in self.results if r.sensor_id))

    def unique_missions(self):
        return sorted(set(r.mission_id for r in self.results if r.mission_id))

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    def __getitem__(self, index):
        return self.results[index]

    def __repr__(self):
        c = self.counts()
        return "BatchResultSet(total=%d, success=%d, warning=%d, error=%d)" % (
            c["total"], c["success"], c["warning"], c["error"],
        )


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def discovery_pattern(family):
    pattern = _DISCOVERY_PATTERNS.get(family)
    if pattern is None:
        raise ValidationError("cannot discover files for log family %r" % family)
    return pattern


def discover_files(source_dirs, family=LogFamily.DB110, recursive=True):
    """Return the log files of *family* under *source_dirs*.

    Directories are walked in the order given and their results
    concatenated; the same file reached from two roots is listed twice.
    Within a directory, names are sorted.  Missing directories are
    skipped with a warning.
    """
    pattern = discovery_pattern(family)
    found = []
    for source_dir in source_dirs:
        if not os.path.isdir(source_dir):
            log.warning("Source directory not found: %s", source_dir)
            continue
        if recursive:
            for dirpath, dirnames, filenames in os.walk(source_dir):
                dirnames.sort()
                found.extend(
                    os.path.join(dirpath, name) for name in sorted(filenames)
                    if pattern.search(name)
                )
        else:
            found.extend(
                os.path.join(source_dir, name) for name in sorted(os.listdir(source_dir))
                if pattern.search(name) and os.path.isfile(os.path.join(source_dir, name))
            )
    log.debug("Discovered %d %s file(s)", len(found), family)
    return found


# ---------------------------------------------------------------------------
# Per-file processing
# ---------------------------------------------------------------------------

def read_log_lines(path):
    """Decoded lines of *path*.  Raises ``ParseError`` for binary files."""
    with open(path, "rb") as f:
        raw = f.read()
    if has_binary_content(raw):
        raise ParseError("binary content in %s" % os.path.basename(path))
    return safe_decode(raw).splitlines()


def process_file(path, store, family=LogFamily.DB110, clean=True,
                 keep_original=False, sensor_id_ceiling=DEFAULT_SENSOR_ID_CEILING):
    """Process one log and return its ``BatchResult``.

    Faults propagate to the caller; ``run_batch`` turns them into ERROR
    rows.
    """
    lines = read_log_lines(path)
    if clean:
        lines = normalize(lines)

    bundle = LogParser(family=family).parse_lines(lines, path=path)
    identity = extract_identity(path, bundle)
    identity = Identity(
        sensor_id=identity.sensor_id,
        mission_id=sanitize_mission_id(identity.mission_id),
        epoch=identity.epoch,
    )

    warnings = []
    if is_suspicious_sensor_id(identity.sensor_id, sensor_id_ceiling):
        name = fallback_name(family, path)
        warnings.append("Suspicious sensor ID %s (above %d)" % (
            identity.sensor_id, sensor_id_ceiling))
    else:
        name = build_destination_name(family, identity, path)

    final_name, collided = store.claim(name)
    if collided:
        warnings.append("Destination %s already used in this batch; written as %s" % (
            name, final_name))

    if clean:
        destination = store.write_lines(final_name, lines)
    else:
        destination = store.copy_file(path, final_name)

    if keep_original:
        store.copy_original(path)

    if warnings:
        return BatchResult(path, BATCH_WARNING, "; ".join(warnings),
                           destination_path=destination, identity=identity)
    return BatchResult(path, BATCH_SUCCESS, MSG_SUCCESS,
                       destination_path=destination, identity=identity)


# ---------------------------------------------------------------------------
# run_batch
# ---------------------------------------------------------------------------

def run_batch(source_dirs, output_dir, recursive=True, clean=True,
              keep_original=False, progress=None, family=LogFamily.DB110,
              verbose=False, should_stop=None,
              sensor_id_ceiling=DEFAULT_SENSOR_ID_CEILING):
    """Process every *family* log under *source_dirs* into *output_dir*.

    *progress* is called as ``progress(0, total, "Starting...")`` and
    then ``progress(i, total, basename)`` as file *i* begins.
    *should_stop* is checked before each file; when it returns true the
    remaining files are left unprocessed and the set is marked
    ``cancelled``.
    """
    start = time.time()
    files = discover_files(source_dirs, family=family, recursive=recursive)
    total = len(files)

    if not files:
        notice = "No %s log files found in: %s" % (family, ", ".join(source_dirs) or "(none)")
        log.info(notice)
        return BatchResultSet(notice=notice, output_dir=output_dir)

    store = OutputStore(output_dir)
    store.ensure_directory()

    results = BatchResultSet(output_dir=store.root)

    if progress is not None:
        progress(0, total, "Starting...")

    for index, path in enumerate(files, 1):
        if should_stop is not None and should_stop():
            log.info("Batch cancelled after %d of %d files", index - 1, total)
            results.cancelled = True
            break

        if progress is not None:
            progress(index, total, os.path.basename(path))
        if verbose:
            log.info("[%d/%d] %s", index, total, path)

        try:
            result = process_file(
                path, store, family=family, clean=clean,
                keep_original=keep_original,
                sensor_id_ceiling=sensor_id_ceiling,
            )
        except Exception as e:
            log.warning("Failed to process %s: %s", path, e)
            result = BatchResult(path, BATCH_ERROR, describe_exception(e))
        results.append(result)

    results.elapsed_seconds = time.time() - start
    counts = results.counts()
    log.info("Batch finished: %d files, %d success, %d warning, %d error (%.2fs)",
             counts["total"], counts["success"], counts["warning"], counts["error"],
             results.elapsed_seconds)
    return results
