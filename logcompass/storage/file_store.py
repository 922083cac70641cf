# -*- coding: utf-8 -*-
"""
File-based output storage for batch runs.

One ``OutputStore`` owns the output directory of one batch.  It creates
the directory (once, idempotently), writes the renamed log files and
keeps track of the destination names handed out during the run, so
that two source files resolving to the same name never overwrite each
other: the second one gets ``<stem>-2<ext>``, the third ``-3`` and so
on.  Files left by earlier runs are not claimed and are overwritten,
which keeps reruns over the same sources idempotent.
"""

import os
import shutil
import logging

from logcompass.core.exceptions import StorageError, OutputDirectoryError

log = logging.getLogger(__name__)

DIR_PERMISSIONS = 0o755
FILE_PERMISSIONS = 0o644

ORIGINAL_PREFIX = "original_"


def suffixed_name(name, index):
    """``DB110_42_20240821.log``, 2 -> ``DB110_42_20240821-2.log``"""
    stem, ext = os.path.splitext(name)
    return "%s-%d%s" % (stem, index, ext)


class OutputStore:
    """Writes processed logs into a single output directory."""

    def __init__(self, root):
        self._root = os.path.abspath(root)
        self._claimed = set()
        self._ready = False

    @property
    def root(self):
        return self._root

    def ensure_directory(self):
        """Create the output directory if needed and check it is writable.

        Raises ``OutputDirectoryError`` when it cannot be used.
        """
        if self._ready:
            return
        try:
            if not os.path.isdir(self._root):
                os.makedirs(self._root, DIR_PERMISSIONS)
                log.info("Created output directory: %s", self._root)
        except OSError as e:
            raise OutputDirectoryError(
                "cannot create output directory %s: %s" % (self._root, e),
                directory=self._root,
            )
        if not os.access(self._root, os.W_OK):
            raise OutputDirectoryError(
                "output directory %s is not writable" % self._root,
                directory=self._root,
            )
        self._ready = True

    def resolve(self, name):
        return os.path.join(self._root, name)

    # ---------------------------------------------------------------
    # Destination names
    # ---------------------------------------------------------------

    def claim(self, name):
        """Reserve *name* for this run.

        Returns ``(final_name, collided)``; *collided* is true when the
        name was already taken by an earlier file of the same run.
        """
        if name not in self._claimed:
            self._claimed.add(name)
            return name, False

        index = 2
        candidate = suffixed_name(name, index)
        while candidate in self._claimed:
            index += 1
            candidate = suffixed_name(name, index)
        self._claimed.add(candidate)
        log.warning("Destination %s already written in this run; using %s", name, candidate)
        return candidate, True

    def claimed_names(self):
        return sorted(self._claimed)

    # ---------------------------------------------------------------
    # Writers
    # ---------------------------------------------------------------

    def write_lines(self, name, lines, encoding="utf-8"):
        """Write *lines* as a text file and return its path."""
        self.ensure_directory()
        dest = self.resolve(name)
        try:
            with open(dest, "w", encoding=encoding, newline="\n") as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
            os.chmod(dest, FILE_PERMISSIONS)
        except OSError as e:
            raise StorageError("failed to write %s: %s" % (name, e))
        log.debug("Wrote %s (%d bytes)", dest, os.path.getsize(dest))
        return dest

    def copy_file(self, source_path, name):
        """Copy *source_path* byte-for-byte to *name* and return the path."""
        self.ensure_directory()
        dest = self.resolve(name)
        try:
            shutil.copyfile(source_path, dest)
            os.chmod(dest, FILE_PERMISSIONS)
        except OSError as e:
            raise StorageError("failed to copy %s to %s: %s" % (source_path, name, e))
        log.debug("Copied %s -> %s", source_path, dest)
        return dest

    def copy_original(self, source_path):
        """Keep the untouched source as ``original_<basename>``."""
        name, _ = self.claim(ORIGINAL_PREFIX + os.path.basename(source_path))
        return self.copy_file(source_path, name)

    # ---------------------------------------------------------------
    # Listing
    # ---------------------------------------------------------------

    def list_files(self):
        if not os.path.isdir(self._root):
            return []
        return sorted(
            f for f in os.listdir(self._root)
            if os.path.isfile(os.path.join(self._root, f))
        )

    def storage_summary(self):
        """Return ``(file_count, total_bytes)`` for the output directory."""
        files = self.list_files()
        total = sum(os.path.getsize(self.resolve(f)) for f in files)
        return len(files), total
