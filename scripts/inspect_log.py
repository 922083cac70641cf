#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Print what Log Compass extracts from one or more pod logs: identity,
boot milestones, self-test results and component versions.  With
several files the fleet-mode decision for the selection is shown too.

Usage:
    python3 scripts/inspect_log.py [--family MS110|DB110] [--verbose] LOG [LOG ...]
"""

import os
import sys
import logging
import logging.config

from logcompass.core.exceptions import LogCompassError
from logcompass.data_processing.mode_detection import classify_mode
from logcompass.automation.inspector import inspect_log

LOGGING_CONF = os.path.join(os.path.dirname(__file__), os.pardir, "config", "logging.conf")


def main(argv=None):
    argv = argv if argv is not None else sys.argv
    family = None
    verbose = False
    paths = []
    i = 1
    while i < len(argv):
        if argv[i] == "--family" and i + 1 < len(argv):
            family = argv[i + 1].upper()
            i += 2
            continue
        if argv[i] == "--verbose":
            verbose = True
        else:
            paths.append(argv[i])
        i += 1

    if not paths:
        print("Usage: %s [--family MS110|DB110] [--verbose] LOG [LOG ...]" % argv[0])
        return 2

    if os.path.isfile(LOGGING_CONF):
        logging.config.fileConfig(LOGGING_CONF, disable_existing_loggers=False)
    if verbose:
        logging.getLogger("logcompass").setLevel(logging.DEBUG)

    failures = 0
    for path in paths:
        print("=" * 60)
        try:
            inspection = inspect_log(path, family=family)
        except (LogCompassError, OSError) as e:
            print("ERROR: %s: %s" % (path, e))
            failures += 1
            continue
        for line in inspection.summary_lines():
            print(line)

    if len(paths) > 1:
        mode = classify_mode(paths)
        print("=" * 60)
        print(mode.display_label)
        if mode.display_subtitle:
            print(mode.display_subtitle)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
