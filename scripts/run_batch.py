#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Batch rename and clean pod logs.

Finds every MS110 info log or DB110 error log under the source
directories, writes a cleaned copy named
``<FAMILY>_<sensorID>_<epoch>_<missionID>.log`` into the output
directory, and writes the CSV/XLSX result table and a text report next
to them.

Usage:
    python3 scripts/run_batch.py [--config PATH] [--family MS110|DB110]
                                 [--output DIR] [--no-recursive] [--no-clean]
                                 [--keep-original] [--verbose] [SOURCE_DIR ...]

Exit status: 0 all files processed, 1 some files failed, 2 batch aborted.
"""

import os
import sys
import logging
import logging.config

from logcompass.core.config_loader import load_config, BatchOptions
from logcompass.core.exceptions import LogCompassError, OutputDirectoryError
from logcompass.core.types import LogFamily
from logcompass.automation.batch_runner import run_batch
from logcompass.reporting.results_export import export_results
from logcompass.reporting.report_generator import (
    generate_processing_report, render_report, summary_stats,
)

LOGGING_CONF = os.path.join(os.path.dirname(__file__), os.pardir, "config", "logging.conf")


def parse_args(argv):
    """Minimal argument parsing via sys.argv."""
    opts = {"config": None, "family": None, "output_dir": None, "recursive": None,
            "clean": None, "keep_original": None, "verbose": None, "source_dirs": []}
    i = 1
    while i < len(argv):
        arg = argv[i]
        if arg in ("--config", "--family", "--output") and i + 1 < len(argv):
            key = {"--config": "config", "--family": "family", "--output": "output_dir"}[arg]
            opts[key] = argv[i + 1]
            i += 2
            continue
        if arg == "--no-recursive":
            opts["recursive"] = False
        elif arg == "--no-clean":
            opts["clean"] = False
        elif arg == "--keep-original":
            opts["keep_original"] = True
        elif arg == "--verbose":
            opts["verbose"] = True
        elif arg.startswith("--"):
            print("Unknown option: %s" % arg)
        else:
            opts["source_dirs"].append(arg)
        i += 1
    return opts


def setup_logging(verbose):
    if os.path.isfile(LOGGING_CONF):
        logging.config.fileConfig(LOGGING_CONF, disable_existing_loggers=False)
    else:
        logging.basicConfig(level=logging.INFO)
    if verbose:
        logging.getLogger("logcompass").setLevel(logging.DEBUG)


def print_progress(current, total, name):
    if current == 0:
        print("Processing %d file(s)..." % total)
    else:
        print("  [%d/%d] %s" % (current, total, name))


def main(argv=None):
    args = parse_args(argv if argv is not None else sys.argv)
    config = load_config(args["config"])
    options = BatchOptions.from_config(
        config,
        source_dirs=args["source_dirs"] or None,
        output_dir=args["output_dir"],
        family=args["family"],
        recursive=args["recursive"],
        clean=args["clean"],
        keep_original=args["keep_original"],
        verbose=args["verbose"],
    )
    setup_logging(options.verbose)

    family = (options.family or LogFamily.DB110).upper()
    if not LogFamily.is_known(family):
        print("ERROR: unknown log family %r (expected MS110 or DB110)" % options.family)
        return 2
    if not options.source_dirs or not options.output_dir:
        print("Usage: %s [--output DIR] SOURCE_DIR [SOURCE_DIR ...]" % sys.argv[0])
        return 2

    try:
        results = run_batch(
            options.source_dirs, options.output_dir,
            recursive=options.recursive, clean=options.clean,
            keep_original=options.keep_original, progress=print_progress,
            family=family, verbose=options.verbose,
            sensor_id_ceiling=options.sensor_id_ceiling,
        )
    except OutputDirectoryError as e:
        print("BATCH ABORTED: %s" % e)
        return 2

    if results.notice:
        print(results.notice)
        return 0

    try:
        export_results(
            results, options.output_dir,
            csv_name=config.get("export", "csv_name", fallback="batch_results.csv"),
            xlsx_name=config.get("export", "xlsx_name", fallback="batch_results.xlsx"),
        )
        report = render_report(generate_processing_report(
            results, family=family, output_dir=options.output_dir))
        report_name = config.get("export", "report_name", fallback="processing_report.txt")
        with open(os.path.join(options.output_dir, report_name), "w", encoding="utf-8") as f:
            f.write(report)
    except (LogCompassError, OSError) as e:
        print("EXPORT ERROR: %s" % e)
        return 1

    stats = summary_stats(results)
    print("")
    print("Files: %d   Success: %d   Warning: %d   Error: %d   (%.1f%%)" % (
        stats["total"], stats["success"], stats["warning"], stats["failed"],
        stats["success_rate"]))
    if results.unique_sensors():
        print("Sensors: %s" % ", ".join(results.unique_sensors()))
    return 1 if stats["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
