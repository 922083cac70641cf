# -*- coding: utf-8 -*-
"""
Single-file inspection.

Runs the whole extraction pipeline over one log and collects the
results in a ``LogInspection`` for display: identity, boot milestones,
self-test outcomes and, for DB110 logs, component versions and the
subassembly commands issued during SBIT.
"""

import os
import logging

from logcompass.core.types import LogFamily, TEST_FAIL, TEST_DEGRADED
from logcompass.core.exceptions import ClassificationError
from logcompass.data_processing.family_classifier import classify_file
from logcompass.data_processing.log_parser import LogParser
from logcompass.data_processing.identity import extract_identity
from logcompass.data_processing.milestones import (
    sequence_bundle, extract_component_versions, extract_subassembly_commands,
)
from logcompass.data_processing.self_test import extract_tests, summarize_tests

log = logging.getLogger(__name__)


class LogInspection:
    """Everything extracted from one log file."""

    def __init__(self, path, family, identity, milestones, tests,
                 component_versions=None, subassembly_commands=None,
                 parse_errors=None):
        self.path = path
        self.family = family
        self.identity = identity
        self.milestones = milestones
        self.tests = list(tests)
        self.component_versions = list(component_versions or [])
        self.subassembly_commands = list(subassembly_commands or [])
        self.parse_errors = list(parse_errors or [])

    @property
    def failed_tests(self):
        return [t for t in self.tests if t.status in (TEST_FAIL, TEST_DEGRADED)]

    def test_summary(self):
        return summarize_tests(self.tests)

    def summary_lines(self):
        """Plain-text rendering for the command line."""
        ident = self.identity
        lines = [
            "File:      %s" % self.path,
            "Family:    %s" % self.family,
            "Sensor:    %s" % (ident.sensor_id or "-"),
            "Mission:   %s" % (ident.mission_id or "-"),
            "Epoch:     %s" % (ident.epoch or "-"),
            "",
            "Milestones (%d):" % len(self.milestones),
        ]
        for m in self.milestones:
            lines.append("  %-24s %-26s %-14s %s" % (
                m.name, m.timestamp or "-", m.value or "", m.status))
        if self.milestones.elapsed_seconds is not None:
            lines.append("  Session elapsed: %.0f s" % self.milestones.elapsed_seconds)

        counts = self.test_summary()
        lines.append("")
        lines.append("Self-tests: %d total, %d PASS, %d FAIL, %d DEGR" % (
            counts["total"], counts["PASS"], counts["FAIL"], counts["DEGR"]))
        for t in self.failed_tests:
            lines.append("  %s %s TID=%s" % (t.status, t.name, t.test_id))

        if self.component_versions:
            lines.append("")
            lines.append("Components:")
            for v in self.component_versions:
                lines.append("  %-6s SW %s  HW %s" % (
                    v["component"], v["software_version"], v["hardware_version"]))
        if self.subassembly_commands:
            lines.append("")
            lines.append("SBIT subassemblies: %s" % ", ".join(
                c["subassembly"] for c in self.subassembly_commands))
        return lines


def inspect_log(path, family=None):
    """Inspect one log.

    Raises ``ClassificationError`` when the family is neither given nor
    detectable, ``ParseError`` for content that is not a pod log and
    ``OSError`` when the file cannot be read.
    """
    family = family or classify_file(path)
    if not LogFamily.is_known(family):
        raise ClassificationError(
            "Could not determine log type for %s; expected an MS110 info log "
            "or a DB110 error log" % os.path.basename(path),
            path=path,
        )

    parser = LogParser(family=family)
    bundle = parser.parse_file(path)
    log.debug("Inspecting %r", bundle)

    versions, commands = [], []
    if family == LogFamily.DB110:
        versions = extract_component_versions(bundle.entries)
        commands = extract_subassembly_commands(bundle.entries)

    return LogInspection(
        path=path,
        family=family,
        identity=extract_identity(path, bundle),
        milestones=sequence_bundle(bundle),
        tests=extract_tests(bundle.self_test),
        component_versions=versions,
        subassembly_commands=commands,
        parse_errors=parser.parse_errors(),
    )
