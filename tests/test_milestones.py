# -*- coding: utf-8 -*-
"""
Tests for logcompass.data_processing.milestones
"""

import datetime

import pytest

from logcompass.core.types import LogFamily, LogRecord, STATUS_PASS, STATUS_FAIL
from logcompass.core.exceptions import ValidationError
from logcompass.data_processing.log_parser import LogParser
from logcompass.data_processing.milestones import (
    sequence, sequence_bundle, boot_metrics, catalogue_for, derive_status,
    extract_component_versions, extract_subassembly_commands,
    DB110_CATALOGUE, MS110_CATALOGUE, RULE_POSITIVE, RULE_ZERO, RULE_PASS,
)

from conftest import DB110_BODY, db110_lines, write_log

T0 = datetime.datetime(2024, 8, 21, 7, 0, 0)


def _row(offset, text, function="", component=""):
    return LogRecord(T0 + datetime.timedelta(seconds=offset), text,
                     function=function, component=component)


# ---------------------------------------------------------------------------
# Catalogues
# ---------------------------------------------------------------------------

class TestCatalogues:

    def test_db110_names(self):
        assert DB110_CATALOGUE.names() == [
            "RSM Startup", "Time Sync (TSY)", "SCU Comms", "DTM Power Up",
            "INS Power Up", "SSR Power Up", "SBIT Start", "IRFPA Temp Acq",
            "SBIT Complete", "System Ready",
        ]

    def test_ms110_has_ready_milestone(self):
        assert "System Ready" in MS110_CATALOGUE.names()
        assert len(MS110_CATALOGUE) == 10

    def test_unknown_family(self):
        with pytest.raises(ValidationError):
            catalogue_for(LogFamily.UNKNOWN)


class TestDeriveStatus:

    def test_rules(self):
        assert derive_status(RULE_PASS, None, []) == STATUS_PASS
        assert derive_status(RULE_POSITIVE, 77.5, []) == STATUS_PASS
        assert derive_status(RULE_POSITIVE, 0.0, []) == STATUS_FAIL
        assert derive_status(RULE_ZERO, 0, []) == STATUS_PASS
        assert derive_status(RULE_ZERO, 3, []) == STATUS_FAIL

    def test_unreadable_measurement_fails(self):
        assert derive_status(RULE_POSITIVE, None, []) == STATUS_FAIL
        assert derive_status(RULE_ZERO, None, []) == STATUS_FAIL


# ---------------------------------------------------------------------------
# DB110 sequencing
# ---------------------------------------------------------------------------

class TestDB110Sequence:

    def test_full_boot(self, db110_log):
        seq = sequence_bundle(LogParser().parse_file(db110_log))
        assert seq.log_file == "errorlog.log"
        assert seq.names() == DB110_CATALOGUE.names()
        assert set(seq.statuses()) == {STATUS_PASS}

    def test_values(self, db110_log):
        seq = sequence_bundle(LogParser().parse_file(db110_log))
        assert seq.get("SBIT Start").value == "Sru Level"
        assert seq.get("IRFPA Temp Acq").value == "77.50 K"
        assert seq.get("SBIT Complete").value == "3 tests"
        assert seq.get("SBIT Complete").timestamp == datetime.datetime(2024, 8, 21, 7, 38, 16)
        assert seq.get("Time Sync (TSY)").timestamp == datetime.datetime(2024, 8, 21, 7, 38, 8)

    def test_timing(self, db110_log):
        seq = sequence_bundle(LogParser().parse_file(db110_log))
        assert seq.first_power_count == 175
        assert seq.last_power_count == 300
        assert seq.elapsed_seconds == 125

    def test_missing_shutdown_uses_last_entry(self, tmp_path):
        body = [line for line in DB110_BODY if "SHD|" not in line]
        bundle = LogParser().parse_file(write_log(tmp_path / "errorlog.log", db110_lines(body=body)))
        seq = sequence_bundle(bundle)
        # STU at 07:38:08.5, last entry at 07:38:19
        assert seq.last_power_count == pytest.approx(10.5)
        assert seq.elapsed_seconds == pytest.approx(10.5 - 175)

    def test_cold_cooler_fails_ready(self, tmp_path):
        body = [line.replace("77.50", "0.00") for line in DB110_BODY]
        bundle = LogParser().parse_file(write_log(tmp_path / "errorlog.log", db110_lines(body=body)))
        seq = sequence_bundle(bundle)
        assert seq.get("IRFPA Temp Acq").status == STATUS_FAIL
        assert seq.get("System Ready").status == STATUS_FAIL

    def test_absent_markers_are_skipped(self):
        primary = [
            _row(0, "TR_Low Starting up the RSM", function="startupRsm"),
            _row(5, "State changing event = READY"),
        ]
        seq = sequence("x.log", primary, family=LogFamily.DB110)
        assert seq.names() == ["RSM Startup", "System Ready"]
        assert seq.get("System Ready").status == STATUS_PASS
        assert seq.elapsed_seconds is None

    def test_function_filter(self):
        primary = [_row(0, "TR_Low Starting up the RSM", function="other")]
        assert len(sequence("x.log", primary, family=LogFamily.DB110)) == 0

    def test_sbit_complete_fallback(self):
        primary = [_row(0, "bitInProg=0"), _row(1, "bitInProg=0")]
        seq = sequence("x.log", primary, tests=[], family=LogFamily.DB110)
        assert seq.get("SBIT Complete").timestamp == T0

    def test_ready_alone_is_pass(self):
        seq = sequence("x.log", [_row(0, "State changing event = READY")])
        assert seq.statuses() == [STATUS_PASS]

    def test_ready_pass_implies_all_prior_pass(self, db110_log, tmp_path):
        bodies = [
            DB110_BODY,
            [line.replace("77.50", "0.00") for line in DB110_BODY],
            [line.replace("77.50,", "n/a,") for line in DB110_BODY],
        ]
        for index, body in enumerate(bodies):
            path = write_log(tmp_path / ("errorlog%d.log" % index), db110_lines(body=body))
            seq = sequence_bundle(LogParser().parse_file(path))
            names = seq.names()
            ready = seq.get("System Ready")
            prior = seq.milestones[:names.index("System Ready")]
            if ready.status == STATUS_PASS:
                assert all(m.status == STATUS_PASS for m in prior)
            else:
                assert any(m.status != STATUS_PASS for m in prior)

    def test_unreadable_temperature_fails(self, tmp_path):
        body = [line.replace("77.50,", "n/a,") for line in DB110_BODY]
        bundle = LogParser().parse_file(write_log(tmp_path / "errorlog.log", db110_lines(body=body)))
        seq = sequence_bundle(bundle)
        assert seq.get("IRFPA Temp Acq").status == STATUS_FAIL
        assert seq.get("IRFPA Temp Acq").value == "N/A"
        assert seq.get("System Ready").status == STATUS_FAIL


# ---------------------------------------------------------------------------
# MS110 sequencing
# ---------------------------------------------------------------------------

class TestMS110Sequence:

    def test_full_boot(self, ms110_log):
        seq = sequence_bundle(LogParser().parse_file(ms110_log))
        assert seq.names() == MS110_CATALOGUE.names()
        assert seq.get("System Ready").status == STATUS_PASS
        assert seq.first_power_count is None

    def test_values(self, ms110_log):
        seq = sequence_bundle(LogParser().parse_file(ms110_log))
        assert seq.get("SBIT Start").value == "2 tests"
        assert seq.get("SBIT Complete").value == "2 tests"
        assert seq.get("Validation Errors").value == "0 errors"
        assert seq.get("Validation Errors").status == STATUS_PASS

    def test_validation_errors_fail(self):
        tests = [_row(0, "SHA Validation Results: 4")]
        seq = sequence("info.log", [_row(0, "boot")], tests=tests, family=LogFamily.MS110)
        assert seq.get("Validation Errors").status == STATUS_FAIL
        assert seq.get("Validation Errors").value == "4 errors"

    def test_sbit_times_span_the_section(self, ms110_log):
        seq = sequence_bundle(LogParser().parse_file(ms110_log))
        assert seq.get("SBIT Start").timestamp == datetime.datetime(2025, 1, 28, 10, 15, 9)
        assert seq.get("SBIT Complete").timestamp == datetime.datetime(2025, 1, 28, 10, 15, 14)

    def test_sbit_counts_tests_whatever_their_status(self):
        tests = [
            _row(0, "running SBIT"),
            _row(1, "node name = GPS, TID = 1, status = PASS"),
            _row(2, "node name = CAM, TID = 4, status = SKIPPED"),
            _row(3, "SBIT complete"),
        ]
        seq = sequence("info.log", [_row(0, "boot")], tests=tests, family=LogFamily.MS110)
        assert seq.get("SBIT Start").value == "2 tests"
        assert seq.get("SBIT Start").timestamp == T0
        assert seq.get("SBIT Complete").timestamp == T0 + datetime.timedelta(seconds=3)

    def test_unreadable_validation_count_left_out(self):
        tests = [_row(0, "SHA Validation Results: pending")]
        seq = sequence("info.log", [_row(0, "boot")], tests=tests, family=LogFamily.MS110)
        assert "Validation Errors" not in seq.names()

    def test_fallback_when_nothing_found(self):
        seq = sequence("info.log", [_row(0, "boot"), _row(1, "idle")], family=LogFamily.MS110)
        assert seq.names() == ["Log File Parsed"]
        assert seq.milestones[0].timestamp == T0

    def test_only_ins_tests_leaves_sbit_out(self):
        tests = [_row(0, "node name = INS, TID = 2, status = PASS")]
        seq = sequence("info.log", [_row(0, "boot")], tests=tests, family=LogFamily.MS110)
        assert "SBIT Start" not in seq.names()


# ---------------------------------------------------------------------------
# Boot metrics and DB110 extras
# ---------------------------------------------------------------------------

class TestBootMetrics:

    def test_duration(self, db110_log):
        seq = sequence_bundle(LogParser().parse_file(db110_log))
        metrics = boot_metrics([seq])
        assert len(metrics) == 1
        # RSM Startup 07:38:07.125 -> System Ready 07:38:19
        assert metrics[0]["total_boot_seconds"] == pytest.approx(11.875)
        assert metrics[0]["completed"] == 10
        assert metrics[0]["failed"] == 0

    def test_empty_sequence_skipped(self):
        assert boot_metrics([sequence("x.log", [_row(0, "nothing")])]) == []


class TestComponentVersions:

    def test_versions(self, db110_log):
        entries = LogParser().parse_file(db110_log).entries
        versions = dict((v["component"], v) for v in extract_component_versions(entries))
        assert versions["PPS"]["software_version"] == "v2r7"
        assert versions["PPS"]["hardware_version"] == "0042"
        assert versions["TS480"]["software_version"] == "3.1.4"
        assert versions["TS480"]["hardware_version"] == "Svn 2210"

    def test_no_versions(self):
        assert extract_component_versions([_row(0, "boot")]) == []

    def test_subassembly_commands(self, db110_log):
        entries = LogParser().parse_file(db110_log).entries
        commands = extract_subassembly_commands(entries)
        assert [c["subassembly"] for c in commands] == ["EOC"]
