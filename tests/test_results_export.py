# -*- coding: utf-8 -*-
"""
Tests for logcompass.reporting.results_export
"""

import csv
import os

import pytest
from openpyxl import load_workbook

from logcompass.core.types import BatchResult, Identity, BATCH_SUCCESS, BATCH_ERROR
from logcompass.core.exceptions import ExportError
from logcompass.reporting.results_export import (
    RESULT_COLUMNS, results_to_rows, write_results_csv, write_results_xlsx, export_results,
)


@pytest.fixture
def results():
    return [
        BatchResult("/src/errorlog_a.log", BATCH_SUCCESS, "Processed successfully",
                    destination_path="/out/DB110_42_20240821_M.log",
                    identity=Identity("42", "M", "20240821")),
        BatchResult("/src/errorlog_c.log", BATCH_ERROR, "binary content, truncated"),
    ]


class TestRows:

    def test_columns(self, results):
        rows = results_to_rows(results)
        assert list(rows[0].keys()) == RESULT_COLUMNS
        assert rows[0]["sensor_id"] == "42"
        assert rows[1]["final_path"] == ""
        assert rows[1]["sensor_id"] == ""


class TestCsv:

    def test_round_trip_through_reader(self, results, tmp_path):
        path = write_results_csv(results, str(tmp_path / "r.csv"))
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["mission_id"] == "M"
        assert rows[1]["message"] == "binary content, truncated"
        assert rows[1]["status"] == "ERROR"

    def test_unwritable(self, results, tmp_path):
        with pytest.raises(ExportError):
            write_results_csv(results, str(tmp_path / "missing" / "r.csv"))


class TestXlsx:

    def test_sheet_contents(self, results, tmp_path):
        path = write_results_xlsx(results, str(tmp_path / "r.xlsx"))
        ws = load_workbook(path).active
        values = list(ws.iter_rows(values_only=True))
        assert list(values[0]) == RESULT_COLUMNS
        assert values[1][2] == "42"
        assert values[2][5] == "ERROR"
        assert ws.title == "Batch Results"

    def test_empty_results(self, tmp_path):
        path = write_results_xlsx([], str(tmp_path / "r.xlsx"))
        assert load_workbook(path).active.max_row == 1


def test_export_results(results, tmp_path):
    paths = export_results(results, str(tmp_path), xlsx_name=None)
    assert [os.path.basename(p) for p in paths] == ["batch_results.csv"]
