# -*- coding: utf-8 -*-
"""
Export of batch results as CSV or XLSX.

One row per processed file, columns in ``RESULT_COLUMNS`` order.
Missing values are written as empty cells.
"""

import os
import csv
import logging

from openpyxl import Workbook
from openpyxl.styles import Font

from logcompass.core.exceptions import ExportError

log = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "original_path", "final_path", "sensor_id", "epoch",
    "mission_id", "status", "message",
]

DEFAULT_CSV_NAME = "batch_results.csv"
DEFAULT_XLSX_NAME = "batch_results.xlsx"
SHEET_TITLE = "Batch Results"


def results_to_rows(results):
    """``BatchResult``s as dicts keyed by ``RESULT_COLUMNS``."""
    rows = []
    for r in results:
        rows.append({
            "original_path": r.source_path,
            "final_path": r.destination_path or "",
            "sensor_id": r.sensor_id or "",
            "epoch": r.epoch or "",
            "mission_id": r.mission_id or "",
            "status": r.status,
            "message": r.message or "",
        })
    return rows


def write_results_csv(results, path, encoding="utf-8"):
    """Write *results* to a CSV file at *path* and return the path."""
    rows = results_to_rows(results)
    try:
        with open(path, "w", encoding=encoding, newline="") as f:
            writer = csv.DictWriter(f, fieldnames=RESULT_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
    except OSError as e:
        raise ExportError("cannot write CSV results to %s: %s" % (path, e))
    log.info("Wrote %d result rows to %s", len(rows), path)
    return path


def write_results_xlsx(results, path):
    """Write *results* to an XLSX workbook at *path* and return the path."""
    rows = results_to_rows(results)
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(RESULT_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append([row[name] for name in RESULT_COLUMNS])
    ws.freeze_panes = "A2"

    for index, name in enumerate(RESULT_COLUMNS, 1):
        width = max([len(name)] + [len(str(row[name])) for row in rows])
        ws.column_dimensions[ws.cell(row=1, column=index).column_letter].width = min(width + 2, 80)

    try:
        wb.save(path)
    except OSError as e:
        raise ExportError("cannot write XLSX results to %s: %s" % (path, e))
    log.info("Wrote %d result rows to %s", len(rows), path)
    return path


def export_results(results, output_dir, csv_name=DEFAULT_CSV_NAME,
                   xlsx_name=DEFAULT_XLSX_NAME):
    """Write both exports into *output_dir*; return their paths."""
    paths = []
    if csv_name:
        paths.append(write_results_csv(results, os.path.join(output_dir, csv_name)))
    if xlsx_name:
        paths.append(write_results_xlsx(results, os.path.join(output_dir, xlsx_name)))
    return paths
