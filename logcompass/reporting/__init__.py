# -*- coding: utf-8 -*-
"""
Reporting subsystem for Log Compass.

Batch result export (CSV and XLSX) and plain-text processing reports.
"""

from .results_export import write_results_csv, write_results_xlsx, results_to_rows
from .report_generator import (
    ReportSection, summary_stats, generate_processing_report, render_report,
    format_file_size,
)
