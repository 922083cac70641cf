# -*- coding: utf-8 -*-
"""
Automation subsystem for Log Compass.

Batch processing of log directories and single-file inspection.
"""

from .batch_runner import run_batch, discover_files, BatchResultSet
from .inspector import inspect_log, LogInspection
