# -*- coding: utf-8 -*-
"""
Core data types, exceptions and configuration for Log Compass.
"""

from .types import (
    LogFamily, LogRecord, LogBundle, Identity, Milestone, MilestoneSequence,
    TestResult, BatchResult, AnalysisMode,
)
from .exceptions import (
    LogCompassError, DataError, ParseError, StorageError, OutputDirectoryError,
)
from .config_loader import load_config, BatchOptions
