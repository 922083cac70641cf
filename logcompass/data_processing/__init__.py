# -*- coding: utf-8 -*-
"""
Data processing subsystem for Log Compass.

Turns raw pod logs into structured records: text normalisation, log
family detection, parsing into a ``LogBundle``, identity extraction,
boot milestone sequencing, self-test extraction and fleet-mode
classification of a file selection.
"""

from .text_normalizer import normalize, merge_continuation_lines, expand_contractions
from .family_classifier import classify, classify_file, validate_family_consistency
from .log_parser import LogParser, parse_timestamp
from .identity import extract_identity, build_destination_name, is_suspicious_sensor_id
from .milestones import sequence, sequence_bundle, boot_metrics
from .self_test import extract_tests, summarize_tests
from .mode_detection import classify_mode, mode_config
