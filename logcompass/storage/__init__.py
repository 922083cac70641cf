# -*- coding: utf-8 -*-
"""
Storage subsystem for Log Compass.

Owns the batch output directory: renamed log files, preserved originals
and collision-free destination names within a run.
"""

from .file_store import OutputStore, ORIGINAL_PREFIX
