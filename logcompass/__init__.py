# -*- coding: utf-8 -*-
"""
Log Compass -- normalisation and structured extraction for MS110 and
DB110 sensor pod diagnostic logs.
"""

__version__ = "1.3.0"
