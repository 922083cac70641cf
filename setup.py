#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Log Compass -- setuptools setup script.

Install:
    python3 setup.py install
    OR
    pip install .

With the test tools:
    pip install -e .[test]
"""

from setuptools import setup

# Read requirements from requirements.txt
def read_requirements():
    with open('requirements.txt') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name="logcompass",
    version="1.3.0",
    description="Normalisation, renaming and boot analysis of MS110/DB110 sensor pod logs",
    license="Proprietary",
    platforms=["linux"],
    python_requires='>=3.8',
    packages=[
        "logcompass",
        "logcompass.core",
        "logcompass.data_processing",
        "logcompass.storage",
        "logcompass.reporting",
        "logcompass.automation",
    ],
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7"],
    },
    scripts=[
        "scripts/run_batch.py",
        "scripts/inspect_log.py",
    ],
    data_files=[
        ("config", ["config/logcompass.ini", "config/logging.conf"]),
    ],
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: Other/Proprietary License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: System :: Logging',
    ],
)
