# -*- coding: utf-8 -*-
"""
Shared test fixtures and helpers for the Log Compass test suite.

The sample logs below are trimmed copies of real pod logs with the
serial numbers changed.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), os.pardir))


DB110_HEADER = [
    "Sensor: 42",
    "Mission Plan: MISSION A",
    "FlightDate: 2024-08-21",
]

DB110_BODY = [
    "2024-08-21 07:38:07.125 (2024-08-21 11:38:07.125) 'TR_Low Starting up the RSM' controller.c 906 startupRsm",
    "2024-08-21 07:38:08.000 'TSY|122 1724225887' maint.c 10 CS_addMaintLogEnt",
    "2024-08-21 07:38:08.500 'STU|175' maint.c 10 CS_addMaintLogEnt",
    "2024-08-21 07:38:09.000 'Established communications with the SCU' scu.c 55 scuComms",
    "2024-08-21 07:38:09.500 'PPS S/N 0042, Software Rev v2r7' scu.c 60 scuPpduStartup",
    "2024-08-21 07:38:10.000 'DTM is powered up and disk mounted' dtm.c 12 dtmPower",
    "2024-08-21 07:38:11.000 'INS is powered up' ins.c 12 insPower",
    "2024-08-21 07:38:11.500 'TS480 SW Ver 3.1.4, Svn 2210' ts480.c 14 tsVersion",
    "2024-08-21 07:38:12.000 'SSR SystemState changed from TUFSRV_NOTREADY to TUFSRV_READY' ssr.c 80 ssrState",
    "2024-08-21 07:38:13.000 'bitRunSbit: running SBIT on \"Pod\", run level = \"Sru\"' bit.c 200 bitRunSbit",
    "2024-08-21 07:38:13.500 'commanding \"run\" to subassembly \"EOC\"' bit.c 205 bitRunCmdNode",
    "2024-08-21 07:38:14.000 'BIT result: node name = GPS, TID = 0x0101, BIT status = PASS' bit.c 210 bitReport",
    "2024-08-21 07:38:15.000 'BIT result: node name = IMU, TID = 0x0102, BIT status = FAIL' bit.c 210 bitReport",
    "2024-08-21 07:38:16.000 'BIT result: node name = INS, TID = 0x0103, BIT status = DEGR' bit.c 210 bitReport",
    "2024-08-21 07:38:17.000 'bitInProg=0' bit.c 220 bitDone",
    "2024-08-21 07:38:18.000 'MLV|1|MwirFpa.Cooler|IR Cooler Temp. in degK|77.50,ok' fpa.c 30 fpaTemp",
    "2024-08-21 07:38:19.000 'State changing event = READY' state.c 40 stateMachine",
    "2024-08-21 07:38:20.000 'SHD|300' maint.c 10 CS_addMaintLogEnt",
]

MS110_HEADER = [
    "MS110 Info Log",
    "Sensor ID: 7",
    "Mission ID: M-100",
]

MS110_BODY = [
    "2025-01-28 10:15:00.000 INFO [System/boot] ABSW version 4.2.1 detected",
    "2025-01-28 10:15:02.123 INFO [Sensor/sensorInit] Sensor initialization started",
    "2025-01-28 10:15:04.000 INFO [Mission/loadPlan] Mission plan loaded",
    "2025-01-28 10:15:05.000 INFO [EO/eoFpa] EO focal plane ready",
    "2025-01-28 10:15:06.000 INFO [IR/irFpa] IRFPA cooled, IR ready",
    "2025-01-28 10:15:07.000 INFO [System/state] System ready for mission",
    "2025-01-28 10:15:08.000 INFO [Mission/start] Mission start commanded",
    "2025-01-28 10:15:09.000 INFO [BIT/bitRun] running SBIT",
    "2025-01-28 10:15:10.000 INFO [BIT/bitReport] node name = GPS, TID = 1, status = PASS",
    "2025-01-28 10:15:11.000 INFO [BIT/bitReport] node name = INS, TID = 2, status = PASS",
    "2025-01-28 10:15:12.000 INFO [BIT/bitReport] node name = EOC, TID = 3, status = FAIL",
    "2025-01-28 10:15:13.000 INFO [BIT/bitReport] SHA Validation Results: 0",
    "2025-01-28 10:15:14.000 INFO [BIT/bitDone] SBIT complete",
]


def db110_lines(sensor="42", mission="MISSION A", body=None):
    header = ["Sensor: %s" % sensor, "Mission Plan: %s" % mission, DB110_HEADER[2]]
    return header + list(body if body is not None else DB110_BODY)


def ms110_lines():
    return MS110_HEADER + MS110_BODY


def write_log(path, lines):
    """Write *lines* to *path* (creating parent dirs) and return it as str."""
    path = str(path)
    parent = os.path.dirname(path)
    if parent and not os.path.isdir(parent):
        os.makedirs(parent)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    return path


def write_corrupt_log(path):
    path = str(path)
    with open(path, "wb") as f:
        f.write(b"\x00\x00\xff\xfe garbage \x00")
    return path


@pytest.fixture
def db110_log(tmp_path):
    """A healthy DB110 error log named ``errorlog.log``."""
    return write_log(tmp_path / "errorlog.log", db110_lines())


@pytest.fixture
def ms110_log(tmp_path):
    """A healthy MS110 info log named ``info.log``."""
    return write_log(tmp_path / "info.log", ms110_lines())


@pytest.fixture
def output_dir(tmp_path):
    return str(tmp_path / "out")
