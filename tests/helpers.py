"""Builders for trace rows and records."""

from lambda_sim.config import MIB
from lambda_sim.trace import Record

N_COLS = 15


def trace_row(key, size, hour, min15=0, ts="2017-06-01 00:00:00"):
    row = ["x"] * N_COLS
    row[6] = str(key)
    row[9] = str(size)
    row[11] = ts
    row[12] = str(hour)
    row[14] = str(min15)
    return row


def rec(key, size_mib, hour, min15=0):
    return Record(key=key, size=size_mib * MIB, timestamp="", hour=hour, min15=min15)
