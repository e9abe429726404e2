"""Tests for the output artifacts."""

import numpy as np
import pandas as pd
import pytest

from lambda_sim.errors import ConfigError
from lambda_sim.report import write_lambda_summary, write_mem_usage, write_timeline


class TestTimeline:

    def test_format(self, tmp_path):
        path = tmp_path / "reuse.csv"
        write_timeline(np.array([[1, 2, 3], [0, 0, 5]]), str(path), 3)
        assert path.read_text() == "1,  2,  3\n0,  0,  5\n"

    def test_width_is_n_hours(self, tmp_path):
        path = tmp_path / "reuse.csv"
        write_timeline(np.array([[1, 2, 3], [4, 5, 6]]), str(path), 2)
        assert path.read_text() == "1,  2\n4,  5\n"

    def test_single_hour(self, tmp_path):
        path = tmp_path / "reuse.csv"
        write_timeline(np.array([[7], [8]]), str(path), 1)
        assert path.read_text() == "7\n8\n"

    def test_bad_width(self, tmp_path):
        with pytest.raises(ConfigError):
            write_timeline(np.zeros((2, 3), dtype=int), str(tmp_path / "x.csv"), 4)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigError):
            write_timeline(np.zeros((2, 3), dtype=int), str(tmp_path / "no" / "x.csv"), 3)


class TestMemUsage:

    def test_one_value_per_line(self, tmp_path):
        path = tmp_path / "mem.csv"
        write_mem_usage(np.array([300, 0, 12]), str(path))
        assert path.read_text() == "300\n0\n12\n"

    def test_path_is_directory(self, tmp_path):
        with pytest.raises(ConfigError):
            write_mem_usage(np.array([1]), str(tmp_path))


class TestSummary:

    def test_roundtrip(self, tmp_path):
        path = tmp_path / "summary.csv"
        df = pd.DataFrame({"lambda_idx": [0, 1], "accesses": [3, 4]})
        write_lambda_summary(df, str(path))
        assert pd.read_csv(path).equals(df)
