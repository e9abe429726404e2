# lambda_sim/trace.py
import logging
import os
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd

from lambda_sim.config import Config
from lambda_sim.errors import ConfigError, TraceFormatError

logger = logging.getLogger(__name__)

CHUNK_ROWS = 100_000
INT64_LIMIT = 2.0 ** 63


@dataclass(frozen=True)
class Record:
    key: str
    size: int  # bytes
    timestamp: str
    hour: int
    min15: int


def _parse_uint(col: pd.Series) -> np.ndarray:
    """Numeric field -> float array; NaN marks rows that failed to parse or do not fit int64."""
    arr = pd.to_numeric(col, errors="coerce").to_numpy(dtype=float, copy=True)
    return np.where(np.isfinite(arr) & (arr >= 0) & (arr < INT64_LIMIT), arr, np.nan)


def _read_chunks(cfg: Config, path: str, chunksize: int):
    cols = sorted({cfg.key_col, cfg.size_col, cfg.ts_col, cfg.hour_col, cfg.min15_col})
    try:
        with pd.read_csv(
            path,
            header=None,
            usecols=cols,
            dtype=str,
            keep_default_na=False,
            skiprows=cfg.skip_rows,
            chunksize=chunksize,
        ) as reader:
            for chunk in reader:
                yield chunk
    except pd.errors.EmptyDataError:
        return
    except (pd.errors.ParserError, ValueError) as e:
        raise TraceFormatError(f"cannot parse trace {path}: {e}") from e


def read_trace(cfg: Config, path: str = None, chunksize: int = CHUNK_ROWS) -> Iterator[Record]:
    """
    Lazily yield Records from a headerless CSV trace, in file order.

    Fields are picked by column index (cfg.*_col). Size, hour and 15-min
    bucket are float literals truncated to unsigned ints. Any row with a
    missing or unparseable field raises TraceFormatError.
    """
    path = path or cfg.input_csv
    if not os.path.isfile(path):
        raise ConfigError(f"missing trace file {path}")

    n = 0
    for chunk in _read_chunks(cfg, path, chunksize):
        keys = chunk[cfg.key_col]
        sizes = _parse_uint(chunk[cfg.size_col])
        hours = _parse_uint(chunk[cfg.hour_col])
        mins = _parse_uint(chunk[cfg.min15_col])

        bad = keys.isna().to_numpy() | np.isnan(sizes) | np.isnan(hours) | np.isnan(mins)
        if bad.any():
            pos = int(np.argmax(bad))
            line = int(chunk.index[pos]) + cfg.skip_rows + 1
            row = chunk.iloc[pos].to_dict()
            raise TraceFormatError(f"malformed trace row at line {line}: {row}")

        stamps = chunk[cfg.ts_col].fillna("")
        for key, size, ts, hr, m15 in zip(keys, sizes.astype(np.int64), stamps,
                                          hours.astype(np.int64), mins.astype(np.int64)):
            yield Record(key=key, size=int(size), timestamp=ts, hour=int(hr), min15=int(m15))
        n += len(chunk)

    logger.info(f"read {n} records from {path}")
