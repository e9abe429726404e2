# lambda_sim/report.py
import logging
import os

import numpy as np
import pandas as pd

from lambda_sim.errors import ConfigError

logger = logging.getLogger(__name__)

TIMELINE_SEP = ",  "


def _check_writable(path: str):
    d = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(d):
        raise ConfigError(f"output directory does not exist: {d}")


def write_timeline(tl: np.ndarray, path: str, n_hours: int):
    """One row per lambda, `n_hours` counts joined by ',  ', no header."""
    if not 1 <= n_hours <= tl.shape[1]:
        raise ConfigError(f"n_hours={n_hours} outside timeline width {tl.shape[1]}")
    _check_writable(path)
    try:
        np.savetxt(path, tl[:, :n_hours], fmt="%d", delimiter=TIMELINE_SEP)
    except OSError as e:
        raise ConfigError(f"cannot write {path}: {e}") from e
    logger.info(f"wrote {path}")


def write_mem_usage(mem: np.ndarray, path: str):
    """One MiB total per line, one line per lambda."""
    _check_writable(path)
    try:
        np.savetxt(path, mem, fmt="%d")
    except OSError as e:
        raise ConfigError(f"cannot write {path}: {e}") from e
    logger.info(f"wrote {path}")


def write_lambda_summary(df: pd.DataFrame, path: str):
    _check_writable(path)
    try:
        df.to_csv(path, index=False)
    except OSError as e:
        raise ConfigError(f"cannot write {path}: {e}") from e
    logger.info(f"wrote {path}")
