# lambda_sim/timeline.py
from dataclasses import dataclass

import numpy as np


@dataclass
class Timelines:
    """
    Global accumulators, indexed by global lambda index
    (proxy_index * lambdas_per_proxy + local_index):
    - reuse:       [lambda][hour] access counts (hits and placements)
    - memory:      [lambda] MiB placed while hour < mem_window
    - memory_hourly: [lambda][hour] MiB placed, no window
    """
    reuse: np.ndarray
    memory: np.ndarray
    memory_hourly: np.ndarray
    mem_window: int

    @classmethod
    def zeros(cls, n_lambdas: int, n_hours: int, mem_window: int):
        return cls(
            reuse=np.zeros((n_lambdas, n_hours), dtype=np.int64),
            memory=np.zeros(n_lambdas, dtype=np.int64),
            memory_hourly=np.zeros((n_lambdas, n_hours), dtype=np.int64),
            mem_window=mem_window,
        )

    def record_hit(self, lambda_idx: int, hour: int):
        self.reuse[lambda_idx, hour] += 1

    def record_placement(self, lambda_idx: int, hour: int, size_mib: int):
        # the first SET counts as an access too
        self.reuse[lambda_idx, hour] += 1
        self.memory_hourly[lambda_idx, hour] += size_mib
        if hour < self.mem_window:
            self.memory[lambda_idx] += size_mib
