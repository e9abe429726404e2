# lambda_sim/placement.py
import time
from typing import List, Optional

import numpy as np

from lambda_sim.errors import ConfigError


class ShardPlacer:
    """
    Memoryless random shard placement inside one proxy's lambda pool.

    Every call draws a random permutation of the pool and keeps the first
    `n_shards` indices, so a key's shards always land on distinct lambdas.
    The generator is seeded once per run; pass `rng` (or `seed`) to make
    placement reproducible.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        if rng is None:
            rng = np.random.default_rng(time.time_ns() if seed is None else seed)
        self.rng = rng

    def select(self, pool_size: int, n_shards: int) -> List[int]:
        if n_shards < 1:
            raise ConfigError(f"n_shards must be >= 1, got {n_shards}")
        if n_shards > pool_size:
            raise ConfigError(f"n_shards={n_shards} cannot exceed pool_size={pool_size}")
        return [int(i) for i in self.rng.permutation(pool_size)[:n_shards]]

    def spawn(self, n: int) -> List["ShardPlacer"]:
        """Independent child placers, one per proxy partition."""
        return [ShardPlacer(rng=child) for child in self.rng.spawn(n)]
