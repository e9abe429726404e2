# lambda_sim/config.py
from dataclasses import dataclass
from typing import Optional

from lambda_sim.errors import ConfigError

MIB = 1 << 20


@dataclass
class Config:
    seed: Optional[int] = None  # None -> seeded from wall clock

    # io
    input_csv: str = "input.csv"
    reuse_output_csv: str = "output.csv"
    mem_output_csv: str = "output2.csv"

    # topology
    n_proxies: int = 2
    lambdas_per_proxy: int = 32

    # RS erasure coding
    data_shards: int = 10
    parity_shards: int = 2

    # timeline
    n_hours: int = 1800
    mem_window_hours: int = 100  # memory snapshot only counts hour < window

    # consistent hash ring
    partition_count: int = 271
    replication_factor: int = 20
    load: float = 1.25

    # trace layout (column index, no header)
    key_col: int = 6
    size_col: int = 9
    ts_col: int = 11
    hour_col: int = 12
    min15_col: int = 14
    skip_rows: int = 0

    @property
    def n_shards(self) -> int:
        return self.data_shards + self.parity_shards

    @property
    def n_lambdas(self) -> int:
        return self.n_proxies * self.lambdas_per_proxy

    def validate(self):
        if self.n_proxies < 1:
            raise ConfigError("n_proxies must be >= 1 (hash ring has no members)")
        if self.lambdas_per_proxy < 1:
            raise ConfigError("lambdas_per_proxy must be >= 1")
        if self.data_shards < 1:
            raise ConfigError(f"data_shards must be >= 1, got {self.data_shards}")
        if self.parity_shards < 0:
            raise ConfigError(f"parity_shards must be >= 0, got {self.parity_shards}")
        if self.n_shards > self.lambdas_per_proxy:
            raise ConfigError(
                f"data_shards+parity_shards={self.n_shards} cannot exceed "
                f"lambdas_per_proxy={self.lambdas_per_proxy}"
            )
        if self.n_hours < 1:
            raise ConfigError(f"n_hours must be >= 1, got {self.n_hours}")
        if self.mem_window_hours < 0:
            raise ConfigError("mem_window_hours must be >= 0")
        if self.partition_count < 1:
            raise ConfigError("partition_count must be >= 1")
        if self.replication_factor < 1:
            raise ConfigError("replication_factor must be >= 1")
        if self.load <= 0:
            raise ConfigError(f"load must be > 0, got {self.load}")
        for name in ("key_col", "size_col", "ts_col", "hour_col", "min15_col", "skip_rows"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0")
        return self
