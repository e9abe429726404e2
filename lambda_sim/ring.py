# lambda_sim/ring.py
"""
Consistent hash ring with bounded loads.

The key space is split into a fixed number of partitions. Each member is put on
the ring `replication_factor` times; each partition is hashed onto the ring and
walks clockwise until it finds a member whose partition count is still below

    ceil((partition_count // n_members) * load)

Routing a key is then `partitions[xxh64(key) % partition_count]`, a plain table
lookup that never mutates the ring.
"""
import logging
import math
from typing import Dict, Iterable, List

import numpy as np
import xxhash

from lambda_sim.errors import ConfigError

logger = logging.getLogger(__name__)


def hash64(data: bytes) -> int:
    return xxhash.xxh64_intdigest(data)


class HashRing:
    def __init__(
        self,
        members: Iterable[str],
        partition_count: int = 271,
        replication_factor: int = 20,
        load: float = 1.25,
    ):
        self.members: List[str] = list(dict.fromkeys(members))
        if not self.members:
            raise ConfigError("cannot build a hash ring without members")
        if partition_count < 1 or replication_factor < 1 or load <= 0:
            raise ConfigError(
                f"bad ring config: partition_count={partition_count}, "
                f"replication_factor={replication_factor}, load={load}"
            )

        self.partition_count = int(partition_count)
        self.replication_factor = int(replication_factor)
        self.load = float(load)

        # ring position -> member
        ring: Dict[int, str] = {}
        for m in self.members:
            for i in range(self.replication_factor):
                ring[hash64(f"{m}{i}".encode())] = m
        self._points = np.array(sorted(ring), dtype=np.uint64)
        self._owners = [ring[int(h)] for h in self._points]

        self._loads: Dict[str, int] = {m: 0 for m in self.members}
        self._partitions: List[str] = [""] * self.partition_count
        self._distribute()

    def average_load(self) -> int:
        """Upper bound on the number of partitions a single member may own."""
        return math.ceil(self.partition_count // len(self.members) * self.load)

    def _distribute(self):
        bound = self.average_load()
        n_points = len(self._points)
        for part_id in range(self.partition_count):
            h = np.uint64(hash64(part_id.to_bytes(8, "little")))
            idx = int(np.searchsorted(self._points, h, side="left"))
            if idx >= n_points:
                idx = 0

            # walk at most one full turn
            for _ in range(n_points):
                owner = self._owners[idx]
                if self._loads[owner] + 1 <= bound:
                    self._partitions[part_id] = owner
                    self._loads[owner] += 1
                    break
                idx = (idx + 1) % n_points
            else:
                raise ConfigError(
                    f"not enough room to distribute {self.partition_count} partitions "
                    f"over {len(self.members)} members with load={self.load}"
                )

    def partition_id(self, key: bytes) -> int:
        return hash64(key) % self.partition_count

    def partition_owner(self, part_id: int) -> str:
        return self._partitions[part_id]

    def locate(self, key) -> str:
        """Route a key (str or bytes) to its member."""
        if isinstance(key, str):
            key = key.encode()
        return self._partitions[self.partition_id(key)]

    def load_distribution(self) -> Dict[str, int]:
        return dict(self._loads)

    def __len__(self):
        return len(self.members)

    def __repr__(self):
        return (f"HashRing(members={len(self.members)}, partitions={self.partition_count}, "
                f"replication={self.replication_factor}, load={self.load})")
