# lambda_sim/proxy.py
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from lambda_sim.config import MIB
from lambda_sim.placement import ShardPlacer
from lambda_sim.timeline import Timelines
from lambda_sim.trace import Record

logger = logging.getLogger(__name__)


@dataclass
class ShardObject:
    key: str
    size: int  # bytes per shard
    freq: int = 0


@dataclass
class Lambda:
    kvs: Dict[str, ShardObject] = field(default_factory=dict)
    mem_used: int = 0  # bytes


class Proxy:
    """
    One front-end node and its fixed lambda pool.

    `placements` maps key -> local lambda indices holding its shards; every
    listed lambda has a ShardObject for the key. Keys are never removed.
    """

    def __init__(self, proxy_id: str, index: int, n_lambdas: int,
                 data_shards: int, parity_shards: int):
        self.proxy_id = proxy_id
        self.index = index
        self.data_shards = data_shards
        self.parity_shards = parity_shards
        self.lambdas: List[Lambda] = [Lambda() for _ in range(n_lambdas)]
        self.placements: Dict[str, List[int]] = {}

    @property
    def n_shards(self) -> int:
        return self.data_shards + self.parity_shards

    def global_index(self, local_idx: int) -> int:
        return self.index * len(self.lambdas) + local_idx

    def global_range(self) -> range:
        base = self.global_index(0)
        return range(base, base + len(self.lambdas))

    def __contains__(self, key: str) -> bool:
        return key in self.placements

    def access(self, rec: Record, placer: ShardPlacer, tl: Timelines) -> bool:
        """Apply one trace record. Returns True on hit, False on first placement."""
        shard_size = rec.size // self.data_shards

        idxs = self.placements.get(rec.key)
        if idxs is not None:
            for idx in idxs:
                obj = self.lambdas[idx].kvs[rec.key]
                obj.size = shard_size
                obj.freq += 1
                tl.record_hit(self.global_index(idx), rec.hour)
            logger.debug("[Hit] key %s on proxy %s lambdas %s", rec.key, self.proxy_id, idxs)
            return True

        idxs = placer.select(len(self.lambdas), self.n_shards)
        self.placements[rec.key] = idxs
        size_mib = rec.size // MIB
        for idx in idxs:
            lam = self.lambdas[idx]
            lam.kvs[rec.key] = ShardObject(key=rec.key, size=shard_size)
            lam.mem_used += shard_size
            tl.record_placement(self.global_index(idx), rec.hour, size_mib)
        logger.debug("[Miss] key %s on proxy %s placed on lambdas %s", rec.key, self.proxy_id, idxs)
        return False

    def __repr__(self):
        return f"Proxy(id={self.proxy_id!r}, lambdas={len(self.lambdas)}, keys={len(self.placements)})"
