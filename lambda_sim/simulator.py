# lambda_sim/simulator.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from lambda_sim.config import Config
from lambda_sim.errors import ConfigError, TraceFormatError
from lambda_sim.placement import ShardPlacer
from lambda_sim.proxy import Proxy
from lambda_sim.ring import HashRing
from lambda_sim.timeline import Timelines
from lambda_sim.trace import Record

logger = logging.getLogger(__name__)


class Simulator:
    """
    Replays a trace over `n_proxies` proxies of `lambdas_per_proxy` lambdas.

    Usage:
        sim = Simulator(cfg)
        sim.run(read_trace(cfg))
        sim.timelines.reuse   # [lambda][hour]
        sim.timelines.memory  # [lambda]
    """

    def __init__(self, cfg: Config, placer: Optional[ShardPlacer] = None,
                 ring: Optional[HashRing] = None):
        self.cfg = cfg.validate()
        self.placer = placer or ShardPlacer(seed=cfg.seed)

        self.proxies: List[Proxy] = [
            Proxy(str(i), i, cfg.lambdas_per_proxy, cfg.data_shards, cfg.parity_shards)
            for i in range(cfg.n_proxies)
        ]
        # member id -> position in self.proxies
        self.proxy_index: Dict[str, int] = {p.proxy_id: i for i, p in enumerate(self.proxies)}

        self.ring = ring or HashRing(
            list(self.proxy_index),
            partition_count=cfg.partition_count,
            replication_factor=cfg.replication_factor,
            load=cfg.load,
        )
        unknown = set(self.ring.members) - set(self.proxy_index)
        if unknown:
            raise ConfigError(f"ring members without a proxy: {sorted(unknown)}")

        self.timelines = Timelines.zeros(cfg.n_lambdas, cfg.n_hours, cfg.mem_window_hours)

        self.n_records = 0
        self.hits = 0
        self.misses = 0
        self.proxy_records = [0] * len(self.proxies)

        logger.info(f"{self.ring}; partitions per proxy: {self.ring.load_distribution()}")

    def route(self, key: str) -> Proxy:
        return self.proxies[self.proxy_index[self.ring.locate(key)]]

    def _check_hour(self, rec: Record):
        if rec.hour >= self.cfg.n_hours:
            raise TraceFormatError(
                f"key {rec.key}: hour bucket {rec.hour} outside timeline of {self.cfg.n_hours} hours"
            )

    def step(self, rec: Record) -> bool:
        self._check_hour(rec)
        proxy = self.route(rec.key)
        logger.debug("key %s mapped to proxy %s", rec.key, proxy.proxy_id)
        hit = proxy.access(rec, self.placer, self.timelines)
        self._count(proxy.index, 1, int(hit))
        return hit

    def _count(self, proxy_idx: int, n: int, hits: int):
        self.n_records += n
        self.hits += hits
        self.misses += n - hits
        self.proxy_records[proxy_idx] += n

    def run(self, records: Iterable[Record]):
        """Consume the records in order, single pass."""
        for rec in records:
            self.step(rec)
        self._log_summary()
        return self.summary()

    def run_partitioned(self, records: Iterable[Record], max_workers: Optional[int] = None):
        """
        Route every record first, then drain each proxy's queue on its own thread.

        A proxy only writes the accumulator rows in its own global range, so the
        threads share no state. Each proxy draws placements from a child
        generator; per-proxy order is preserved, cross-proxy order is not needed.
        """
        queues: List[List[Record]] = [[] for _ in self.proxies]
        for rec in records:
            self._check_hour(rec)
            queues[self.proxy_index[self.ring.locate(rec.key)]].append(rec)

        placers = self.placer.spawn(len(self.proxies))
        with ThreadPoolExecutor(max_workers=max_workers or len(self.proxies)) as ex:
            futures = [
                ex.submit(self._drain, proxy, queue, placer)
                for proxy, queue, placer in zip(self.proxies, queues, placers)
            ]
            for proxy, fut in zip(self.proxies, futures):
                n, hits = fut.result()
                self._count(proxy.index, n, hits)

        self._log_summary()
        return self.summary()

    def _drain(self, proxy: Proxy, queue: List[Record], placer: ShardPlacer) -> Tuple[int, int]:
        hits = 0
        for rec in queue:
            hits += proxy.access(rec, placer, self.timelines)
        return len(queue), hits

    def summary(self) -> dict:
        return {
            "records": self.n_records,
            "hits": self.hits,
            "misses": self.misses,
            "hit_ratio": self.hits / self.n_records if self.n_records else 0.0,
            "keys": sum(len(p.placements) for p in self.proxies),
            "proxy_records": {p.proxy_id: self.proxy_records[p.index] for p in self.proxies},
        }

    def _log_summary(self):
        s = self.summary()
        logger.info(
            f"replayed {s['records']} records: hits={s['hits']} misses={s['misses']} "
            f"hit_ratio={s['hit_ratio']:.4f} keys={s['keys']}"
        )
        logger.info(f"records per proxy: {s['proxy_records']}")

    def lambda_frame(self) -> pd.DataFrame:
        """One row per lambda, ordered by global index."""
        rows = []
        tl = self.timelines
        for p in self.proxies:
            for local, lam in enumerate(p.lambdas):
                g = p.global_index(local)
                rows.append({
                    "lambda_idx": g,
                    "proxy_id": p.proxy_id,
                    "local_idx": local,
                    "objects": len(lam.kvs),
                    "mem_used_bytes": lam.mem_used,
                    "accesses": int(tl.reuse[g].sum()),
                    "mem_snapshot_mib": int(tl.memory[g]),
                })
        return pd.DataFrame(rows)
