"""Scenario tests for the trace replay loop."""

import random
from collections import Counter

import numpy as np
import pytest

from lambda_sim.config import MIB, Config
from lambda_sim.errors import ConfigError, TraceFormatError
from lambda_sim.placement import ShardPlacer
from lambda_sim.ring import HashRing
from lambda_sim.simulator import Simulator
from lambda_sim.trace import Record

from helpers import rec


def small_cfg(**kw):
    base = dict(n_proxies=1, lambdas_per_proxy=4, data_shards=2, parity_shards=1,
                n_hours=4, seed=7)
    base.update(kw)
    return Config(**base)


def random_trace(n_records: int, n_keys: int, n_hours: int, seed: int = 42):
    rnd = random.Random(seed)
    out = []
    for i in range(n_records):
        hour = i * n_hours // n_records  # non-decreasing, like a real trace
        key = f"key-{rnd.randrange(n_keys)}"
        out.append(Record(key, rnd.randrange(1, 64) * MIB, "", hour, hour * 4))
    return out


class TestScenario:
    """1 proxy, 4 lambdas, RS(2, 1): one miss followed by one hit."""

    def test_miss_then_hit(self):
        sim = Simulator(small_cfg())
        proxy = sim.proxies[0]

        assert sim.step(rec("k1", 300, 0)) is False
        idxs = proxy.placements["k1"]
        assert len(set(idxs)) == 3
        for i in idxs:
            obj = proxy.lambdas[i].kvs["k1"]
            assert (obj.size, obj.freq) == (150 * MIB, 0)
            assert sim.timelines.reuse[i, 0] == 1
            assert sim.timelines.memory[i] == 300

        assert sim.step(rec("k1", 300, 1)) is True
        assert proxy.placements["k1"] == idxs
        for i in idxs:
            obj = proxy.lambdas[i].kvs["k1"]
            assert (obj.size, obj.freq) == (150 * MIB, 1)
            assert sim.timelines.reuse[i, 1] == 1
            assert sim.timelines.memory[i] == 300
        assert sim.timelines.memory.sum() == 900

    def test_run_summary(self):
        sim = Simulator(small_cfg())
        s = sim.run([rec("k1", 300, 0), rec("k1", 300, 1), rec("k2", 10, 1)])
        assert s["records"] == 3
        assert s["hits"] == 1
        assert s["misses"] == 2
        assert s["keys"] == 2
        assert s["hit_ratio"] == pytest.approx(1 / 3)
        assert s["proxy_records"] == {"0": 3}


class TestConfiguration:
    """Fatal configuration errors surface before any record is processed."""

    def test_shards_exceed_pool(self):
        with pytest.raises(ConfigError, match="cannot exceed"):
            Simulator(small_cfg(lambdas_per_proxy=2))

    def test_no_proxies(self):
        with pytest.raises(ConfigError):
            Simulator(small_cfg(n_proxies=0))

    def test_ring_with_unknown_member(self):
        with pytest.raises(ConfigError, match="without a proxy"):
            Simulator(small_cfg(), ring=HashRing(["elsewhere"]))

    def test_hour_outside_timeline(self):
        sim = Simulator(small_cfg(n_hours=4))
        with pytest.raises(TraceFormatError, match="outside timeline"):
            sim.step(rec("k1", 1, 4))


class TestInvariants:
    """Properties over a random multi-proxy trace."""

    N_HOURS = 24

    @pytest.fixture
    def trace(self):
        return random_trace(1500, 120, self.N_HOURS)

    @pytest.fixture
    def sim(self, trace):
        cfg = Config(n_proxies=3, lambdas_per_proxy=8, data_shards=3, parity_shards=2,
                     n_hours=self.N_HOURS, mem_window_hours=12, seed=5)
        sim = Simulator(cfg)
        sim.run(trace)
        return sim

    def test_routing_is_stable(self, sim, trace):
        for r in trace[:100]:
            assert sim.route(r.key) is sim.route(r.key)

    def test_every_key_lives_on_one_proxy(self, sim, trace):
        for key in {r.key for r in trace}:
            owners = [p.proxy_id for p in sim.proxies if key in p]
            assert owners == [sim.route(key).proxy_id]

    def test_placement_cardinality(self, sim):
        for p in sim.proxies:
            for key, idxs in p.placements.items():
                assert len(idxs) == 5
                assert len(set(idxs)) == 5
                assert all(0 <= i < 8 for i in idxs)
                for i in idxs:
                    assert key in p.lambdas[i].kvs

    def test_frequency_counts_hits(self, sim, trace):
        counts = Counter(r.key for r in trace)
        for p in sim.proxies:
            for key, idxs in p.placements.items():
                for i in idxs:
                    assert p.lambdas[i].kvs[key].freq == counts[key] - 1

    def test_timeline_totals(self, sim, trace):
        counts = Counter(r.key for r in trace)
        assert sim.timelines.reuse.sum() == len(trace) * 5
        for p in sim.proxies:
            for local, lam in enumerate(p.lambdas):
                expected = sum(counts[k] for k in lam.kvs)
                assert sim.timelines.reuse[p.global_index(local)].sum() == expected

    def test_memory_only_from_window(self, sim, trace):
        first_seen = {}
        for r in trace:
            first_seen.setdefault(r.key, r)
        expected = sum(r.size // MIB * 5 for r in first_seen.values() if r.hour < 12)
        assert sim.timelines.memory.sum() == expected

    def test_mem_used_matches_objects_when_sizes_fixed(self):
        cfg = Config(n_proxies=2, lambdas_per_proxy=6, data_shards=2, parity_shards=2,
                     n_hours=10, seed=1)
        sim = Simulator(cfg)
        sim.run([Record(f"k{i % 7}", 8 * MIB, "", i % 10, 0) for i in range(50)])
        for p in sim.proxies:
            for lam in p.lambdas:
                assert lam.mem_used == sum(o.size for o in lam.kvs.values())

    def test_lambda_frame(self, sim):
        df = sim.lambda_frame()
        assert len(df) == 24
        assert list(df["lambda_idx"]) == list(range(24))
        assert df["accesses"].sum() == sim.timelines.reuse.sum()
        assert df["mem_snapshot_mib"].sum() == sim.timelines.memory.sum()


class TestPartitionedRun:
    """Per-proxy threads give the same per-proxy totals as the sequential loop."""

    def test_totals_match_sequential(self):
        trace = random_trace(2000, 200, 16, seed=3)
        cfg = Config(n_proxies=4, lambdas_per_proxy=6, data_shards=3, parity_shards=1,
                     n_hours=16, mem_window_hours=8, seed=3)

        seq = Simulator(cfg)
        s1 = seq.run(trace)
        par = Simulator(cfg, placer=ShardPlacer(seed=3))
        s2 = par.run_partitioned(iter(trace), max_workers=4)

        for k in ("records", "hits", "misses", "keys", "proxy_records"):
            assert s1[k] == s2[k]
        for p in seq.proxies:
            rows = list(p.global_range())
            assert seq.timelines.reuse[rows].sum() == par.timelines.reuse[rows].sum()
            assert np.array_equal(seq.timelines.reuse[rows].sum(axis=0),
                                  par.timelines.reuse[rows].sum(axis=0))
            assert seq.timelines.memory[rows].sum() == par.timelines.memory[rows].sum()

    def test_partitioned_checks_hours(self):
        sim = Simulator(small_cfg(n_hours=2))
        with pytest.raises(TraceFormatError):
            sim.run_partitioned([rec("k1", 1, 0), rec("k2", 1, 5)])
