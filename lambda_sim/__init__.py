"""
lambda_sim - trace-driven simulator of key routing and erasure-coded shard
placement over proxies and their lambda pools.

Usage:
    from lambda_sim import Config, Simulator, read_trace

    cfg = Config(input_csv="trace.csv")
    sim = Simulator(cfg)
    sim.run(read_trace(cfg))
"""

from lambda_sim.config import Config
from lambda_sim.errors import ConfigError, SimError, TraceFormatError
from lambda_sim.placement import ShardPlacer
from lambda_sim.proxy import Lambda, Proxy, ShardObject
from lambda_sim.ring import HashRing
from lambda_sim.simulator import Simulator
from lambda_sim.timeline import Timelines
from lambda_sim.trace import Record, read_trace

__version__ = "0.1.0"
__all__ = [
    "Config", "ConfigError", "SimError", "TraceFormatError", "ShardPlacer",
    "Lambda", "Proxy", "ShardObject", "HashRing", "Simulator", "Timelines",
    "Record", "read_trace",
]
