# lambda_sim/errors.py


class SimError(Exception):
    """Base class for fatal simulation errors."""


class ConfigError(SimError, ValueError):
    """Bad configuration: topology, shard counts, ring settings or unreachable paths."""


class TraceFormatError(SimError, ValueError):
    """A trace row that cannot be turned into a Record."""
