# lambda_sim/main.py
import argparse
import logging
import sys

from lambda_sim.config import Config
from lambda_sim.errors import SimError
from lambda_sim.report import write_lambda_summary, write_mem_usage, write_timeline
from lambda_sim.simulator import Simulator
from lambda_sim.trace import read_trace

logger = logging.getLogger("lambda_sim")

DEFAULTS = Config()


def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        prog="lambda-sim",
        description="Replay an access trace over proxies and their lambda pools; "
                    "write per-lambda reuse timeline and memory usage.",
    )
    # original single-dash flags are kept as the primary spelling
    ap.add_argument("-input", "--input", dest="input_csv", default=DEFAULTS.input_csv,
                    help="path to the input csv trace")
    ap.add_argument("-reuseOutput", "--reuse_output", dest="reuse_output_csv",
                    default=DEFAULTS.reuse_output_csv, help="path to the reuse output csv file")
    ap.add_argument("-memOutput", "--mem_output", dest="mem_output_csv",
                    default=DEFAULTS.mem_output_csv, help="path to the mem output csv file")
    ap.add_argument("-s", "--proxies", dest="n_proxies", type=int, default=DEFAULTS.n_proxies,
                    help="number of proxy servers")
    ap.add_argument("-l", "--lambdas", dest="lambdas_per_proxy", type=int,
                    default=DEFAULTS.lambdas_per_proxy, help="number of lambdas per proxy")
    ap.add_argument("-hr", "--hours", dest="n_hours", type=int, default=DEFAULTS.n_hours,
                    help="duration of the traces (hours)")
    ap.add_argument("-d", "--data_shards", dest="data_shards", type=int,
                    default=DEFAULTS.data_shards, help="number of data shards for RS erasure coding")
    ap.add_argument("-p", "--parity_shards", dest="parity_shards", type=int,
                    default=DEFAULTS.parity_shards, help="number of parity shards for RS erasure coding")

    ap.add_argument("--seed", type=int, default=None,
                    help="placement seed; default is seeded from wall clock")
    ap.add_argument("--mem_window", dest="mem_window_hours", type=int,
                    default=DEFAULTS.mem_window_hours,
                    help="only placements with hour < mem_window count towards memory output")
    ap.add_argument("--partitions", dest="partition_count", type=int,
                    default=DEFAULTS.partition_count, help="hash ring partition count")
    ap.add_argument("--replication", dest="replication_factor", type=int,
                    default=DEFAULTS.replication_factor, help="hash ring points per proxy")
    ap.add_argument("--load", type=float, default=DEFAULTS.load,
                    help="hash ring load bound factor")
    ap.add_argument("--skip_rows", type=int, default=DEFAULTS.skip_rows,
                    help="leading trace rows to skip (e.g. a header)")

    ap.add_argument("-memTimelineOutput", "--mem_timeline_output", "--memTimelineOutput", default=None,
                    help="optional: write per-lambda hourly memory timeline here")
    ap.add_argument("-summaryOutput", "--summary_output", "--summaryOutput", default=None,
                    help="optional: write per-lambda summary csv here")
    ap.add_argument("--threads", type=int, default=1,
                    help="> 1 drains each proxy's records on its own thread")
    ap.add_argument("-v", "--verbose", action="store_true", help="log every record")
    return ap.parse_args(argv)


def build_config(args) -> Config:
    fields = Config.__dataclass_fields__
    return Config(**{k: v for k, v in vars(args).items() if k in fields})


def run(cfg: Config, threads: int = 1, mem_timeline_output: str = None,
        summary_output: str = None) -> dict:
    sim = Simulator(cfg)
    records = read_trace(cfg)
    if threads > 1:
        summary = sim.run_partitioned(records, max_workers=threads)
    else:
        summary = sim.run(records)

    write_timeline(sim.timelines.reuse, cfg.reuse_output_csv, cfg.n_hours)
    write_mem_usage(sim.timelines.memory, cfg.mem_output_csv)
    if mem_timeline_output:
        write_timeline(sim.timelines.memory_hourly, mem_timeline_output, cfg.n_hours)
    if summary_output:
        write_lambda_summary(sim.lambda_frame(), summary_output)
    return summary


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    cfg = build_config(args)
    logger.info(
        f"proxies={cfg.n_proxies} lambdas/proxy={cfg.lambdas_per_proxy} "
        f"shards={cfg.data_shards}+{cfg.parity_shards} hours={cfg.n_hours} input={cfg.input_csv}"
    )
    try:
        run(cfg, threads=args.threads, mem_timeline_output=args.mem_timeline_output,
            summary_output=args.summary_output)
    except SimError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
