"""
Script to benchmark rotation policies by replaying a command trace.
"""
from rotating_cache.store import RotatingCache
from rotating_cache.parser import CommandParser
from rotating_cache.options import CacheOptions, ROTATE_TYPES
from rotating_cache.rotation.utils.data_synthesizer import WorkloadSynthesizer, write_workload

import argparse

from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv
load_dotenv(override=True)

import logging
logger = logging.getLogger(__name__)


def configure_logging(log_file: str = "benchmark.log") -> None:
    # write log to a file
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )


class Benchmarker:
    def __init__(self, cache: RotatingCache, parser: CommandParser):
        self._dispatch = {
            "set": cache.set,
            "get": cache.get,
            "del": cache.delete,
            "ttl": cache.ttl,
        }
        self._cache = cache
        self._parser = parser
        self._n_commands = 0
        self._n_errors = 0

    def execute(self, command_str: str):
        """
        Execute a trace command on the cache, errors are logged and skipped
        """
        logger.debug(f"Command string: {command_str}")
        try:
            cmd, args = self._parser.parse(command_str)
            logger.debug(f"Parsed command: {cmd} with args: {args}")
            # only dispatch the command, no need to get response
            self._dispatch[cmd](*args)
            self._n_commands += 1
        except Exception as e:
            self._n_errors += 1
            logger.debug(f"ERROR: {str(e)}")

    def run(self, commands: Iterable[str]) -> dict:
        for cmd in commands:
            if cmd:
                self.execute(cmd)
        return self.report()

    def report(self) -> dict:
        stats = self._cache.stats()
        return {
            **stats.to_dict(),
            **self._cache.rotation.get_metrics(),
            "hit_ratio": stats.hit_ratio(),
            "n_commands": self._n_commands,
            "n_errors": self._n_errors,
        }


def command_stream(path: str):
    with Path(path).expanduser().open("r") as f:
        for line in f:
            yield line.strip()


if __name__ == "__main__":
    # argument parser for choosing rotation policy
    parser = argparse.ArgumentParser(description="Benchmark rotation policies.")
    parser.add_argument(
        "--rotate",
        type=str,
        choices=list(ROTATE_TYPES),
        default="oldest",
        help="Rotation policy to use (default: oldest)"
    )
    parser.add_argument(
        "--max-keys",
        type=int,
        default=10,
        help="Cache key limit (default: 10)"
    )
    parser.add_argument(
        "--workload",
        type=str,
        default="workload.txt",
        help="Trace file, generated if it does not exist (default: workload.txt)"
    )
    args = parser.parse_args()
    configure_logging()

    if not Path(args.workload).expanduser().exists():
        n = write_workload(args.workload, WorkloadSynthesizer(capacity=args.max_keys * 2))
        logger.info(f"Generated {n} commands into {args.workload}")

    options = CacheOptions.from_env().override(rotate_type=args.rotate, max_keys=args.max_keys, checkperiod=0)
    with RotatingCache(options) as cache:
        benchmarker = Benchmarker(cache, CommandParser())
        metrics = benchmarker.run(command_stream(args.workload))

    logger.info("Benchmarking completed.")
    logger.info(f"Metrics collected: {metrics}")
    logger.info(f"Hit Ratio: {metrics['hit_ratio']:.2f}")
