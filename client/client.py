#!/usr/bin/env python3
"""
Market Capitalization Client CLI
Runs the highest-market-cap-per-symbol job over a daily prices dataset

Exit codes: 0 when the job completed and all output was written, 1 when the
job failed, 2 on usage errors (no job is started).
"""

import argparse
import logging
import sys

from client.monitoring import format_job_summary
from common.config import JobConfig
from common.errors import ConfigError, JobExecutionError
from coordinator.job_runner import run_job

EXIT_SUCCESS = 0
EXIT_JOB_FAILED = 1
EXIT_USAGE = 2

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='market-cap',
        description='Highest market capitalization per stock symbol'
    )
    parser.add_argument('input', help='Daily prices CSV file or directory of files')
    parser.add_argument('output', help='Output directory (deleted first if it exists)')
    parser.add_argument('--locale', help='Locale for currency formatting (default: en_US)')
    parser.add_argument('--currency', help='ISO 4217 currency code (default: from locale)')
    parser.add_argument('--num-map-tasks', type=int, help='Number of map tasks')
    parser.add_argument('--num-reduce-tasks', type=int, help='Number of reduce tasks')
    parser.add_argument('--max-workers', type=int, help='Size of the worker thread pool')
    parser.add_argument('--use-combiner', action='store_true', default=None,
                        help='Take local maxima before the shuffle')
    parser.add_argument('--keep-intermediate', action='store_true', default=None,
                        help='Keep intermediate map output after the job')
    parser.add_argument('--metrics-file', help='Write job metrics as JSON to this file')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: INFO)')
    return parser


def build_config(args) -> JobConfig:
    """Turn parsed arguments into a JobConfig; flags override the environment"""
    return JobConfig.from_env(
        args.input,
        args.output,
        locale=args.locale,
        currency=args.currency,
        num_map_tasks=args.num_map_tasks,
        num_reduce_tasks=args.num_reduce_tasks,
        max_workers=args.max_workers,
        use_combiner=args.use_combiner,
        keep_intermediate=args.keep_intermediate,
        metrics_file=args.metrics_file,
    )


def main(argv=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits with 2 on usage errors and 0 for --help
        return e.code

    try:
        config = build_config(args)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    try:
        result = run_job(config)
    except JobExecutionError as e:
        print(f"✗ Job failed: {e}", file=sys.stderr)
        return EXIT_JOB_FAILED

    print("✓ Job completed successfully!")
    print(format_job_summary(result))
    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())
