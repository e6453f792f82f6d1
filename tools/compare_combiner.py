#!/usr/bin/env python3
"""
Run the same job with and without combiner to measure effectiveness.
"""

import argparse
import json
import os
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from client.monitoring import format_duration, format_size  # noqa: E402
from common.config import JobConfig  # noqa: E402
from coordinator.job_runner import run_job  # noqa: E402


def read_output(output_path: str) -> list:
    """All output lines of a job, in part file order."""
    lines = []
    for name in sorted(os.listdir(output_path)):
        if name.startswith('part-'):
            with open(os.path.join(output_path, name), encoding='utf-8') as f:
                lines.extend(f.read().splitlines())
    return lines


def compare(input_path: str, num_map_tasks: int = 8, num_reduce_tasks: int = 4,
            work_dir: str = None) -> dict:
    """
    Run the job twice on the same input, without and then with the combiner.

    Returns:
        Dictionary with the metrics of both runs and whether their outputs match
    """
    work_dir = work_dir or tempfile.mkdtemp(prefix='compare-combiner-')
    runs = {}
    outputs = {}

    for use_combiner in (False, True):
        label = 'with_combiner' if use_combiner else 'without_combiner'
        config = JobConfig(
            input_path=input_path,
            output_path=os.path.join(work_dir, label),
            num_map_tasks=num_map_tasks,
            num_reduce_tasks=num_reduce_tasks,
            use_combiner=use_combiner,
        )
        result = run_job(config)
        runs[label] = result.metrics.to_dict()
        outputs[label] = read_output(result.output_path)

    return {
        'runs': runs,
        'outputs_match': outputs['without_combiner'] == outputs['with_combiner'],
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('input', help='Daily prices CSV file or directory')
    parser.add_argument('--num-map-tasks', type=int, default=8)
    parser.add_argument('--num-reduce-tasks', type=int, default=4)
    parser.add_argument('--save', help='Write the comparison as JSON to this file')
    args = parser.parse_args(argv)

    print("=" * 60)
    print("COMBINER COMPARISON")
    print("=" * 60)
    comparison = compare(args.input, args.num_map_tasks, args.num_reduce_tasks)

    for label, metrics in comparison['runs'].items():
        total = metrics['end_time'] - metrics['start_time']
        print(f"\n{label.replace('_', ' ').capitalize()}:")
        print(f"  Total time: {format_duration(total)}")
        print(f"  Intermediate data: {format_size(metrics['intermediate_size_bytes'])}")
        print(f"  Combiner reduction: {metrics['combiner_reduction_ratio']:.1%}")

    print(f"\nOutputs match: {comparison['outputs_match']}")

    if args.save:
        with open(args.save, 'w') as f:
            json.dump(comparison, f, indent=2)
        print(f"Saved comparison to {args.save}")

    return 0 if comparison['outputs_match'] else 1


if __name__ == '__main__':
    sys.exit(main())
