#!/usr/bin/env python3
"""
Reduce Task Executor
Executes reduce tasks by reading intermediate data, grouping by key,
applying reduce functions, and writing final output
"""

import json
import logging
import os
import time
from collections import defaultdict

from common.counters import REDUCE_INPUT_GROUPS, REDUCE_INPUT_RECORDS, REDUCE_OUTPUT_RECORDS
from common.currency import DEFAULT_LOCALE
from common.errors import ShuffleError
from worker.function_loader import FunctionLoader
from worker.task_context import TaskContext

logger = logging.getLogger(__name__)


def output_file_name(partition_id: int) -> str:
    return f"part-{partition_id:05d}.txt"


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, task_id: int, partition_id: int, intermediate_files: list,
                 map_reduce_file: str, output_path: str, job_id: str,
                 locale: str = DEFAULT_LOCALE, currency: str = 'USD'):
        """
        Initialize the reduce executor

        Args:
            task_id: Unique ID for this reduce task
            partition_id: Partition ID this reduce task is responsible for
            intermediate_files: List of intermediate file paths to read
            map_reduce_file: Job file path or module name
            output_path: Directory path where final output should be written
            job_id: Unique job identifier
            locale: Locale passed to job functions through the task context
            currency: Currency code passed to job functions through the task context
        """
        self.task_id = task_id
        self.partition_id = partition_id
        self.intermediate_files = intermediate_files
        self.map_reduce_file = map_reduce_file
        self.output_path = output_path
        self.job_id = job_id
        self.locale = locale
        self.currency = currency
        self.loader = FunctionLoader(map_reduce_file)

    def execute(self) -> dict:
        """
        Execute the reduce task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'counters' and 'output_file' fields
        """
        start_time = time.time()
        context = TaskContext(
            task_id=f"{self.job_id}_reduce_{self.task_id}",
            locale=self.locale,
            currency=self.currency,
        )

        try:
            logger.info(f"Reduce task {self.task_id}: Loading reduce function")
            reduce_func = self.loader.get_reduce_function()

            key_groups = self._read_and_group_intermediate()
            logger.info(f"Reduce task {self.task_id}: Grouped {len(key_groups)} unique keys")

            results = []
            for key in sorted(key_groups.keys()):  # Sort by key for deterministic output
                values = key_groups[key]
                context.counters[REDUCE_INPUT_GROUPS] += 1
                context.counters[REDUCE_INPUT_RECORDS] += len(values)
                for out_key, out_value in reduce_func(key, iter(values), context):
                    results.append((out_key, out_value))
            context.counters[REDUCE_OUTPUT_RECORDS] += len(results)

            output_file = self._write_output(results)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Reduce task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'counters': dict(context.counters),
                'output_file': output_file,
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Reduce task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'counters': {},
                'output_file': None,
            }

    def _read_and_group_intermediate(self) -> dict:
        """
        Read all intermediate files and group by key

        Returns:
            Dictionary mapping key (as string) to list of values

        Raises:
            ShuffleError: If a file is missing or holds a corrupt line
        """
        key_groups = defaultdict(list)
        lines_processed = 0

        for filepath in self.intermediate_files:
            if not os.path.exists(filepath):
                raise ShuffleError(f"Intermediate file not found: {filepath}")

            with open(filepath, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue

                    try:
                        record = json.loads(line)
                        key_groups[str(record['key'])].append(record['value'])
                    except (json.JSONDecodeError, KeyError, TypeError) as e:
                        raise ShuffleError(
                            f"Corrupt intermediate record at {filepath}:{line_number}: {e}"
                        ) from e
                    lines_processed += 1

        logger.info(f"Reduce task {self.task_id}: Read {len(self.intermediate_files)} files, "
                    f"processed {lines_processed} records")
        return key_groups

    def _write_output(self, results: list) -> str:
        """
        Write final reduce output

        Args:
            results: List of (key, value) tuples to write

        Returns:
            Path of the written part file
        """
        os.makedirs(self.output_path, exist_ok=True)
        output_file = os.path.join(self.output_path, output_file_name(self.partition_id))
        tmp_file = output_file + '.tmp'

        with open(tmp_file, 'w', encoding='utf-8') as f:
            for key, value in results:
                f.write(f"{key}\t{value}\n")
        os.replace(tmp_file, output_file)

        logger.info(f"Reduce task {self.task_id}: Wrote output to {output_file}")
        return output_file
