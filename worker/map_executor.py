#!/usr/bin/env python3
"""
Map Task Executor
Executes map tasks by reading input splits, applying map functions,
partitioning output, and writing intermediate files
"""

import json
import logging
import os
import time
import zlib
from collections import defaultdict

from common.counters import (
    COMBINE_INPUT_RECORDS,
    COMBINE_OUTPUT_RECORDS,
    MAP_INPUT_RECORDS,
    MAP_OUTPUT_RECORDS,
    MAP_SKIPPED_RECORDS,
)
from common.currency import DEFAULT_LOCALE
from worker.function_loader import FunctionLoader
from worker.task_context import TaskContext

logger = logging.getLogger(__name__)


def partition_for_key(key, num_partitions: int) -> int:
    """Stable hash partitioning; the same key maps to the same partition in every process"""
    return zlib.crc32(str(key).encode('utf-8')) % num_partitions


def intermediate_file_name(task_id: int, partition: int) -> str:
    return f"map-{task_id}-reduce-{partition}.txt"


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, input_path: str, start_offset: int,
                 end_offset: int, num_reduce_tasks: int, map_reduce_file: str,
                 use_combiner: bool, job_id: str, intermediate_dir: str,
                 locale: str = DEFAULT_LOCALE, currency: str = 'USD'):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task
            input_path: Path to input file
            start_offset: Byte offset where this task should start reading
            end_offset: Byte offset where this task should stop reading
            num_reduce_tasks: Number of reduce tasks (for partitioning)
            map_reduce_file: Job file path or module name
            use_combiner: Whether to apply combiner function
            job_id: Unique job identifier
            intermediate_dir: Root directory for intermediate files
            locale: Locale passed to job functions through the task context
            currency: Currency code passed to job functions through the task context
        """
        self.task_id = task_id
        self.input_path = input_path
        self.start_offset = start_offset
        self.end_offset = end_offset
        self.num_reduce_tasks = num_reduce_tasks
        self.map_reduce_file = map_reduce_file
        self.use_combiner = use_combiner
        self.job_id = job_id
        self.intermediate_dir = intermediate_dir
        self.locale = locale
        self.currency = currency
        self.loader = FunctionLoader(map_reduce_file)

    @property
    def job_intermediate_dir(self) -> str:
        return os.path.join(self.intermediate_dir, self.job_id)

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'counters' and 'intermediate_files' fields
        """
        start_time = time.time()
        context = TaskContext(
            task_id=f"{self.job_id}_map_{self.task_id}",
            locale=self.locale,
            currency=self.currency,
        )

        try:
            logger.info(f"Map task {self.task_id}: Loading map function")
            map_func = self.loader.get_map_function()
            read_record = self.loader.get_record_reader()

            logger.info(f"Map task {self.task_id}: Reading split "
                        f"{self.input_path}[{self.start_offset}:{self.end_offset}]")
            intermediate = defaultdict(list)
            for offset, line in self._read_input_split():
                context.counters[MAP_INPUT_RECORDS] += 1
                record = read_record(line)
                if record is None:
                    context.counters[MAP_SKIPPED_RECORDS] += 1
                    continue

                for out_key, out_value in map_func(offset, record, context):
                    partition = partition_for_key(out_key, self.num_reduce_tasks)
                    intermediate[partition].append((out_key, out_value))
                    context.counters[MAP_OUTPUT_RECORDS] += 1

            logger.info(f"Map task {self.task_id}: Generated "
                        f"{context.counters[MAP_OUTPUT_RECORDS]} intermediate pairs")

            if self.use_combiner:
                intermediate = self._apply_combiner(intermediate, context)
                logger.info(f"Map task {self.task_id}: After combiner: "
                            f"{context.counters[COMBINE_OUTPUT_RECORDS]} pairs")

            files = self._write_intermediate_files(intermediate)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Map task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'counters': dict(context.counters),
                'intermediate_files': files,
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Map task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'counters': {},
                'intermediate_files': [],
            }

    def _read_input_split(self):
        """
        Read assigned portion of input file with line boundary alignment

        A line belongs to the split in which it starts: every split except the
        first skips the line that straddles its start offset, and every split
        finishes the line that straddles its end offset.

        Yields:
            (byte_offset, line) tuples for non-blank lines
        """
        with open(self.input_path, 'rb') as f:
            if self.start_offset > 0:
                f.seek(self.start_offset - 1)
                f.readline()  # Rest of the line owned by the previous split

            while True:
                position = f.tell()
                if position >= self.end_offset:
                    break
                raw = f.readline()
                if not raw:
                    break
                line = raw.decode('utf-8', errors='replace').rstrip('\r\n')
                if line.strip():
                    yield position, line

    def _apply_combiner(self, intermediate: dict, context: TaskContext) -> dict:
        """
        Apply combiner function to local map output

        Args:
            intermediate: Dictionary mapping partition_id to list of (key, value) pairs
            context: Task context passed through to the combiner

        Returns:
            Dictionary with same structure but with combined values
        """
        combiner_func = self.loader.get_combiner_function()
        if not combiner_func:
            return intermediate

        combined = {}
        for partition, kv_pairs in intermediate.items():
            key_groups = defaultdict(list)
            for k, v in kv_pairs:
                key_groups[k].append(v)
            context.counters[COMBINE_INPUT_RECORDS] += len(kv_pairs)

            combined_pairs = []
            for key, values in key_groups.items():
                for out_key, out_value in combiner_func(key, values, context):
                    combined_pairs.append((out_key, out_value))
            context.counters[COMBINE_OUTPUT_RECORDS] += len(combined_pairs)

            combined[partition] = combined_pairs

        return combined

    def _write_intermediate_files(self, intermediate: dict) -> list:
        """
        Write intermediate key-value pairs to disk in JSON lines format

        Each file is written under a temporary name and renamed into place, so
        a reduce task never sees a half-written file from a failed attempt.

        Returns:
            List of written file paths
        """
        os.makedirs(self.job_intermediate_dir, exist_ok=True)

        written = []
        for partition in sorted(intermediate):
            filename = os.path.join(self.job_intermediate_dir,
                                    intermediate_file_name(self.task_id, partition))
            tmp_filename = filename + '.tmp'

            with open(tmp_filename, 'w', encoding='utf-8') as f:
                for key, value in intermediate[partition]:
                    f.write(json.dumps({'key': key, 'value': value}) + '\n')
            os.replace(tmp_filename, filename)
            written.append(filename)

        return written
