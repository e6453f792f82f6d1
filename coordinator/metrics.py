"""
Performance metrics collection for MapReduce jobs.
"""

import json
import os
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, Optional

import psutil

from common.counters import COMBINE_INPUT_RECORDS, COMBINE_OUTPUT_RECORDS


def total_size(paths: Iterable[str]) -> int:
    return sum(os.path.getsize(p) for p in paths if os.path.exists(p))


@dataclass
class JobMetrics:
    """Metrics for a single MapReduce job execution."""

    job_id: str
    start_time: float
    end_time: float
    map_phase_start: float
    map_phase_end: float
    reduce_phase_start: float
    reduce_phase_end: float
    num_map_tasks: int
    num_reduce_tasks: int
    use_combiner: bool
    input_size_bytes: int
    intermediate_size_bytes: int
    output_size_bytes: int
    peak_memory_bytes: int = 0
    combiner_reduction_ratio: float = 0.0
    counters: Dict[str, int] = field(default_factory=dict)

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase execution time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase execution time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        return asdict(self)

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, sort_keys=True)


class MetricsCollector:
    """Collects and manages metrics for MapReduce jobs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}
        self.process = psutil.Process()

    def _sample_memory(self, job_id: str):
        rss = self.process.memory_info().rss
        metrics = self.job_metrics[job_id]
        metrics.peak_memory_bytes = max(metrics.peak_memory_bytes, rss)

    def start_job(self, job_id: str, num_map_tasks: int, num_reduce_tasks: int,
                  use_combiner: bool, input_files: Iterable[str]):
        """Initialize metrics tracking for a new job."""
        now = time.time()
        self.job_metrics[job_id] = JobMetrics(
            job_id=job_id,
            start_time=now,
            end_time=0,
            map_phase_start=now,
            map_phase_end=0,
            reduce_phase_start=0,
            reduce_phase_end=0,
            num_map_tasks=num_map_tasks,
            num_reduce_tasks=num_reduce_tasks,
            use_combiner=use_combiner,
            input_size_bytes=total_size(input_files),
            intermediate_size_bytes=0,
            output_size_bytes=0
        )
        self._sample_memory(job_id)

    def end_map_phase(self, job_id: str):
        """Mark the end of the map phase."""
        if job_id in self.job_metrics:
            self.job_metrics[job_id].map_phase_end = time.time()
            self._sample_memory(job_id)

    def start_reduce_phase(self, job_id: str, intermediate_files: Iterable[str]):
        """Mark the start of the reduce phase and record the intermediate data size."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.reduce_phase_start = time.time()
            metrics.intermediate_size_bytes = total_size(intermediate_files)

    def end_job(self, job_id: str, output_files: Iterable[str], counters: Dict[str, int]):
        """Mark job completion and record output size and counters."""
        if job_id not in self.job_metrics:
            return

        metrics = self.job_metrics[job_id]
        metrics.reduce_phase_end = time.time()
        metrics.end_time = metrics.reduce_phase_end
        metrics.output_size_bytes = total_size(output_files)
        metrics.counters = dict(counters)
        self._sample_memory(job_id)

        combine_input = counters.get(COMBINE_INPUT_RECORDS, 0)
        if combine_input > 0:
            metrics.combiner_reduction_ratio = \
                1.0 - (counters.get(COMBINE_OUTPUT_RECORDS, 0) / combine_input)

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
