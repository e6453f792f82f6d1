#!/usr/bin/env python3
"""
Job Manager for MapReduce Coordinator
Handles job state management, task generation, and progress tracking
"""

import glob
import math
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from common.config import JobConfig
from common.errors import JobExecutionError


class JobStatus(Enum):
    """Status of a MapReduce job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    SHUFFLE_PHASE = "shuffle_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(Enum):
    """Status of individual map or reduce tasks"""
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MapTask:
    """Represents a single map task"""
    task_id: int
    input_path: str
    start_offset: int
    end_offset: int
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0


@dataclass
class ReduceTask:
    """Represents a single reduce task"""
    task_id: int
    partition_id: int
    intermediate_files: List[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0


@dataclass
class Job:
    """Represents a complete MapReduce job"""
    job_id: str
    config: JobConfig
    status: JobStatus = JobStatus.PENDING
    input_files: List[str] = field(default_factory=list)
    map_tasks: List[MapTask] = field(default_factory=list)
    reduce_tasks: List[ReduceTask] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0
    error_message: str = ""

    @property
    def intermediate_dir(self) -> str:
        return os.path.join(self.config.intermediate_dir, self.job_id)


def list_input_files(input_path: str) -> List[str]:
    """
    Resolve an input location to the files it contains

    A file is its own input. For a directory, every regular file directly
    inside it is an input except names starting with '_' or '.', which are
    markers such as _SUCCESS.

    Raises:
        JobExecutionError: If the location does not exist
    """
    if os.path.isfile(input_path):
        return [input_path]
    if not os.path.isdir(input_path):
        raise JobExecutionError(f"Input path does not exist: {input_path}")

    return sorted(
        os.path.join(input_path, name)
        for name in os.listdir(input_path)
        if not name.startswith(('_', '.')) and os.path.isfile(os.path.join(input_path, name))
    )


class JobManager:
    """Manages all MapReduce jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, config: JobConfig, job_id: Optional[str] = None) -> Job:
        """Create new job from a configuration"""
        with self.lock:
            job = Job(
                job_id=job_id or f"market-cap-{uuid.uuid4().hex[:8]}",
                config=config,
                start_time=time.time()
            )
            self.jobs[job.job_id] = job
            return job

    def generate_map_tasks(self, job: Job) -> List[MapTask]:
        """
        Split the input files into map tasks

        The split size is total input bytes divided by the requested number of
        map tasks; splits never span two files, so a directory of many small
        files may produce more tasks than requested.
        """
        job.input_files = list_input_files(job.config.input_path)
        sizes = {path: os.path.getsize(path) for path in job.input_files}
        total_size = sum(sizes.values())
        split_size = max(1, math.ceil(total_size / job.config.num_map_tasks))

        map_tasks = []
        for path in job.input_files:
            file_size = sizes[path]
            start = 0
            while start < file_size:
                end = min(start + split_size, file_size)
                map_tasks.append(MapTask(
                    task_id=len(map_tasks),
                    input_path=path,
                    start_offset=start,
                    end_offset=end
                ))
                start = end

        job.map_tasks = map_tasks
        return map_tasks

    def generate_reduce_tasks(self, job: Job) -> List[ReduceTask]:
        """Create R reduce tasks with intermediate file assignments"""
        reduce_tasks = []
        for partition_id in range(job.config.num_reduce_tasks):
            # Find all intermediate files for this partition
            intermediate_pattern = os.path.join(job.intermediate_dir, f"map-*-reduce-{partition_id}.txt")
            intermediate_files = sorted(glob.glob(intermediate_pattern))

            task = ReduceTask(
                task_id=partition_id,
                partition_id=partition_id,
                intermediate_files=intermediate_files
            )
            reduce_tasks.append(task)

        job.reduce_tasks = reduce_tasks
        return reduce_tasks

    def get_job(self, job_id: str) -> Optional[Job]:
        with self.lock:
            return self.jobs.get(job_id)

    def set_job_status(self, job_id: str, status: JobStatus):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.status = status

    def mark_task_assigned(self, task):
        """Record a new attempt of a map or reduce task"""
        with self.lock:
            task.status = TaskStatus.ASSIGNED
            task.attempts += 1

    def mark_task_failed(self, task):
        with self.lock:
            task.status = TaskStatus.FAILED

    def mark_map_task_completed(self, job_id: str, task_id: int):
        """Mark map task as completed"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.map_tasks):
                job.map_tasks[task_id].status = TaskStatus.COMPLETED

                # Check if all map tasks completed
                if all(t.status == TaskStatus.COMPLETED for t in job.map_tasks):
                    job.status = JobStatus.SHUFFLE_PHASE

    def mark_reduce_task_completed(self, job_id: str, task_id: int):
        """Mark reduce task as completed"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.reduce_tasks):
                job.reduce_tasks[task_id].status = TaskStatus.COMPLETED

                # Check if all reduce tasks completed
                if all(t.status == TaskStatus.COMPLETED for t in job.reduce_tasks):
                    job.status = JobStatus.COMPLETED
                    job.end_time = time.time()

    def mark_job_failed(self, job_id: str, error_message: str):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.status = JobStatus.FAILED
                job.error_message = error_message
                job.end_time = time.time()

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status with progress"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return None

            map_completed = sum(1 for t in job.map_tasks if t.status == TaskStatus.COMPLETED)
            reduce_completed = sum(1 for t in job.reduce_tasks if t.status == TaskStatus.COMPLETED)
            total_tasks = len(job.map_tasks) + len(job.reduce_tasks)

            progress = int(((map_completed + reduce_completed) / total_tasks * 100)) if total_tasks > 0 else 0

            return {
                'status': job.status.value,
                'progress': progress,
                'map_completed': map_completed,
                'map_total': len(job.map_tasks),
                'reduce_completed': reduce_completed,
                'reduce_total': len(job.reduce_tasks),
                'error_message': job.error_message
            }
