#!/usr/bin/env python3
"""
Job Runner
Runs a MapReduce job on a local thread pool: map phase, shuffle barrier,
reduce phase, output commit and counter reporting
"""

import logging
import os
import shutil
from concurrent import futures
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from common.config import JobConfig
from common.counters import initial_counters, merge_counters
from common.errors import JobExecutionError
from coordinator.job_manager import Job, JobManager, JobStatus, MapTask, ReduceTask
from coordinator.metrics import JobMetrics, MetricsCollector
from worker.function_loader import FunctionLoader
from worker.map_executor import MapExecutor
from worker.reduce_executor import ReduceExecutor

logger = logging.getLogger(__name__)

SUCCESS_MARKER = '_SUCCESS'
TEMPORARY_DIR = '_temporary'

CountersHook = Callable[[Dict[str, int]], None]


@dataclass
class JobResult:
    """Outcome of a completed job"""
    job_id: str
    status: JobStatus
    output_path: str
    output_files: List[str]
    counters: Dict[str, int]
    metrics: JobMetrics


class JobRunner:
    """Drives one job from input splitting to committed output"""

    def __init__(self, config: JobConfig, on_counters: Optional[CountersHook] = None,
                 job_manager: Optional[JobManager] = None):
        self.config = config
        self.on_counters = on_counters
        self.job_manager = job_manager or JobManager()
        self.metrics = MetricsCollector()

    @property
    def temporary_output_path(self) -> str:
        return os.path.join(self.config.output_path, TEMPORARY_DIR)

    def run(self) -> JobResult:
        """
        Run the job to completion

        Raises:
            JobExecutionError: If any phase fails; the output location is left
                without a _SUCCESS marker and without partial part files
        """
        config = self.config
        job = self.job_manager.create_job(config)
        logger.info(f"Job {job.job_id}: input={config.input_path} output={config.output_path}")

        try:
            declared_counters = FunctionLoader(config.job_file).get_declared_counters()
            map_tasks = self.job_manager.generate_map_tasks(job)
            self._prepare_output()

            self.metrics.start_job(job.job_id, len(map_tasks), config.num_reduce_tasks,
                                   config.use_combiner, job.input_files)
            self.job_manager.set_job_status(job.job_id, JobStatus.MAP_PHASE)
            logger.info(f"Job {job.job_id}: Starting map phase with {len(map_tasks)} tasks "
                        f"over {len(job.input_files)} input files")
            map_results = self._run_phase(job, map_tasks, self._map_executor)

            # Every map task has finished; only now is each partition complete
            self.metrics.end_map_phase(job.job_id)
            self.job_manager.set_job_status(job.job_id, JobStatus.SHUFFLE_PHASE)
            reduce_tasks = self.job_manager.generate_reduce_tasks(job)
            self.metrics.start_reduce_phase(
                job.job_id, [f for task in reduce_tasks for f in task.intermediate_files])

            self.job_manager.set_job_status(job.job_id, JobStatus.REDUCE_PHASE)
            logger.info(f"Job {job.job_id}: Starting reduce phase with {len(reduce_tasks)} tasks")
            reduce_results = self._run_phase(job, reduce_tasks, self._reduce_executor)

            output_files = self._commit_output([r['output_file'] for r in reduce_results])
            counters = merge_counters(
                initial_counters(declared_counters),
                *(result['counters'] for result in map_results + reduce_results)
            )
        except Exception as e:
            self.job_manager.mark_job_failed(job.job_id, str(e))
            shutil.rmtree(self.temporary_output_path, ignore_errors=True)
            logger.error(f"Job {job.job_id} failed: {e}")
            if isinstance(e, JobExecutionError):
                raise
            raise JobExecutionError(f"Job {job.job_id} failed: {e}") from e
        finally:
            if not config.keep_intermediate:
                shutil.rmtree(job.intermediate_dir, ignore_errors=True)

        self.job_manager.set_job_status(job.job_id, JobStatus.COMPLETED)
        self.metrics.end_job(job.job_id, output_files, counters)
        job_metrics = self.metrics.get_metrics(job.job_id)
        if config.metrics_file:
            job_metrics.save_to_file(config.metrics_file)

        logger.info(f"Job {job.job_id} completed in {job_metrics.total_time_seconds:.2f}s")
        self._report_counters(job.job_id, counters)

        return JobResult(
            job_id=job.job_id,
            status=JobStatus.COMPLETED,
            output_path=config.output_path,
            output_files=output_files,
            counters=counters,
            metrics=job_metrics,
        )

    def _prepare_output(self):
        """Delete the output location if it exists, then create it empty"""
        output = os.path.abspath(self.config.output_path)
        source = os.path.abspath(self.config.input_path)
        if source == output or source.startswith(output + os.sep):
            raise JobExecutionError(
                f"Output location {self.config.output_path} would delete the job input"
            )

        if os.path.isdir(output) and not os.path.islink(output):
            shutil.rmtree(output)
            logger.info(f"Deleted existing output directory {output}")
        elif os.path.lexists(output):
            os.remove(output)
            logger.info(f"Deleted existing output file {output}")
        os.makedirs(output)

    def _map_executor(self, job: Job, task: MapTask) -> MapExecutor:
        return MapExecutor(
            task_id=task.task_id,
            input_path=task.input_path,
            start_offset=task.start_offset,
            end_offset=task.end_offset,
            num_reduce_tasks=job.config.num_reduce_tasks,
            map_reduce_file=job.config.job_file,
            use_combiner=job.config.use_combiner,
            job_id=job.job_id,
            intermediate_dir=job.config.intermediate_dir,
            locale=job.config.locale,
            currency=job.config.currency,
        )

    def _reduce_executor(self, job: Job, task: ReduceTask) -> ReduceExecutor:
        return ReduceExecutor(
            task_id=task.task_id,
            partition_id=task.partition_id,
            intermediate_files=task.intermediate_files,
            map_reduce_file=job.config.job_file,
            output_path=self.temporary_output_path,
            job_id=job.job_id,
            locale=job.config.locale,
            currency=job.config.currency,
        )

    def _run_phase(self, job: Job, tasks: list, make_executor) -> List[dict]:
        """Run all tasks of one phase on the thread pool and wait for every one of them"""
        if not tasks:
            return []

        results = []
        with futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            pending = [pool.submit(self._run_task, job, task, make_executor) for task in tasks]
            try:
                for future in futures.as_completed(pending):
                    results.append(future.result())
            except Exception:
                for future in pending:
                    future.cancel()
                raise
        return results

    def _run_task(self, job: Job, task, make_executor) -> dict:
        """Run one task, retrying failed attempts up to max_task_attempts"""
        kind = 'Map' if isinstance(task, MapTask) else 'Reduce'
        max_attempts = self.config.max_task_attempts

        result = {}
        for attempt in range(1, max_attempts + 1):
            self.job_manager.mark_task_assigned(task)
            result = make_executor(job, task).execute()
            if result['success']:
                if isinstance(task, MapTask):
                    self.job_manager.mark_map_task_completed(job.job_id, task.task_id)
                else:
                    self.job_manager.mark_reduce_task_completed(job.job_id, task.task_id)
                return result
            logger.warning(f"{kind} task {task.task_id} attempt {attempt}/{max_attempts} "
                           f"failed: {result['error_message']}")

        self.job_manager.mark_task_failed(task)
        raise JobExecutionError(
            f"{kind} task {task.task_id} failed after {max_attempts} attempts: "
            f"{result['error_message']}"
        )

    def _commit_output(self, part_files: List[str]) -> List[str]:
        """Move part files from the temporary directory into place and mark success"""
        committed = []
        for part_file in sorted(part_files):
            destination = os.path.join(self.config.output_path, os.path.basename(part_file))
            os.replace(part_file, destination)
            committed.append(destination)

        shutil.rmtree(self.temporary_output_path, ignore_errors=True)
        with open(os.path.join(self.config.output_path, SUCCESS_MARKER), 'w'):
            pass
        return committed

    def _report_counters(self, job_id: str, counters: Dict[str, int]):
        logger.info(f"Job {job_id}: Counters: {len(counters)}")
        for name in sorted(counters):
            logger.info(f"\t{name}={counters[name]}")
        if self.on_counters:
            self.on_counters(dict(counters))


def run_job(config: JobConfig, on_counters: Optional[CountersHook] = None) -> JobResult:
    """Run a job described by config and return its result"""
    return JobRunner(config, on_counters=on_counters).run()
