"""Formatting helpers for reporting job progress and results."""

from typing import Dict


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds / 60)
    seconds = seconds % 60
    if minutes < 60:
        return f"{minutes}m {seconds:.1f}s"
    hours = int(minutes / 60)
    minutes = minutes % 60
    return f"{hours}h {minutes}m {seconds:.1f}s"


def format_size(size_bytes: int) -> str:
    """Format bytes into human-readable size."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ("KB", "MB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_counters(counters: Dict[str, int]) -> str:
    """One 'NAME=value' line per counter, sorted by name."""
    return "\n".join(f"  {name}={counters[name]}" for name in sorted(counters))


def format_job_summary(result) -> str:
    """Summarize a finished job: timings, data sizes, output files and counters."""
    metrics = result.metrics
    lines = [
        f"Job ID: {result.job_id}",
        f"Status: {result.status.value}",
        f"Runtime: {format_duration(metrics.total_time_seconds)}"
        f" (map {format_duration(metrics.map_phase_time_seconds)},"
        f" reduce {format_duration(metrics.reduce_phase_time_seconds)})",
        f"Tasks: {metrics.num_map_tasks} map, {metrics.num_reduce_tasks} reduce",
        f"Input: {format_size(metrics.input_size_bytes)}, "
        f"intermediate: {format_size(metrics.intermediate_size_bytes)}, "
        f"output: {format_size(metrics.output_size_bytes)}",
        f"Output: {result.output_path} ({len(result.output_files)} part files)",
        "Counters:",
        format_counters(result.counters),
    ]
    return "\n".join(lines)
