"""Exceptions raised across the coordinator, workers and jobs."""


class MapReduceError(Exception):
    """Base exception for all framework and job errors."""


class ConfigError(MapReduceError):
    """Raised when a job configuration value is invalid."""


class JobExecutionError(MapReduceError):
    """Raised when a job cannot run to completion."""


class ShuffleError(JobExecutionError):
    """Raised when intermediate map output is missing or corrupt."""


class MalformedRecordError(MapReduceError, ValueError):
    """Raised when an input line cannot be parsed into a record."""


class PreconditionError(MapReduceError, ValueError):
    """Raised when a parsed record violates the job's input contract."""
