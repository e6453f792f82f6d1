"""
Job configuration
A JobConfig is built once, validated on construction and handed to the
coordinator; nothing mutates it afterwards.
"""

import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping, Optional

from common.currency import DEFAULT_LOCALE, resolve_currency
from common.errors import ConfigError

DEFAULT_JOB = 'jobs.market_cap'

# Environment variables read by JobConfig.from_env
ENV_LOCALE = 'MARKETCAP_LOCALE'
ENV_CURRENCY = 'MARKETCAP_CURRENCY'
ENV_NUM_MAP_TASKS = 'MAPREDUCE_NUM_MAP_TASKS'
ENV_NUM_REDUCE_TASKS = 'MAPREDUCE_NUM_REDUCE_TASKS'
ENV_MAX_WORKERS = 'MAPREDUCE_MAX_WORKERS'
ENV_INTERMEDIATE_DIR = 'MAPREDUCE_INTERMEDIATE_DIR'


def default_intermediate_dir() -> str:
    return os.path.join(tempfile.gettempdir(), 'mapreduce-intermediate')


@dataclass(frozen=True)
class JobConfig:
    """Everything needed to run one market capitalization job"""
    input_path: str
    output_path: str
    locale: str = DEFAULT_LOCALE
    currency: Optional[str] = None
    job_file: str = DEFAULT_JOB
    num_map_tasks: int = 4
    num_reduce_tasks: int = 2
    use_combiner: bool = False
    max_workers: int = 4
    max_task_attempts: int = 2
    intermediate_dir: str = field(default_factory=default_intermediate_dir)
    keep_intermediate: bool = False
    metrics_file: Optional[str] = None

    def __post_init__(self):
        if not self.input_path:
            raise ConfigError("Input location must not be empty")
        if not self.output_path:
            raise ConfigError("Output location must not be empty")

        for name in ('num_map_tasks', 'num_reduce_tasks', 'max_workers', 'max_task_attempts'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        # Fix the currency at construction time so every task formats identically
        object.__setattr__(self, 'currency', resolve_currency(self.locale, self.currency))

    @classmethod
    def from_env(cls, input_path: str, output_path: str,
                 environ: Optional[Mapping[str, str]] = None, **overrides) -> 'JobConfig':
        """
        Build a config from environment variables plus explicit overrides

        Overrides whose value is None are ignored, so CLI flags that were not
        given fall back to the environment and then to the defaults.
        """
        env = os.environ if environ is None else environ
        values = {}

        if env.get(ENV_LOCALE):
            values['locale'] = env[ENV_LOCALE]
        if env.get(ENV_CURRENCY):
            values['currency'] = env[ENV_CURRENCY]
        if env.get(ENV_INTERMEDIATE_DIR):
            values['intermediate_dir'] = env[ENV_INTERMEDIATE_DIR]
        for name, var in (('num_map_tasks', ENV_NUM_MAP_TASKS),
                          ('num_reduce_tasks', ENV_NUM_REDUCE_TASKS),
                          ('max_workers', ENV_MAX_WORKERS)):
            if env.get(var):
                values[name] = _parse_int(var, env[var])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(input_path=input_path, output_path=output_path, **values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
