"""
Per-task context handed to job functions
"""

from collections import Counter
from dataclasses import dataclass, field

from common.currency import DEFAULT_LOCALE


@dataclass
class TaskContext:
    """Formatting settings and the task-local counters of one map or reduce task"""
    task_id: str
    locale: str = DEFAULT_LOCALE
    currency: str = 'USD'
    counters: Counter = field(default_factory=Counter)
