"""
Named job counters
Every task accumulates its own Counter; the coordinator merges them once the
tasks finish. Merging is a plain sum, so the order and grouping in which task
counters arrive does not change the result.
"""

from collections import Counter
from typing import Dict, Iterable, Mapping

# Framework counters maintained by the executors
MAP_INPUT_RECORDS = 'MAP_INPUT_RECORDS'
MAP_SKIPPED_RECORDS = 'MAP_SKIPPED_RECORDS'
MAP_OUTPUT_RECORDS = 'MAP_OUTPUT_RECORDS'
COMBINE_INPUT_RECORDS = 'COMBINE_INPUT_RECORDS'
COMBINE_OUTPUT_RECORDS = 'COMBINE_OUTPUT_RECORDS'
REDUCE_INPUT_GROUPS = 'REDUCE_INPUT_GROUPS'
REDUCE_INPUT_RECORDS = 'REDUCE_INPUT_RECORDS'
REDUCE_OUTPUT_RECORDS = 'REDUCE_OUTPUT_RECORDS'

# Job counter: number of distinct stock symbols seen by the reducers
STOCK_SYMBOLS = 'STOCK_SYMBOLS'


def merge_counters(*counter_maps: Mapping[str, int]) -> Dict[str, int]:
    """Sum any number of counter mappings, keeping counters whose total is zero"""
    merged: Counter = Counter()
    for counters in counter_maps:
        merged.update(counters)
    return dict(merged)


def initial_counters(names: Iterable[str]) -> Dict[str, int]:
    """Zero-valued counters so declared names are reported even if never incremented"""
    return {name: 0 for name in names}
