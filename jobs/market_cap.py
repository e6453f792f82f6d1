"""
Highest market capitalization per stock symbol.

Reads the NYSE / NASDAQ daily prices dataset and outputs, for every stock
symbol, the highest market capitalization (closing price times traded volume)
observed on any single day.

    map:     PriceRecord           -> (symbol, close * volume)
    combine: (symbol, [caps])      -> (symbol, local max)
    reduce:  (symbol, [caps])      -> (symbol, "$4,500.00"), STOCK_SYMBOLS += 1

Values reach the reducer in no particular order, so the reducer only relies
on max(), which gives the same answer for any ordering or grouping.
"""

import math

from common.counters import STOCK_SYMBOLS
from common.currency import format_currency
from common.errors import PreconditionError
from common.records import parse_price_record

COUNTERS = (STOCK_SYMBOLS,)


def read_record(line):
    """Parse one dataset line; header rows come back as None and are skipped"""
    return parse_price_record(line)


def capitalization(record) -> float:
    """
    Market capitalization of one trading day.

    Raises:
        PreconditionError: If the closing price or volume is negative or not finite
    """
    close, volume = record.close, record.volume
    if not (math.isfinite(close) and close >= 0):
        raise PreconditionError(
            f"Invalid closing price {close!r} for {record.symbol} on {record.date}"
        )
    if not (math.isfinite(volume) and volume >= 0):
        raise PreconditionError(
            f"Invalid volume {volume!r} for {record.symbol} on {record.date}"
        )
    return float(close * volume)


def map_function(key, record, context):
    """
    Map function: emit (symbol, market cap) for one daily price record.

    Args:
        key: Byte offset of the record in its input file (unused)
        record: Parsed PriceRecord
        context: Task context (unused)

    Yields:
        (symbol, capitalization) tuple
    """
    yield (record.symbol, capitalization(record))


def combiner_function(key, values, context):
    """
    Combiner function: keep only the largest local market cap per symbol.

    Stays in raw numbers and leaves the symbol counter alone; both belong to
    the reducer.
    """
    yield (key, max(values))


def reduce_function(key, values, context):
    """
    Reduce function: highest market cap for one symbol, formatted as currency.

    Args:
        key: Stock symbol
        values: Market caps for the symbol, in arbitrary order
        context: Task context providing locale, currency and counters

    Yields:
        (symbol, formatted highest market cap) tuple
    """
    # 0.0 is only a safe starting point because caps are never negative
    highest_cap = 0.0
    for value in values:
        if value < 0:
            raise PreconditionError(f"Negative market cap {value!r} for {key}")
        highest_cap = max(highest_cap, value)

    context.counters[STOCK_SYMBOLS] += 1
    yield (key, format_currency(highest_cap, context.locale, context.currency))
