"""
Daily stock price records
Parses lines of the NYSE / NASDAQ daily prices dataset into PriceRecord objects
"""

import csv
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from common.errors import MalformedRecordError

# Column layout of the daily prices CSV files
FIELDS = (
    'exchange',
    'stock_symbol',
    'date',
    'stock_price_open',
    'stock_price_high',
    'stock_price_low',
    'stock_price_close',
    'stock_volume',
    'stock_price_adj_close',
)

HEADER_MARKER = FIELDS[0]


@dataclass(frozen=True)
class PriceRecord:
    """One trading day of one stock symbol"""
    exchange: str
    symbol: str
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: Union[int, float]
    adj_close: float


def is_header(line: str) -> bool:
    """Check whether a line is the CSV header row"""
    return line.lstrip().lower().startswith(HEADER_MARKER + ',')


def parse_price_record(line: str) -> Optional[PriceRecord]:
    """
    Parse one CSV line into a PriceRecord

    Args:
        line: Raw input line, without the trailing newline

    Returns:
        The parsed record, or None for blank lines and header rows

    Raises:
        MalformedRecordError: If the line does not match the dataset layout
    """
    if not line.strip() or is_header(line):
        return None

    fields = next(csv.reader([line]))
    if len(fields) != len(FIELDS):
        raise MalformedRecordError(
            f"Expected {len(FIELDS)} columns, got {len(fields)}: {line!r}"
        )

    exchange, symbol, day = (value.strip() for value in fields[:3])
    if not symbol:
        raise MalformedRecordError(f"Empty stock symbol: {line!r}")

    try:
        trading_day = date.fromisoformat(day)
    except ValueError as e:
        raise MalformedRecordError(f"Invalid date {day!r}: {line!r}") from e

    return PriceRecord(
        exchange=exchange,
        symbol=symbol,
        date=trading_day,
        open=_parse_float(fields[3], 'stock_price_open', line),
        high=_parse_float(fields[4], 'stock_price_high', line),
        low=_parse_float(fields[5], 'stock_price_low', line),
        close=_parse_float(fields[6], 'stock_price_close', line),
        volume=_parse_volume(fields[7], line),
        adj_close=_parse_float(fields[8], 'stock_price_adj_close', line),
    )


def _parse_float(value: str, column: str, line: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise MalformedRecordError(f"Non-numeric {column} {value!r}: {line!r}") from e


def _parse_volume(value: str, line: str) -> Union[int, float]:
    # Volumes are whole share counts in the dataset, but some vendors emit decimals
    try:
        return int(value)
    except ValueError:
        return _parse_float(value, 'stock_volume', line)
